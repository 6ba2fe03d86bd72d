import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

# DynamoDB connection; an empty endpoint means the real AWS endpoint
DYNAMODB_ENDPOINT_URL = os.getenv("DYNAMODB_ENDPOINT_URL", "http://localhost:8000")
AWS_DEFAULT_REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "fake")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "fake")
TABLE_NAME = os.getenv("TABLE_NAME", "Evently")

# Auth tokens
JWT_SECRET = os.getenv("JWT_SECRET", "your-secret-key-here")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: List[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]
PORT = int(os.getenv("PORT", "5000"))

# Seed data
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@evently.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
