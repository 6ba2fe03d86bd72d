import jwt
import pytest
from fastapi.testclient import TestClient
from evently import config
from evently.main import app
from evently.routers.auth import get_user_service
from evently.services.user_service import UserService
from tests.conftest import TEST_TABLE_NAME


@pytest.fixture
def user_service(dynamodb_resource):
    return UserService(dynamodb_resource, TEST_TABLE_NAME)


@pytest.fixture
def client(user_service):
    app.dependency_overrides[get_user_service] = lambda: user_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides = {}


@pytest.fixture
def registered_user(client):
    response = client.post(
        "/api/auth/register",
        json={"name": "Test User", "email": "test@evently.com", "password": "password123"},
    )
    return response.json()["user"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_user(client):
    response = client.post(
        "/api/auth/register",
        json={"name": " John Doe ", "email": "John@Evently.com", "password": "password123"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "User registered successfully"
    assert data["user"]["name"] == "John Doe"
    assert data["user"]["email"] == "john@evently.com"
    assert data["user"]["role"] == "user"
    assert data["user"]["avatar"]
    assert "password" not in data["user"]

    claims = jwt.decode(
        data["user"]["token"], config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM]
    )
    assert claims["userId"] == data["user"]["id"]
    assert claims["email"] == "john@evently.com"
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_register_duplicate_email(client, registered_user):
    response = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "TEST@evently.com", "password": "another123"},
    )

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "message": "User with this email already exists",
    }


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"name": "John", "email": "john@evently.com"}, "Name, email, and password are required"),
        (
            {"name": "John", "email": "not-an-email", "password": "password123"},
            "Please enter a valid email address",
        ),
        (
            {"name": "John", "email": "john@evently.com", "password": "123"},
            "Password must be at least 6 characters long",
        ),
    ],
)
def test_register_validation(client, payload, message):
    response = client.post("/api/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


def test_login(client, registered_user):
    response = client.post(
        "/api/auth/login", json={"email": "Test@Evently.com", "password": "password123"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["id"] == registered_user["id"]
    assert data["user"]["token"]


@pytest.mark.parametrize(
    "email, password",
    [("test@evently.com", "wrongpassword"), ("nobody@evently.com", "password123")],
)
def test_login_rejects_bad_credentials(client, registered_user, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_verify_token(client, registered_user):
    response = client.get("/api/auth/verify", headers=auth_header(registered_user["token"]))

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "test@evently.com"


def test_verify_without_token(client):
    response = client.get("/api/auth/verify")

    assert response.status_code == 401
    assert response.json()["message"] == "No token provided"


def test_verify_expired_token(client, registered_user):
    expired = jwt.encode(
        {"userId": registered_user["id"], "email": "test@evently.com", "role": "user", "exp": 1},
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )

    response = client.get("/api/auth/verify", headers=auth_header(expired))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_verify_token_of_unknown_user(client):
    token = jwt.encode(
        {"userId": "ghost", "email": "ghost@evently.com", "role": "user"},
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )

    response = client.get("/api/auth/verify", headers=auth_header(token))

    assert response.status_code == 401


def test_update_profile(client, registered_user):
    response = client.put(
        "/api/auth/profile",
        json={"name": "Renamed", "phone": "+1-555-0002", "location": "New York, NY"},
        headers=auth_header(registered_user["token"]),
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "Renamed"
    assert user["phone"] == "+1-555-0002"
    assert user["location"] == "New York, NY"
    assert user["email"] == "test@evently.com"


def test_change_password(client, registered_user):
    headers = auth_header(registered_user["token"])

    wrong = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "nope-nope", "newPassword": "newpass123"},
        headers=headers,
    )
    assert wrong.status_code == 401

    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "password123", "newPassword": "newpass123"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Password changed successfully"}

    old_login = client.post(
        "/api/auth/login", json={"email": "test@evently.com", "password": "password123"}
    )
    new_login = client.post(
        "/api/auth/login", json={"email": "test@evently.com", "password": "newpass123"}
    )
    assert old_login.status_code == 401
    assert new_login.status_code == 200


def test_change_password_requires_token(client):
    response = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "password123", "newPassword": "newpass123"},
    )

    assert response.status_code == 401
