import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from evently import config
from evently.exceptions import EventlyError
from evently.routers import auth, events, registrations

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Evently API",
    version="1.0.0",
    description="Browse events, register attendance and administer events and analytics",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


@app.exception_handler(EventlyError)
async def evently_error_handler(request: Request, exc: EventlyError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Please check your input data"
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        message = f"{message}: {field} {errors[0].get('msg', '')}".strip()
    return error_response(400, message)


api_router = APIRouter(prefix="/api")


@api_router.get("")
def read_root():
    return {"message": "Evently API is running"}


@api_router.get("/health")
def health():
    return {"status": "OK"}


api_router.include_router(events.router)
api_router.include_router(registrations.router)
api_router.include_router(auth.router)
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("evently.main:app", host="0.0.0.0", port=config.PORT)
