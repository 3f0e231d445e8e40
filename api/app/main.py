from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging
import traceback
from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import FlashcardsException
from app.schemas.common import ErrorBody, ErrorResponse

# Import models to register them with SQLModel
from app.models import models  # noqa: F401

# Import API router
from app.api.v1 import api_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Flashcards API", version="1.0.0")


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    """Build the {"error": {...}} body every failing endpoint returns."""
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details or None))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Add exception handler for validation errors to log details
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return request validation failures as 400 VALIDATION_ERROR."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "reason": error.get("msg", "")
        }
        for error in exc.errors()
    ]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Invalid request",
        {"errors": errors}
    )


# Add exception handler for custom application exceptions
@app.exception_handler(FlashcardsException)
async def flashcards_exception_handler(request: Request, exc: FlashcardsException):
    """Handle custom application exceptions."""
    if exc.status_code >= 500:
        logger.error(f"Application exception on {request.method} {request.url.path}: {type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"Application exception on {request.method} {request.url.path}: {type(exc).__name__}: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message or exc.code, exc.details)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Database failures that escaped the services."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "Database error")


# Add global exception handler for unhandled errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions."""
    # Log full traceback
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    # In development, show full error details
    if settings.is_development:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            str(exc),
            {"type": type(exc).__name__, "traceback": traceback.format_exc()}
        )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal server error occurred. Please try again later."
    )

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    return {
        "message": "Flashcards API",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


# Include API router
app.include_router(api_router, prefix=settings.api_v1_prefix)
