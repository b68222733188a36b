"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wemanage.api import admin, auth, comments, notifications, projects, reports, tasks, users
from wemanage.config import get_settings
from wemanage.exceptions import Unauthorized, UnauthorizedReason, WeManageError
from wemanage.services.tokens import get_token_service

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("wemanage")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    # Raises ConfigurationError without JWT_SECRET, which aborts startup
    get_token_service()

    if not settings.google_oauth_enabled:
        logger.warning(
            "Google login disabled: GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET are not both set"
        )
    if not settings.smtp_host:
        logger.warning("SMTP_HOST not set: password reset emails cannot be delivered")

    logger.info("WeManage API started")
    yield
    logger.info("WeManage API shutting down")


app = FastAPI(
    title="WeManage API",
    description="Project and task management with team-based access control",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WeManageError)
async def wemanage_exception_handler(request: Request, exc: WeManageError):
    """Render domain errors as ``{"detail": message}`` with their status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    response = JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
    if isinstance(exc, Unauthorized):
        response.headers["WWW-Authenticate"] = "Bearer"
        if exc.reason == UnauthorizedReason.SESSION_INVALID:
            response.delete_cookie(settings.session_cookie_name)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed input is a 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Register routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(comments.router)
app.include_router(notifications.router)
app.include_router(reports.router)
app.include_router(admin.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
