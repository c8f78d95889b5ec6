import json
from datetime import datetime
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from src.infra.config.settings import settings
from src.infra.firebase import get_firebase_manager
from src.core.logger.logger import logger
from src.api.router import health, admin_auth, admin_users, analytics, profile
from src.api.middleware.security.rate_limiter import RateLimitMiddleware
from src.api.middleware.logging.request_logging import RequestLoggingMiddleware
from src.core.exceptions.handler import ServiceError, GlobalErrorHandler

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Leafora Admin API - administration backend for the Leafora plant-care app.

## Services
- **Admin Auth**: Firebase ID token login/logout for admin accounts
- **Users**: List, search, create, update and delete user records
- **Subscriptions**: Activate, cancel and extend user subscriptions
- **Analytics**: User counts by role, status, plan and subscription state
- **Profile**: Self-service profile access for app users

## Authentication
All protected endpoints require a Firebase ID token as a Bearer credential.
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,  # 10 minutes
    )

    # Rate limiting middleware
    app.add_middleware(RateLimitMiddleware)

    # Request logging middleware (added last so it wraps everything)
    app.add_middleware(RequestLoggingMiddleware)

    # Centralized error handlers
    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(admin_auth.router)
    app.include_router(admin_users.router)
    app.include_router(analytics.router)
    app.include_router(profile.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(json.dumps({
            "message": "Starting Leafora Admin API",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION
        }))

    @app.on_event("shutdown")
    async def shutdown_event():
        get_firebase_manager().close()
        logger.info(json.dumps({
            "message": "Shutting down Leafora Admin API",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION
        }))

    return app
