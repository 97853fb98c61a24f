import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intern_portal.auth.controllers.auth_controller import router as auth_router
from intern_portal.auth.services.auth_service import AuthService
from intern_portal.config import get_settings
from intern_portal.create_tables import create_tables
from intern_portal.database import SessionLocal
from intern_portal.documents.controllers.document_controller import router as document_router
from intern_portal.errors import PortalError, RateLimited
from intern_portal.notifications.controllers.notification_controller import router as notification_router
from intern_portal.rate_limit.dependencies import api_rate_limit
from intern_portal.users.controllers.user_controller import router as user_router
from intern_portal.users.models import User, UserRole

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("intern_portal")


def _bootstrap_super_admin():
    """Create the first super admin from configuration on an empty database."""
    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return
    with SessionLocal() as session:
        if session.query(User).count() > 0:
            return
        admin = AuthService.create_user(
            session,
            "Super Admin",
            settings.BOOTSTRAP_ADMIN_EMAIL,
            settings.BOOTSTRAP_ADMIN_PASSWORD,
            UserRole.SUPER_ADMIN,
        )
        logger.info("Bootstrapped super admin %s", admin.email)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting intern portal")
    if not settings.JWT_SECRET:
        logger.error("JWT_SECRET is not set; authenticated routes will fail with CONFIG_ERROR")
    create_tables()
    _bootstrap_super_admin()
    yield
    logger.info("Intern portal stopped")


app = FastAPI(
    title="Intern Document Portal",
    description="Document lifecycle, review and notifications for internship paperwork",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Accept", "Content-Type", "Authorization", "X-Requested-With", "Origin"],
    max_age=86400,
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    headers = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
    elif exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": jsonable_encoder(exc.errors()),
        },
    )


# Routers
api_limit = [Depends(api_rate_limit)]
app.include_router(auth_router, dependencies=api_limit)
app.include_router(user_router, dependencies=api_limit)
app.include_router(document_router, dependencies=api_limit)
app.include_router(notification_router, dependencies=api_limit)


@app.get("/health")
def health():
    return {"status": "OK"}


if __name__ == "__main__":
    uvicorn.run("intern_portal.main:app", host="0.0.0.0", port=8000, reload=True)
