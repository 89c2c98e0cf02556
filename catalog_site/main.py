import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from catalog_site.core.auth import Authenticator
from catalog_site.core.config import Settings, get_settings
from catalog_site.core.errors import AppError, StorageFault
from catalog_site.core.lockout import LoginLockout
from catalog_site.core.logging import configure_logging
from catalog_site.core.permissions import ProtectedAccount
from catalog_site.core.security import configure_password_hashing
from catalog_site.core.sessions import SessionStore
from catalog_site.db.seed import ensure_user, seed_default_content
from catalog_site.db.session import build_storage
from catalog_site.db.storage import Storage
from catalog_site.routers import admin, auth, site

logger = logging.getLogger("catalog_site")

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        parts.append(f'{message} at "{location}"' if location else message)
    return "Validation error: " + "; ".join(parts)


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    configure_password_hashing(settings.password_hash_rounds)

    storage = storage or build_storage(settings)
    if settings.seed_default_content:
        seed_default_content(storage)
    if settings.admin_username and settings.admin_password:
        ensure_user(storage, settings.admin_username, settings.admin_password, role="super_admin")

    app = FastAPI(title=settings.project_name)
    app.state.settings = settings
    app.state.storage = storage
    app.state.authenticator = Authenticator(
        storage,
        SessionStore(max_age_seconds=settings.session_cookie_max_age),
        LoginLockout(max_attempts=settings.login_max_attempts, lock_seconds=settings.login_lock_seconds),
    )
    app.state.protected_account = ProtectedAccount(
        user_id=settings.protected_user_id,
        username=settings.protected_username,
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie_name,
        same_site=settings.session_cookie_same_site,
        https_only=settings.session_cookie_secure,
        max_age=settings.session_cookie_max_age,
    )

    @app.middleware("http")
    async def api_no_cache(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            response.headers.update(NO_CACHE_HEADERS)
        return response

    app.include_router(auth.router)
    app.include_router(site.router)
    app.include_router(admin.router)

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok"}

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        message = exc.message
        if isinstance(exc, StorageFault):
            logger.error("storage_fault", extra={"path": request.url.path, "error": exc.message})
            if not settings.is_development:
                message = "Internal Server Error"
        return JSONResponse({"message": message}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse({"message": format_validation_errors(exc.errors())}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.url.path})
        message = str(exc) if settings.is_development else "Internal Server Error"
        return JSONResponse({"message": message}, status_code=500)

    return app
