import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from bizcard.core.config import get_settings
from bizcard.core.logging import configure_logging
from bizcard.db import Base, get_engine
from bizcard.domain.media import DOCUMENT_EXTENSIONS
from bizcard.routers import auth as auth_router
from bizcard.routers import dashboard as dashboard_router
from bizcard.routers import public as public_router
from bizcard.routers import slug as slug_router
from bizcard.services.slug_service import SlugService

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(BASE, ".."))
WEB = os.path.join(ROOT, "web")
TEMPLATES = os.path.join(ROOT, "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com; "
            "font-src 'self' https://fonts.gstatic.com; "
            "frame-src https://www.youtube.com https://player.vimeo.com",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class CachedStaticFiles(StaticFiles):
    def file_response(self, full_path, stat_result, scope, status_code=200):
        response = super().file_response(full_path, stat_result, scope, status_code)
        response.headers["Cache-Control"] = "public, max-age=86400"
        return response


class UploadStaticFiles(CachedStaticFiles):
    """User uploads: documents are downloaded, never rendered on this origin."""

    def file_response(self, full_path, stat_result, scope, status_code=200):
        response = super().file_response(full_path, stat_result, scope, status_code)
        response.headers["Content-Security-Policy"] = "default-src 'none'; sandbox"
        if str(full_path).lower().endswith(DOCUMENT_EXTENSIONS):
            response.headers["Content-Disposition"] = "attachment"
        return response


def create_app() -> FastAPI:
    """Build the application (factory usable by uvicorn --factory)."""
    settings = get_settings()
    configure_logging(settings.log_level)

    Base.metadata.create_all(bind=get_engine())

    app = FastAPI(title="Business Card API")

    os.makedirs(settings.uploads_dir, exist_ok=True)
    os.makedirs(WEB, exist_ok=True)
    app.mount("/static/uploads", UploadStaticFiles(directory=settings.uploads_dir), name="uploads")
    app.mount("/static", CachedStaticFiles(directory=WEB), name="static")
    app.state.templates = Jinja2Templates(directory=TEMPLATES)
    app.state.slug_service = SlugService()

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    @app.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    @app.get("/")
    def index():
        return RedirectResponse("/docs", status_code=302)

    app.include_router(auth_router.router)
    app.include_router(slug_router.router)
    app.include_router(dashboard_router.router)
    app.include_router(public_router.router)

    logger.info("Business card app ready (env=%s, base=%s)", settings.app_env, settings.public_base_url)
    return app
