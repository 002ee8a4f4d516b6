from contextlib import asynccontextmanager
import logging
import os

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from lessonbook.api.v1.router import api_router
from lessonbook.core.clock import isoformat, utcnow
from lessonbook.core.config import settings
from lessonbook.core.database import Database
from lessonbook.core.logging import setup_logging
from lessonbook.payments.paypal_client import PayPalProcessor
from lessonbook.payments.stripe_client import StripeProcessor

logger = logging.getLogger(__name__)


def get_version() -> str:
    """Read version from VERSION file, fallback to default if not found."""
    version_file = os.path.join(os.path.dirname(os.path.dirname(__file__)), "VERSION")
    try:
        if os.path.exists(version_file):
            with open(version_file, "r") as f:
                version = f.read().strip()
                if version:
                    return version
    except OSError as e:
        logger.warning(f"Could not read VERSION file: {e}")
    return "1.0.0"


class SPAStaticFiles(StaticFiles):
    """Static files with index.html as the fallback for unknown paths"""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != status.HTTP_404_NOT_FOUND:
                raise
            return await super().get_response("index.html", scope)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    database = Database(settings.database_url)
    try:
        database.connect()
    except Exception as e:
        if settings.is_development:
            logger.error(f"lifespan: Database connection failed - {e}")
            raise
        logger.warning(f"lifespan: Database connection failed, data routes disabled - {e}")
    app.state.database = database

    http_client = httpx.AsyncClient()
    app.state.card_processor = StripeProcessor(settings.stripe_secret_key, currency=settings.currency)
    app.state.wallet_processor = PayPalProcessor(
        settings.paypal_client_id,
        settings.paypal_client_secret,
        http=http_client,
        mode=settings.paypal_mode,
        currency=settings.currency,
    )
    logger.info("lifespan: Startup complete")

    try:
        yield
    finally:
        await http_client.aclose()
        database.dispose()
        logger.info("lifespan: Shutdown complete")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    parts = []
    for error in errors:
        field = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{field}: {error.get('msg')}" if field else error.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "; ".join(parts) or "Invalid request"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="LessonBook API",
        version=get_version(),
        debug=settings.debug,
        redirect_slashes=False,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "timestamp": isoformat(utcnow())}

    # Mounted last so API routes take precedence
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", SPAStaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
