import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import auth
from app.api.deps import build_auth_context
from app.config import Settings, settings as default_settings
from app.core.errors import AuthServiceError, RateLimitedError
from app.observability import setup_logging
from app.services.sms import SmsSender

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Settings] = None,
    sms_sender: Optional[SmsSender] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Build the app with its own OTP and rate-limit stores (tests pass a fake sender and clock)."""
    config = config or default_settings
    setup_logging(config.log_level)

    app = FastAPI(
        title=config.app_name,
        description="Mobile OTP login: request a code by SMS, exchange it for a JWT",
        version="0.1.0",
        debug=config.debug,
    )
    app.state.auth = build_auth_context(config, sms_sender=sms_sender, clock=clock)

    origins = [o.strip() for o in config.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/api", tags=["Auth"])

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {config.app_name}", "status": "healthy"}

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "sms": app.state.auth.sms_sender.name}

    @app.exception_handler(AuthServiceError)
    async def auth_error_handler(request: Request, exc: AuthServiceError):
        headers = None
        if isinstance(exc, RateLimitedError):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body."})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Every error is JSON; internals stay in the log."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    logger.info("%s auth ready (sms=%s)", config.app_name, app.state.auth.sms_sender.name)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=default_settings.port)
