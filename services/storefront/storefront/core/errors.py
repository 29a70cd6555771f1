"""Exception types and the app-level handlers that map them to responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.core.antiforgery import AntiforgeryValidationError

logger = logging.getLogger(__name__)


class ArgumentOutOfRangeError(ValueError):
    """Raised when a required argument is missing, blank or not parseable."""

    def __init__(self, name: str, value=None, message: str = "Must not be null or whitespace"):
        self.name = name
        self.value = value
        super().__init__(f"{message} (Parameter '{name}')")


def require_text(name: str, value) -> str:
    if value is None or not str(value).strip():
        raise ArgumentOutOfRangeError(name, value)
    return str(value)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ArgumentOutOfRangeError)
    async def _argument_out_of_range(request: Request, exc: ArgumentOutOfRangeError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AntiforgeryValidationError)
    async def _antiforgery(request: Request, exc: AntiforgeryValidationError):
        logger.warning("Anti-forgery validation failed for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"detail": "Anti-forgery token validation failed"})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        telemetry = getattr(request.app.state, "telemetry", None)
        if telemetry is not None:
            telemetry.track_exception(exc)
        return JSONResponse(status_code=500, content={"detail": "An internal error occurred. Please try again later."})
