from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarHTTP
import logging

from .logging_config import log_failure
from .reference import ReferenceDataError

logger = logging.getLogger("studio")

def install_error_handlers(app):
    @app.exception_handler(StarHTTP)
    async def http_exc(_: Request, exc: StarHTTP):
        return JSONResponse({"error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(ReferenceDataError)
    async def reference_unavailable(_: Request, exc: ReferenceDataError):
        log_failure("REFERENCE_DATA_UNAVAILABLE", {"detail": str(exc)})
        return JSONResponse({"error": "REFERENCE_DATA_UNAVAILABLE", "detail": str(exc)}, status_code=503)

    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse({"error": "INTERNAL_ERROR", "detail": "Unexpected error"}, status_code=500)
