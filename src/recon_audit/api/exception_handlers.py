"""Map domain exceptions to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from recon_audit.errors import (
    AnalysisError,
    CaseNotFoundError,
    DocumentDigestionError,
    EligibilityError,
    StorageQuotaExceededError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

# First match wins.
ERROR_STATUS_CODES = (
    (EligibilityError, 422),
    (CaseNotFoundError, 404),
    (AnalysisError, 502),
    (DocumentDigestionError, 502),
    (StorageQuotaExceededError, 507),
    (StorageWriteError, 503),
)


def status_code_for(exc: Exception) -> int:
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def _handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, EligibilityError):
        content["reason"] = exc.reason
    return JSONResponse(status_code=status_code, content=content)


def install_exception_handlers(app: FastAPI) -> None:
    for exc_type, _ in ERROR_STATUS_CODES:
        app.add_exception_handler(exc_type, _handle_domain_error)
