"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rentledger.services.errors import BillingError, OverpaymentError

logger = logging.getLogger(__name__)


def error_response(error: BillingError) -> Dict[str, Any]:
    """Create a standardized error response."""
    body: Dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }
    if isinstance(error, OverpaymentError):
        body["remaining"] = str(error.remaining)
    return {"error": body}


async def billing_error_handler(request: Request, error: BillingError) -> JSONResponse:
    """Render a domain exception with its mapped HTTP status."""
    if error.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {error.code}: {error.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} refused: {error.code}: {error.message}")
    return JSONResponse(status_code=error.http_status, content=error_response(error))


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain exception handler on an app."""
    app.add_exception_handler(BillingError, billing_error_handler)


__all__ = ["error_response", "billing_error_handler", "register_error_handlers"]
