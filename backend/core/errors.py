"""
Application error taxonomy and the FastAPI handlers that render it as JSON.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FieldError(BaseModel):
    """A single failing field and its message"""
    field: str
    message: str


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code: int = 500
    code: str = "app_error"

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, "errors": []}


class ValidationError(AppError):
    """Raised before any mutation when an item fails validation."""
    status_code = 422
    code = "validation_error"

    def __init__(self, errors: Iterable[FieldError], message: str = "Validation failed"):
        super().__init__(message)
        self.errors: List[FieldError] = list(errors)

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def messages_for(self, field: str) -> List[str]:
        return [e.message for e in self.errors if e.field == field]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code,
            "errors": [e.model_dump() for e in self.errors],
        }

    def __str__(self) -> str:
        joined = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        return f"{self.message} ({joined})" if joined else self.message


class TransportError(AppError):
    """A remote call failed (network, status or serialization)."""
    status_code = 502
    code = "transport_error"


class ScanError(AppError):
    """Barcode acquisition failed or was cancelled."""
    status_code = 503
    code = "scan_error"


def _field_name(loc: Iterable[Any]) -> str:
    # loc looks like ('body', 'quantity') for request bodies
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def install_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        err = ValidationError(
            FieldError(field=_field_name(e.get("loc", ())), message=e.get("msg", "Invalid value"))
            for e in exc.errors()
        )
        return JSONResponse(status_code=err.status_code, content=err.to_dict())
