# app/core/errors.py
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Sequence
import logging

logger = logging.getLogger("app.errors")


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ServerError(HTTPException):
    def __init__(self, detail: str = "Server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class ExpenseValidationError(HTTPException):
    """400 carrying every violated field rule"""

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": message, "errors": errors},
        )


def _field_name(loc: Sequence[Any]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "form")]
    return ".".join(parts) or "request"


def format_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts to [{field, message}]"""
    formatted = []
    for err in errors:
        message = str(err.get("msg", "Invalid value"))
        # pydantic prefixes custom ValueError messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({"field": _field_name(err.get("loc", ())), "message": message})
    return formatted


def http_exception_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"message": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": format_errors(exc.errors())},
    )


def server_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )
