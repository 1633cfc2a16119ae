# codemarket/api/v1/errors.py
"""
Application-wide error responses.

- Validation problems are reported as 400 (not FastAPI's default 422)
  with a readable "field: message" summary in `detail`.
- Anything unexpected becomes a 500 whose `detail` is the exception message.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")

_LOCATIONS = {"body", "query", "path", "form", "header", "cookie"}


def validation_detail(errors) -> str:
    """
    Flatten pydantic error dicts into "field: message; field: message".
    """
    parts = []
    for err in errors:
        loc = [str(x) for x in err.get("loc", ()) if x not in _LOCATIONS]
        msg = err.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


async def _on_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": validation_detail(exc.errors())},
    )


async def _on_unexpected_error(request: Request, exc: Exception):
    logger.exception("[api] %s %s failed", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(Exception, _on_unexpected_error)
