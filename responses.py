"""
Response envelope

Success: {"success": true, "data"?, "message"?, "pagination"?}
Failure: {"success": false, "error"}

Absent keys are omitted rather than sent as null.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


def serialize(value: Any) -> Any:
    """Make Mongo documents JSON-safe: ObjectId -> str, datetime -> ISO UTC."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


def ok(data: Any = None, message: Optional[str] = None, pagination: Any = None) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = serialize(data)
    if message is not None:
        body["message"] = message
    if pagination is not None:
        if isinstance(pagination, BaseModel):
            pagination = pagination.model_dump(by_alias=True)
        body["pagination"] = pagination
    return body


def error_response(status_code: int, error: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error}, headers=headers)


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    if not field:
        return "Request body is required" if first.get("type") == "missing" else first.get("msg", "Invalid request")
    if first.get("type") in REQUIRED_ERROR_TYPES:
        return f"{field} is required"
    return f"{field}: {first.get('msg')}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, describe_validation_error(exc))


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, f"Rate limit exceeded: {exc.detail}")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
