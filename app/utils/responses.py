"""
Response envelopes and the HTTP errors raised by the services
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.schemas.common import StandardResponse, ErrorResponse

def _json(model, status_code: int) -> JSONResponse:
    # Documents carry dates and nested dicts straight from the store
    return JSONResponse(
        content=jsonable_encoder(model.model_dump()),
        status_code=status_code
    )

def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    """Wrap a result as {success, message, data}"""
    return _json(StandardResponse(success=True, message=message, data=data), status_code)

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Error envelope for handlers that reject input without raising"""
    return _json(
        ErrorResponse(message=message, error_code=error_code, details=details),
        status_code
    )

def _http_error(status_code: int, detail: Any) -> HTTPException:
    raise HTTPException(status_code=status_code, detail=detail)

def validation_error(message: str, errors: list = None, status_code: int = 422) -> HTTPException:
    """Reject a request whose content fails a business rule"""
    return _http_error(status_code, {"message": message, "errors": errors or []})

def not_found_error(resource: str = "Resource"):
    return _http_error(status.HTTP_404_NOT_FOUND, f"{resource} not found")

def unauthorized_error(message: str = "Unauthorized"):
    return _http_error(status.HTTP_401_UNAUTHORIZED, message)

def forbidden_error(message: str = "Forbidden"):
    return _http_error(status.HTTP_403_FORBIDDEN, message)

def conflict_error(message: str = "Conflict"):
    """Taken slugs, duplicate collaborators, imports that can no longer be undone"""
    return _http_error(status.HTTP_409_CONFLICT, message)

def rate_limit_error():
    return _http_error(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests from this address. Please wait a minute and try again."
    )
