"""JSON envelope shared by every non-streaming endpoint.

Each response carries a four-digit ``code``: 0xxx success, 1xxx client error,
2xxx server error, 3xxx LLM provider failure.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi.responses import JSONResponse

from llm.messages import FailureKind


class ResponseCode(str, Enum):
    """Response codes for API responses."""

    SUCCESS = "0000"

    VALIDATION_ERROR = "1000"
    NOT_FOUND = "1001"
    REQUEST_CANCELLED = "1002"
    RATE_LIMITED = "1003"

    INTERNAL_ERROR = "2000"

    LLM_NOT_CONFIGURED = "3000"
    LLM_AUTH_FAILED = "3001"
    LLM_UNAVAILABLE = "3002"


# code -> (HTTP status, default message)
CODE_DETAILS: dict[ResponseCode, tuple[int, str]] = {
    ResponseCode.SUCCESS: (200, "Operation completed successfully"),
    ResponseCode.VALIDATION_ERROR: (422, "Request validation failed"),
    ResponseCode.NOT_FOUND: (404, "Resource not found"),
    ResponseCode.REQUEST_CANCELLED: (499, "Request was cancelled"),
    ResponseCode.RATE_LIMITED: (429, "Rate limit exceeded. Please wait and retry"),
    ResponseCode.INTERNAL_ERROR: (500, "An internal error occurred"),
    ResponseCode.LLM_NOT_CONFIGURED: (503, "No LLM provider is configured"),
    ResponseCode.LLM_AUTH_FAILED: (502, "LLM provider rejected the credentials"),
    ResponseCode.LLM_UNAVAILABLE: (503, "LLM providers are unreachable"),
}

FAILURE_CODES: dict[FailureKind, ResponseCode] = {
    FailureKind.NOT_CONFIGURED: ResponseCode.LLM_NOT_CONFIGURED,
    FailureKind.AUTHENTICATION: ResponseCode.LLM_AUTH_FAILED,
    FailureKind.CONNECTIVITY: ResponseCode.LLM_UNAVAILABLE,
}


def get_message(code: ResponseCode) -> str:
    return CODE_DETAILS.get(code, (500, "Unknown error"))[1]


def get_http_status(code: ResponseCode) -> int:
    return CODE_DETAILS.get(code, (500, ""))[0]


def _envelope(
    code: ResponseCode,
    success: bool,
    message: str | None,
    request_id: str | None,
    **payload: Any,
) -> dict[str, Any]:
    return {
        "code": code.value,
        "success": success,
        "message": message or get_message(code),
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
        **payload,
    }


def success_dict(
    code: ResponseCode,
    data: Any = None,
    custom_message: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build a success envelope with ``data``."""
    return _envelope(code, True, custom_message, request_id, data=data)


def error_dict(
    code: ResponseCode,
    custom_message: str | None = None,
    error_details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build an error envelope with optional ``error_details``."""
    return _envelope(
        code, False, custom_message, request_id, error_details=error_details
    )


def success_response(
    code: ResponseCode,
    data: Any = None,
    request_id: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        content=success_dict(code, data, request_id=request_id),
        status_code=get_http_status(code),
    )


def error_response(
    code: ResponseCode,
    custom_message: str | None = None,
    error_details: dict[str, Any] | None = None,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        content=error_dict(code, custom_message, error_details, request_id),
        status_code=get_http_status(code),
        headers=headers,
    )
