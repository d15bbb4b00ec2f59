"""API errors rendered as RFC 9457 problem details.

Every error body also carries ``success: false`` and a ``message`` so that
clients written against the ``{"success": ..., "message": ...}`` envelope
can read failures the same way as successes.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .database import utcnow

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://tourism-api.example.com/problems"

VALUE_ERROR_PREFIX = "Value error, "


def problem_body(
    status: int,
    title: str,
    message: str,
    type_uri: Optional[str] = None,
    **extensions: Any,
) -> Dict[str, Any]:
    """Build the JSON body shared by every error response."""
    body = {
        "success": False,
        "message": message,
        "type": type_uri or f"about:blank#{status}",
        "title": title,
        "status": status,
    }
    body.update(extensions)
    return body


class ProblemDetailsException(HTTPException):
    """
    Base class for errors the API reports to clients.

    Subclasses pick the status, title and problem type; ``extensions`` are
    merged into the body next to the standard members.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        problem: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.title = title
        self.extensions = extensions or {}
        type_uri = f"{PROBLEM_BASE_URI}/{problem}" if problem else None

        self.problem_details = problem_body(status_code, title, detail or title, type_uri)
        if detail:
            self.problem_details["detail"] = detail
        self.problem_details.update(self.extensions)

        super().__init__(status_code=status_code, detail=detail or title, headers=headers)


class ValidationError(ProblemDetailsException):
    """Input that is missing, malformed or inconsistent (400)."""

    def __init__(self, detail: str = "The request data failed validation", errors: Optional[Dict[str, Any]] = None):
        super().__init__(
            400,
            "Validation Error",
            detail,
            problem="validation-error",
            extensions={"errors": errors} if errors else None,
        )


class AuthenticationError(ProblemDetailsException):
    """Missing, invalid or expired credentials (401)."""

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(
            401,
            "Authentication Required",
            detail,
            problem="authentication-required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Authenticated caller that may not act on the resource (403)."""

    def __init__(self, detail: str = "Not authorized to access this resource", required_role: Optional[str] = None):
        super().__init__(
            403,
            "Access Forbidden",
            detail,
            problem="access-forbidden",
            extensions={"required_role": required_role} if required_role else None,
        )


class NotFoundError(ProblemDetailsException):
    """Referenced tour, booking, item, cart or payment does not exist (404)."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if not detail:
            detail = f"{resource_type.capitalize()} not found"

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(404, "Resource Not Found", detail, problem="resource-not-found", extensions=extensions)


class InsufficientStockError(ProblemDetailsException):
    """Requested quantity exceeds the equipment in stock (400)."""

    def __init__(self, requested_quantity: int, available_quantity: int, equipment_id: Optional[str] = None):
        extensions = {
            "requested_quantity": requested_quantity,
            "available_quantity": available_quantity,
        }
        if equipment_id:
            extensions["equipment_id"] = equipment_id

        super().__init__(
            400,
            "Insufficient Stock",
            f"Not enough stock available. Only {available_quantity} items left",
            problem="insufficient-stock",
            extensions=extensions,
        )


class InvalidStateError(ProblemDetailsException):
    """Operation not allowed in the resource's current status (400)."""

    def __init__(self, resource_type: str, current_status: str, detail: Optional[str] = None):
        super().__init__(
            400,
            "Invalid State",
            detail or f"Operation not allowed for {resource_type} in status '{current_status}'",
            problem="invalid-state",
            extensions={"resource_type": resource_type, "current_status": current_status},
        )


class IdempotencyMismatchError(ProblemDetailsException):
    """Idempotency key reused with a different request body (422)."""

    def __init__(self, idempotency_key: str):
        super().__init__(
            422,
            "Idempotency Key Reused",
            "Idempotency key was already used with a different request body",
            problem="idempotency-key-reused",
            extensions={"idempotency_key": idempotency_key},
        )


def _format_violations(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    violations = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        violations.append({"field": ".".join(location), "message": message})
    return violations


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.problem_details, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body, query and path validation failures as a 400 with violations."""
    violations = _format_violations(exc.errors())
    message = violations[0]["message"] if violations else "The request data failed validation"

    return JSONResponse(
        status_code=400,
        content=problem_body(
            400,
            "Validation Error",
            message,
            f"{PROBLEM_BASE_URI}/validation-error",
            detail=message,
            violations=violations,
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap plain HTTP exceptions (unknown routes, wrong methods) in the error envelope."""
    if isinstance(exc, ProblemDetailsException):
        return await problem_details_handler(request, exc)

    detail = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    extensions = {}
    if exc.status_code >= 500:
        extensions = {"detail": detail, "error_id": str(uuid.uuid4()), "timestamp": utcnow().isoformat() + "Z"}
    return JSONResponse(
        status_code=exc.status_code,
        content=problem_body(exc.status_code, detail, detail, **extensions),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception under a fresh error id and return a generic 500."""
    error_id = str(uuid.uuid4())
    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path},
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=problem_body(
            500,
            "Internal Server Error",
            "Server error",
            f"{PROBLEM_BASE_URI}/internal-server-error",
            detail="An unexpected error occurred while processing the request",
            instance=str(request.url),
            error_id=error_id,
            timestamp=utcnow().isoformat() + "Z",
        ),
    )
