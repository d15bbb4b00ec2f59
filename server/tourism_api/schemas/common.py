"""Error body schemas shared by every endpoint's OpenAPI description."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Violation(BaseModel):
    field: str = Field(..., description="Dotted path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 problem details with the success envelope."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Explanation specific to this occurrence")
    violations: Optional[List[Violation]] = Field(None, description="Request validation failures")


PROBLEM_RESPONSES = {
    400: {"model": Problem, "description": "Invalid input"},
    401: {"model": Problem, "description": "Missing or invalid token"},
    403: {"model": Problem, "description": "Not allowed for this user"},
    404: {"model": Problem, "description": "Resource not found"},
}
