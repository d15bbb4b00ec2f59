"""Success envelope for JSON responses."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return jsonable_encoder(value)


def success_payload(**payload: Any) -> dict[str, Any]:
    """Build ``{"success": true, ...}`` with pydantic models rendered as JSON."""
    return {"success": True, **{key: _encode(value) for key, value in payload.items()}}


def success_response(status_code: int = 200, **payload: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=success_payload(**payload))
