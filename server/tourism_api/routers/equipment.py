"""Camping equipment router."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import require_admin
from ..core.exceptions import ProblemDetailsException, ValidationError
from ..core.responses import success_response
from ..core.uploads import delete_image, save_image
from ..models.equipment import DEFAULT_EQUIPMENT_IMAGE
from ..models.user import User
from ..schemas.equipment import Equipment, EquipmentCategory
from ..services.equipment_service import EquipmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/camping-equipment", tags=["camping-equipment"])

DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_admin)


def _discard_image(url: Optional[str]) -> None:
    if url and url != DEFAULT_EQUIPMENT_IMAGE:
        delete_image(url)


@router.get("")
async def list_equipment(
    category: Optional[EquipmentCategory] = Query(None, description="Filter by category"),
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """List camping equipment, newest first."""
    items = await EquipmentService(db).list_equipment(category.value if category else None)
    return success_response(count=len(items), equipment=[Equipment.model_validate(i) for i in items])


@router.get("/{equipment_id}")
async def get_equipment(equipment_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    equipment = await EquipmentService(db).get_equipment_by_id_or_raise(equipment_id)
    return success_response(equipment=Equipment.model_validate(equipment))


@router.post("", status_code=201)
async def create_equipment(
    name: str = Form(""),
    description: str = Form(""),
    price: Optional[float] = Form(None),
    quantity: int = Form(1, ge=0),
    category: EquipmentCategory = Form(EquipmentCategory.OTHER),
    is_available: bool = Form(True),
    low_stock_threshold: Optional[int] = Form(None, ge=0),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """
    Create equipment from a multipart form (admin only).

    Name, description and price are required; the image is optional and
    falls back to the default equipment image.
    """
    if not name.strip() or not description.strip() or price is None:
        raise ValidationError(detail="Please provide name, description, and price")

    image_url = await save_image(image, "equipment") if image is not None and image.filename else None
    try:
        equipment = await EquipmentService(db).create_equipment(
            name=name,
            description=description,
            price=price,
            performed_by=admin.username,
            quantity=quantity,
            category=category.value,
            image=image_url,
            is_available=is_available,
            low_stock_threshold=low_stock_threshold,
        )
        return success_response(201, equipment=Equipment.model_validate(equipment))

    except Exception as e:
        _discard_image(image_url)
        if isinstance(e, ProblemDetailsException):
            raise
        logger.error(
            "Unexpected error in equipment creation",
            extra={"equipment_name": name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{equipment_id}")
async def update_equipment(
    equipment_id: UUID,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    quantity: Optional[int] = Form(None, ge=0),
    category: Optional[EquipmentCategory] = Form(None),
    is_available: Optional[bool] = Form(None),
    low_stock_threshold: Optional[int] = Form(None, ge=0),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Partially update equipment; a new image replaces and deletes the old one (admin only)."""
    equipment_service = EquipmentService(db)
    await equipment_service.get_equipment_by_id_or_raise(equipment_id)

    image_url = await save_image(image, "equipment") if image is not None and image.filename else None
    try:
        equipment, previous_image = await equipment_service.update_equipment(
            equipment_id,
            {
                "name": name,
                "description": description,
                "price": price,
                "quantity": quantity,
                "category": category.value if category else None,
                "is_available": is_available,
                "low_stock_threshold": low_stock_threshold,
                "image": image_url,
            },
            performed_by=admin.username,
        )
    except Exception as e:
        _discard_image(image_url)
        if isinstance(e, ProblemDetailsException):
            raise
        logger.error(
            "Unexpected error in equipment update",
            extra={"equipment_id": str(equipment_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e

    _discard_image(previous_image)
    return success_response(equipment=Equipment.model_validate(equipment))


@router.delete("/{equipment_id}")
async def delete_equipment(
    equipment_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete equipment and its uploaded image (admin only)."""
    equipment = await EquipmentService(db).delete_equipment(equipment_id, performed_by=admin.username)
    _discard_image(equipment.image)
    return success_response(message="Equipment deleted successfully")
