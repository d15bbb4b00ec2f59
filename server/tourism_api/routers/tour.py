"""Tour router for the tour catalogue."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db, to_naive_utc
from ..core.dependencies import require_admin
from ..core.exceptions import ProblemDetailsException, ValidationError
from ..core.responses import success_response
from ..core.uploads import delete_image, save_image
from ..models.user import User
from ..schemas.tour import Tour
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tours", tags=["tours"])

DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_admin)


@router.get("")
async def list_tours(db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """List all tours ordered by start date."""
    tours = await TourService(db).list_tours()
    return success_response(count=len(tours), tours=[Tour.model_validate(t) for t in tours])


@router.get("/{tour_id}")
async def get_tour(tour_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    tour = await TourService(db).get_tour_by_id_or_raise(tour_id)
    return success_response(tour=Tour.model_validate(tour))


@router.post("", status_code=201)
async def create_tour(
    name: str = Form(..., min_length=1),
    description: str = Form(..., min_length=1),
    location: str = Form(..., min_length=1),
    price: float = Form(..., ge=0),
    duration: int = Form(..., ge=1),
    date: datetime = Form(...),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """
    Create a tour from a multipart form (admin only).

    An image file is required.
    """
    if image is None or not image.filename:
        raise ValidationError(detail="Please upload an image")

    image_url = await save_image(image, "tours")
    try:
        tour = await TourService(db).create_tour(
            name=name.strip(),
            description=description.strip(),
            location=location.strip(),
            price=price,
            duration=duration,
            date=to_naive_utc(date),
            image=image_url,
        )
        return success_response(201, tour=Tour.model_validate(tour))

    except Exception as e:
        delete_image(image_url)
        if isinstance(e, ProblemDetailsException):
            raise
        logger.error(
            "Unexpected error in tour creation",
            extra={"tour_name": name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{tour_id}")
async def update_tour(
    tour_id: UUID,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    price: Optional[float] = Form(None, ge=0),
    duration: Optional[int] = Form(None, ge=1),
    date: Optional[datetime] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Update a tour; the image is replaced only when a new file is uploaded (admin only)."""
    tour_service = TourService(db)
    await tour_service.get_tour_by_id_or_raise(tour_id)

    image_url = await save_image(image, "tours") if image is not None and image.filename else None
    try:
        tour, previous_image = await tour_service.update_tour(tour_id, {
            "name": name.strip() if name else None,
            "description": description.strip() if description else None,
            "location": location.strip() if location else None,
            "price": price,
            "duration": duration,
            "date": to_naive_utc(date) if date else None,
            "image": image_url,
        })
    except Exception as e:
        delete_image(image_url)
        if isinstance(e, ProblemDetailsException):
            raise
        logger.error(
            "Unexpected error in tour update",
            extra={"tour_id": str(tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e

    delete_image(previous_image)
    return success_response(tour=Tour.model_validate(tour))


@router.delete("/{tour_id}")
async def delete_tour(
    tour_id: UUID,
    db: AsyncSession = DB_DEPENDENCY,
    admin: User = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Delete a tour with its bookings (admin only)."""
    tour = await TourService(db).delete_tour(tour_id)
    delete_image(tour.image)

    logger.info("Tour deleted", extra={"tour_id": str(tour_id), "admin_id": str(admin.id)})
    return success_response(message="Tour deleted successfully")
