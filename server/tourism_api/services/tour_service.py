"""Tour service for business logic operations."""

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.booking import Booking
from ..models.tour import Tour

logger = logging.getLogger(__name__)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(
        self,
        name: str,
        description: str,
        location: str,
        price: float,
        duration: int,
        date: datetime,
        image: str,
    ) -> Tour:
        """
        Create a new tour.

        Args:
            name: Tour name
            description: Tour description
            location: Destination
            price: Price per person
            duration: Length in days
            date: Start date
            image: Stored image URL path

        Returns:
            Created tour entity
        """
        tour = Tour(
            name=name,
            description=description,
            location=location,
            price=price,
            duration=duration,
            date=date,
            image=image,
        )
        self.db.add(tour)
        await self.db.commit()
        await self.db.refresh(tour)

        logger.info(
            "Tour created successfully",
            extra={"tour_id": str(tour.id), "tour_name": tour.name, "location": tour.location}
        )
        return tour

    async def get_tour_by_id(self, tour_id: UUID) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning("Tour not found", extra={"tour_id": str(tour_id)})
            raise NotFoundError(resource_type="tour", resource_id=str(tour_id))
        return tour

    async def list_tours(self) -> list[Tour]:
        stmt = select(Tour).order_by(Tour.date.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_tour(self, tour_id: UUID, changes: dict[str, Any]) -> tuple[Tour, Optional[str]]:
        """
        Apply a partial update.

        Returns:
            Tuple of the updated tour and the replaced image URL, if the image changed
        """
        tour = await self.get_tour_by_id_or_raise(tour_id)
        previous_image = None
        for field, value in changes.items():
            if value is None:
                continue
            if field == "image" and value != tour.image:
                previous_image = tour.image
            setattr(tour, field, value)

        await self.db.commit()
        await self.db.refresh(tour)

        logger.info(
            "Tour updated",
            extra={"tour_id": str(tour.id), "fields": sorted(k for k, v in changes.items() if v is not None)}
        )
        return tour, previous_image

    async def delete_tour(self, tour_id: UUID) -> Tour:
        """
        Delete a tour and its bookings.

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id_or_raise(tour_id)
        await self.db.execute(delete(Booking).where(Booking.tour_id == tour.id))
        await self.db.delete(tour)
        await self.db.commit()

        logger.info("Tour deleted", extra={"tour_id": str(tour_id)})
        return tour
