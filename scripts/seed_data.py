#!/usr/bin/env python3
"""Set up the database and load sample tours, equipment and an admin account."""

import argparse
import asyncio
import logging
import os
from datetime import timedelta
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from tourism_api.core.database import async_session_factory, close_db, utcnow
from tourism_api.models import Tour
from tourism_api.schemas.user import RegisterRequest
from tourism_api.services.equipment_service import EquipmentService
from tourism_api.services.tour_service import TourService
from tourism_api.services.user_service import UserService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DB_DIR = Path(__file__).parent.parent / "server" / "db"

SAMPLE_TOURS = [
    ("Ella Rock Sunrise Hike", "Early morning hike to the summit of Ella Rock.", "Ella", 45.0, 1),
    ("Yala Safari Weekend", "Two-day wildlife safari with a night in a tented camp.", "Yala", 320.0, 2),
    ("Knuckles Range Trek", "Guided trek through the cloud forests of the Knuckles range.", "Matale", 210.0, 3),
]

SAMPLE_EQUIPMENT = [
    ("Two-Person Dome Tent", "Waterproof tent with a vestibule.", 89.99, "Tents", 12),
    ("Down Sleeping Bag", "Rated to -5C, packs small.", 129.0, "Sleeping Bags", 4),
    ("Camp Stove Kit", "Single burner stove with a pot and pan set.", 54.5, "Cooking", 20),
    ("Rechargeable Headlamp", "400 lumen headlamp with USB charging.", 24.99, "Lighting", 0),
]


def run_migrations() -> None:
    """Upgrade the database to the latest schema revision."""
    alembic_cfg = Config(str(DB_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(DB_DIR / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data(admin_email: str, admin_password: str) -> None:
    async with async_session_factory() as db:
        existing = await db.scalar(select(func.count()).select_from(Tour))
        if existing:
            logger.info("Sample data already exists, skipping...")
            return

        admin, _ = await UserService(db).register(RegisterRequest(
            username="admin",
            email=admin_email,
            password=admin_password,
            role="admin",
        ))
        logger.info(f"Created admin account {admin.email} ({admin.admin_id})")

        tour_service = TourService(db)
        start = utcnow() + timedelta(days=30)
        for offset, (name, description, location, price, duration) in enumerate(SAMPLE_TOURS):
            await tour_service.create_tour(
                name=name,
                description=description,
                location=location,
                price=price,
                duration=duration,
                date=start + timedelta(days=offset * 7),
                image="/uploads/tours/sample.jpg",
            )

        equipment_service = EquipmentService(db)
        for name, description, price, category, quantity in SAMPLE_EQUIPMENT:
            await equipment_service.create_equipment(
                name=name,
                description=description,
                price=price,
                performed_by=admin.username,
                quantity=quantity,
                category=category,
            )

        logger.info(
            f"Created {len(SAMPLE_TOURS)} tours and {len(SAMPLE_EQUIPMENT)} equipment items"
        )


async def main(args: argparse.Namespace) -> None:
    try:
        await create_sample_data(args.admin_email, args.admin_password)
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--skip-migrations", action="store_true")
    parser.add_argument("--admin-email", default=os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com"))
    parser.add_argument("--admin-password", default=os.environ.get("SEED_ADMIN_PASSWORD", "change-me-now"))
    args = parser.parse_args()

    if not args.skip_migrations:
        run_migrations()
    asyncio.run(main(args))
    logger.info("Setup completed. Start the API with: uvicorn tourism_api.main:app --reload --app-dir server")
