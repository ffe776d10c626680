"""
Database seeding for the initial administrator.

Runs on application startup; can also be run directly after the database
is set up:

    python -m fleet_backend.app.db.seed
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fleet_backend.app.core.config import settings
from fleet_backend.app.core.security import get_password_hash
from fleet_backend.app.db.session import AsyncSessionLocal
from fleet_backend.app.models.enums import UserRole
from fleet_backend.app.models.user import User

logger = logging.getLogger(__name__)


async def seed_default_admin(db: AsyncSession) -> Optional[User]:
    """
    Create the default ADMIN when the users table is empty.

    Returns:
        The created user, or None if any user already exists
    """
    user_count = (await db.execute(select(func.count(User.id)))).scalar() or 0
    if user_count:
        return None

    admin_user = User(
        username=settings.seed_admin_username,
        hashed_password=get_password_hash(settings.seed_admin_password),
        name=settings.seed_admin_name,
        email=settings.seed_admin_email,
        role=UserRole.ADMIN
    )
    db.add(admin_user)
    await db.commit()
    await db.refresh(admin_user)

    logger.warning(
        "Seeded default admin user '%s'; change its password before production use",
        admin_user.username
    )
    return admin_user


async def main():
    async with AsyncSessionLocal() as db:
        await seed_default_admin(db)


if __name__ == "__main__":
    asyncio.run(main())
