"""
Database Seeding Script
Populates an empty users table with the default accounts.
Usage: python -m app.data.seed
"""

import asyncio
import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


DEFAULT_USERS: List[Dict[str, Any]] = [
    {
        "name": "Admin User",
        "email": "admin@example.com",
        "password": "admin123",
        "role": "admin",
        "is_active": True,
    },
    {
        "name": "John Doe",
        "email": "john@example.com",
        "password": "user123",
        "role": "user",
        "is_active": True,
    },
    {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "password": "user123",
        "role": "user",
        "is_active": True,
    },
    {
        "name": "Bob Wilson",
        "email": "bob@example.com",
        "password": "user123",
        "role": "user",
        "is_active": False,
    },
]


async def seed_users(session: AsyncSession, users: List[Dict[str, Any]] = DEFAULT_USERS) -> int:
    """Create the given users if the table is empty. Returns how many were created."""
    store = UserStore(session)

    if await store.count() > 0:
        logger.info("Users already exist in database. Skipping seeding.")
        return 0

    for fields in users:
        user = await store.create(fields)
        logger.info(f"- {user.name} ({user.email}) - Role: {user.role}, Active: {user.is_active}")

    logger.info(f"Successfully seeded {len(users)} users to the database.")
    return len(users)


async def seed_default_users() -> int:
    async with AsyncSessionLocal() as session:
        count = await seed_users(session)
        await session.commit()
    return count


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_default_users())
