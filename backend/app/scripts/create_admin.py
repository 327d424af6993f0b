"""
Create Admin User Script
Creates an admin user if one with the given email does not already exist.
Usage: ADMIN_EMAIL=... ADMIN_PASSWORD=... python -m app.scripts.create_admin
"""

import asyncio
import os
import sys

# Add parent directory to path to allow running as module
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.database import AsyncSessionLocal
from app.exceptions import ConflictError, ValidationError
from app.models.user import UserRole
from app.services.user_store import UserStore


async def create_admin() -> int:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    name = os.getenv("ADMIN_NAME", "Administrator")

    if not email or not password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD are required to create the admin user.")
        return 1

    async with AsyncSessionLocal() as db:
        store = UserStore(db)

        if await store.find_by_email(email):
            print("Admin user already exists.")
            return 0

        try:
            admin = await store.create({
                "name": name,
                "email": email,
                "password": password,
                "role": UserRole.ADMIN.value,
                "is_active": True,
            })
        except ValidationError as e:
            print("Admin user is invalid:")
            for field, message in e.errors.items():
                print(f"- {field}: {message}")
            return 1
        except ConflictError as e:
            print(e.message)
            return 1

        await db.commit()
        print(f"Successfully created admin user: {admin.email}")
        return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(create_admin()))
