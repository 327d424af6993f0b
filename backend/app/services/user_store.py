"""
User Store
Persistence of user records: lookups, validated writes, password hashing,
and the count/find primitives the listing endpoint runs on.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement
from starlette.concurrency import run_in_threadpool

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.services import auth_service
from app.utils.user_policy import normalize_email, normalize_user_fields, validate_user_fields

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = ("name", "email", "password", "role", "is_active")


class UserStore:
    """
    Credential store backed by the ``users`` table.

    One instance per request, bound to that request's session.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        result = await self.session.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def verify_secret(self, user: User, candidate: str) -> bool:
        """Compare a candidate password against the stored bcrypt hash."""
        return await run_in_threadpool(
            auth_service.verify_password, candidate, user.hashed_password
        )

    async def create(self, fields: Mapping[str, Any]) -> User:
        data = normalize_user_fields(_writable(fields))
        data.setdefault("role", UserRole.USER.value)
        data.setdefault("is_active", True)

        errors = validate_user_fields(data)
        if errors:
            raise ValidationError(errors)

        await self._ensure_email_available(data["email"])

        now = datetime.utcnow()
        user = User(
            name=data["name"],
            email=data["email"],
            hashed_password=await _hash(data["password"]),
            role=data["role"],
            is_active=data["is_active"],
            created_at=now,
            updated_at=now,
        )
        self.session.add(user)
        await self._flush_unique()
        await self.session.refresh(user)

        logger.info(f"Created user {user.id} with role '{user.role}'")
        return user

    async def update(self, user_id: int, fields: Mapping[str, Any]) -> User:
        """
        Partial update. Only supplied fields change; an empty password is
        ignored, a non-empty one is re-hashed. ``updated_at`` always moves.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError()

        data = normalize_user_fields(_writable(fields))
        if not data.get("password"):
            data.pop("password", None)

        errors = validate_user_fields(data, partial=True)
        if errors:
            raise ValidationError(errors)

        if "email" in data and data["email"] != user.email:
            await self._ensure_email_available(data["email"], exclude_id=user.id)

        if "password" in data:
            user.hashed_password = await _hash(data.pop("password"))
        for field, value in data.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()

        await self._flush_unique()
        await self.session.refresh(user)

        logger.info(f"Updated user {user.id} (fields: {', '.join(sorted(fields)) or 'none'})")
        return user

    async def delete(self, user_id: int) -> bool:
        result = await self.session.execute(delete(User).where(User.id == user_id))
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted user {user_id}")
        return deleted

    async def count(self, predicate: Optional[ColumnElement] = None) -> int:
        stmt = select(func.count()).select_from(User).where(_match(predicate))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def find(
        self,
        predicate: Optional[ColumnElement] = None,
        sort: Sequence[ColumnElement] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[User]:
        stmt = select(User).where(_match(predicate)).order_by(*sort).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _ensure_email_available(self, email: str, exclude_id: Optional[int] = None) -> None:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt)
        if result.first() is not None:
            raise ConflictError("User already exists")

    async def _flush_unique(self) -> None:
        # ix_users_email rejects duplicates that slip past the pre-check
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("User already exists")


def _writable(fields: Mapping[str, Any]) -> dict:
    return {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}


def _match(predicate: Optional[ColumnElement]) -> ColumnElement:
    return predicate if predicate is not None else true()


async def _hash(password: str) -> str:
    return await run_in_threadpool(auth_service.get_password_hash, password)
