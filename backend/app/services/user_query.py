"""
User Listing
Turns raw list parameters into a store predicate, sort order and page window,
then runs them against the user store.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import and_, asc, desc, or_, true
from sqlalchemy.sql import ColumnElement

from app.config import settings
from app.models.user import User
from app.services.user_store import UserStore


# Wire names and their column, snake_case accepted as well
SORTABLE_FIELDS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "isActive": User.is_active,
    "is_active": User.is_active,
    "createdAt": User.created_at,
    "created_at": User.created_at,
    "updatedAt": User.updated_at,
    "updated_at": User.updated_at,
}

DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_DIRECTION = "desc"


@dataclass(frozen=True)
class RoleFilter:
    """
    Exact match on role. Values outside the role enum are kept as-is and
    simply match nothing.
    """
    value: Optional[str] = None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "RoleFilter":
        return cls(raw if raw else None)

    def clause(self) -> Optional[ColumnElement]:
        if self.value is None:
            return None
        return User.role == self.value


@dataclass(frozen=True)
class ActiveFilter:
    """Only the literals "true" and "false" filter; anything else means no filter."""
    value: Optional[bool] = None

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ActiveFilter":
        if raw == "true":
            return cls(True)
        if raw == "false":
            return cls(False)
        return cls(None)

    def clause(self) -> Optional[ColumnElement]:
        if self.value is None:
            return None
        return User.is_active == self.value


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(search: Optional[str]) -> Optional[ColumnElement]:
    if not search:
        return None
    pattern = f"%{_escape_like(search)}%"
    return or_(
        User.name.ilike(pattern, escape="\\"),
        User.email.ilike(pattern, escape="\\"),
    )


def build_user_filter(
    search: Optional[str] = None,
    role: Optional[str] = None,
    active: Optional[str] = None,
) -> ColumnElement:
    """
    Build the predicate for the user list.

    Present clauses are ANDed together; no clauses gives the match-all predicate.
    """
    clauses = [
        clause for clause in (
            search_clause(search),
            RoleFilter.parse(role).clause(),
            ActiveFilter.parse(active).clause(),
        )
        if clause is not None
    ]
    if not clauses:
        return true()
    return and_(*clauses)


def parse_sort(sort: Optional[str]) -> Tuple[str, str]:
    """
    Parse ``field:direction``. Unknown fields fall back to the default sort,
    unknown directions to ascending.
    """
    if not sort:
        return DEFAULT_SORT_FIELD, DEFAULT_SORT_DIRECTION

    field, _, direction = sort.partition(":")
    field = field.strip()
    if field not in SORTABLE_FIELDS:
        return DEFAULT_SORT_FIELD, DEFAULT_SORT_DIRECTION

    direction = "desc" if direction.strip().lower() == "desc" else "asc"
    return field, direction


def sort_clauses(field: str, direction: str) -> List[ColumnElement]:
    column = SORTABLE_FIELDS[field]
    order = desc if direction == "desc" else asc
    # Primary key keeps pages stable when sort keys tie
    return [order(column), order(User.id)]


def clamp_page(page: Optional[int]) -> int:
    if not page or page < 1:
        return 1
    return page


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return settings.default_page_size
    return min(limit, settings.max_page_size)


@dataclass
class UserPage:
    records: List[User]
    current: int
    pages: int
    total: int


async def list_users(
    store: UserStore,
    search: Optional[str] = None,
    role: Optional[str] = None,
    active: Optional[str] = None,
    sort: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> UserPage:
    """Fetch one page of users matching the filters plus pagination totals."""
    page = clamp_page(page)
    limit = clamp_limit(limit)
    skip = (page - 1) * limit

    predicate = build_user_filter(search=search, role=role, active=active)
    total = await store.count(predicate)

    # Pages past the end are empty; their offset may not fit a database integer
    records: List[User] = []
    if skip < total:
        records = await store.find(predicate, sort_clauses(*parse_sort(sort)), skip=skip, limit=limit)

    return UserPage(
        records=records,
        current=page,
        pages=math.ceil(total / limit),
        total=total,
    )
