"""
User Schemas
Pydantic models for user-related data.

Field names are camelCase on the wire (``isActive``, ``createdAt``); the
snake_case names are accepted on input too.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(CamelModel):
    """Registration / admin create body. Field rules live in utils.user_policy."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class UserUpdate(CamelModel):
    model_config = ConfigDict(json_schema_extra={"example": {"isActive": False}})

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class UserResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Token plus user. ``token`` is null when an admin created the account."""
    token: Optional[str] = None
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
