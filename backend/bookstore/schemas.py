"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. JSON field names are camelCase
(`categoryId`, `likeCount`); snake_case names are accepted on input too.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import UserRole


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CategoryCreate(ApiModel):
    """Payload for creating a book category."""
    name: str = Field(min_length=1)
    description: Optional[str] = None


class CategoryUpdate(ApiModel):
    """Partial update; only supplied fields are applied."""
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, value):
        if value is None:
            raise ValueError("name may not be null")
        return value


class CategoryRead(ApiModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BookCreate(ApiModel):
    """Payload for creating a book; `categoryId` must name an existing category."""
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category_id: uuid.UUID


class BookUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1)
    author: Optional[str] = Field(default=None, min_length=1)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[uuid.UUID] = None

    @field_validator("title", "author", "price", "category_id", mode="before")
    @classmethod
    def required_not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} may not be null")
        return value


class BookRead(ApiModel):
    id: uuid.UUID
    title: str
    author: str
    price: Decimal
    like_count: int
    category_id: uuid.UUID
    category: Optional[CategoryRead] = None
    created_at: datetime
    updated_at: datetime


class UserCreate(ApiModel):
    """Shape used when provisioning users out-of-band."""
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.USER


class LoginIn(BaseModel):
    """Payload for the login endpoint."""
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class Principal(ApiModel):
    """Identity attached to a request after its bearer token verified."""
    user_id: uuid.UUID
    email: str
    role: UserRole
