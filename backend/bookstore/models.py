"""SQLModel data models.

This module defines the application's database tables using SQLModel.
Each class maps to a table; books reference their category through a
foreign key and a `Relationship`.
"""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlmodel import SQLModel, Field, Relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class BookCategory(SQLModel, table=True):
    """A named grouping that books belong to. Names are not unique."""
    __tablename__ = "book_category"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    books: List["Book"] = Relationship(back_populates="category")


class Book(SQLModel, table=True):
    """A sellable item with a like counter, belonging to one category."""
    __tablename__ = "book"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(nullable=False)
    author: str = Field(nullable=False)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    like_count: int = Field(default=0, nullable=False)
    category_id: uuid.UUID = Field(foreign_key="book_category.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    category: Optional[BookCategory] = Relationship(back_populates="books")


class User(SQLModel, table=True):
    """A user able to log in.

    Fields:
    - `email`: unique login name, stored lower-cased
    - `password_hash`: salted one-way hash (never store plaintext)
    - `role`: ADMIN or USER
    """
    __tablename__ = "user"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    role: UserRole = Field(default=UserRole.USER)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
