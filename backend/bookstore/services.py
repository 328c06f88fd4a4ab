"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories.
Services are intentionally thin: they perform existence checks, execute
domain logic and persist aggregates via repositories. Failures are
raised as `errors.BookstoreError` subclasses.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import jwt
from passlib.context import CryptContext
from sqlmodel import Session

from . import models, repositories
from .config import settings
from .errors import ConflictError, NotFoundError

logger = logging.getLogger("bookstore.services")

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
JWT_SECRET = settings.JWT_SECRET
JWT_ALGORITHM = settings.JWT_ALGORITHM
JWT_EXPIRE_HOURS = settings.JWT_EXPIRE_HOURS

CATEGORY = "Book Category"
BOOK = "Book"


class CategoryService:
    """Create, read, update and delete book categories."""
    def __init__(self, session: Session):
        self.repo = repositories.CategoryRepository(session)
        self.book_repo = repositories.BookRepository(session)

    def create(self, name: str, description: Optional[str] = None) -> models.BookCategory:
        category = self.repo.create(models.BookCategory(name=name, description=description))
        logger.info("category created id=%s name=%r", category.id, category.name)
        return category

    def find_all(self) -> List[models.BookCategory]:
        return self.repo.list_all()

    def find_one(self, category_id: uuid.UUID) -> models.BookCategory:
        category = self.repo.get(category_id)
        if not category:
            raise NotFoundError(CATEGORY, category_id)
        return category

    def update(self, category_id: uuid.UUID, fields: Dict[str, Any]) -> models.BookCategory:
        """Apply a partial update; omitted fields keep their values."""
        category = self.find_one(category_id)
        self.repo.update(category, fields)
        return self.find_one(category_id)

    def remove(self, category_id: uuid.UUID) -> models.BookCategory:
        """Delete a category and return its state before deletion.

        Categories still referenced by books cannot be deleted; this keeps
        every `Book.category_id` pointing at a live row.
        """
        category = self.find_one(category_id)
        in_use = self.book_repo.count_for_category(category_id)
        if in_use:
            raise ConflictError(f"{CATEGORY} with ID {category_id} is referenced by {in_use} book(s)")
        self.repo.delete(category)
        logger.info("category deleted id=%s", category_id)
        return category


class BookService:
    """Book CRUD plus the like counter."""
    def __init__(self, session: Session):
        self.repo = repositories.BookRepository(session)
        self.category_repo = repositories.CategoryRepository(session)

    def _require_category(self, category_id: uuid.UUID) -> None:
        if not self.category_repo.get(category_id):
            raise NotFoundError(CATEGORY, category_id)

    def create(self, title: str, author: str, price, category_id: uuid.UUID) -> models.Book:
        self._require_category(category_id)
        book = models.Book(title=title, author=author, price=price, category_id=category_id)
        book = self.repo.create(book)
        logger.info("book created id=%s category=%s", book.id, category_id)
        return book

    def find_all(self) -> List[models.Book]:
        return self.repo.list_all()

    def find_one(self, book_id: uuid.UUID) -> models.Book:
        book = self.repo.get(book_id)
        if not book:
            raise NotFoundError(BOOK, book_id)
        return book

    def update(self, book_id: uuid.UUID, fields: Dict[str, Any]) -> models.Book:
        book = self.find_one(book_id)
        if fields.get("category_id") is not None:
            self._require_category(fields["category_id"])
        self.repo.update(book, fields)
        return self.find_one(book_id)

    def remove(self, book_id: uuid.UUID) -> models.Book:
        book = self.find_one(book_id)
        self.repo.delete(book)
        logger.info("book deleted id=%s", book_id)
        return book

    def increment_likes(self, book_id: uuid.UUID) -> models.Book:
        """Add exactly one like and return the refreshed book."""
        if not self.repo.increment_likes(book_id):
            raise NotFoundError(BOOK, book_id)
        return self.find_one(book_id)


class UserService:
    """Provision users; passwords are hashed before they reach the database."""
    def __init__(self, session: Session):
        self.repo = repositories.UserRepository(session)

    def create(self, email: str, password: str, role: models.UserRole = models.UserRole.USER) -> models.User:
        email = email.strip().lower()
        if self.repo.get_by_email(email):
            raise ConflictError(f"User with email {email} already exists")
        user = models.User(email=email, password_hash=PWD_CTX.hash(password), role=role)
        user = self.repo.create(user)
        logger.info("user created id=%s role=%s", user.id, user.role.value)
        return user


class AuthService:
    """Authentication related operations (credential check + token issue)."""
    def __init__(self, session: Session):
        self.user_repo = repositories.UserRepository(session)

    def validate_user(self, email: str, password: str) -> Optional[models.User]:
        """Return the matching `User` or `None` when the credentials are wrong."""
        user = self.user_repo.get_by_email(email.strip().lower())
        if not user:
            # Burn a hash round anyway so unknown emails are not faster to reject.
            PWD_CTX.dummy_verify()
            return None
        if not PWD_CTX.verify(password, user.password_hash):
            return None
        return user

    def login(self, user: models.User) -> dict:
        """Issue a signed access token for `user`.

        The payload carries the user id (`sub`), email and role and
        expires after `JWT_EXPIRE_HOURS`.
        """
        now = datetime.now(timezone.utc)
        expire = now + timedelta(hours=JWT_EXPIRE_HOURS)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        token = jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)
        return {"access_token": token, "token_type": "bearer", "expires_in": JWT_EXPIRE_HOURS * 3600}
