"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (categories,
books, users). Repositories return SQLModel objects and perform
commits/refreshes where appropriate. Services check existence up front;
constraint violations that still reach the database (a concurrent
delete, a duplicate email) are rolled back and raised as domain errors.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from . import models
from .errors import ConflictError, NotFoundError


def _apply(obj, fields: Dict[str, Any]):
    for key, value in fields.items():
        setattr(obj, key, value)
    obj.updated_at = models.utcnow()


class CategoryRepository:
    """CRUD operations for `BookCategory` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, category: models.BookCategory) -> models.BookCategory:
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        return category

    def create_many(self, categories: List[models.BookCategory]) -> List[models.BookCategory]:
        """Insert several categories in one transaction."""
        self.session.add_all(categories)
        self.session.commit()
        for c in categories:
            self.session.refresh(c)
        return categories

    def list_all(self) -> List[models.BookCategory]:
        return list(self.session.exec(select(models.BookCategory)).all())

    def get(self, category_id: uuid.UUID) -> Optional[models.BookCategory]:
        return self.session.get(models.BookCategory, category_id)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(models.BookCategory)).one()

    def update(self, category: models.BookCategory, fields: Dict[str, Any]) -> models.BookCategory:
        """Apply `fields` to `category` and persist it."""
        _apply(category, fields)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        return category

    def delete(self, category: models.BookCategory) -> None:
        """Delete the row; `category` is detached first and keeps its loaded state."""
        self.session.expunge(category)
        try:
            self.session.exec(delete(models.BookCategory).where(models.BookCategory.id == category.id))
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"Book Category with ID {category.id} is referenced by books")


class BookRepository:
    """CRUD operations for `Book` records, always loading their category."""
    def __init__(self, session: Session):
        self.session = session

    def _select(self):
        return select(models.Book).options(selectinload(models.Book.category))

    def _commit(self, category_id: uuid.UUID) -> None:
        try:
            self.session.commit()
        except IntegrityError:
            # the only constraint on book is the category foreign key
            self.session.rollback()
            raise NotFoundError("Book Category", category_id)

    def create(self, book: models.Book) -> models.Book:
        book_id, category_id = book.id, book.category_id
        self.session.add(book)
        self._commit(category_id)
        return self.get(book_id)

    def list_all(self) -> List[models.Book]:
        return list(self.session.exec(self._select()).all())

    def get(self, book_id: uuid.UUID) -> Optional[models.Book]:
        """Fetch a book with its category joined, or `None`."""
        stmt = self._select().where(models.Book.id == book_id)
        return self.session.exec(stmt).first()

    def count_for_category(self, category_id: uuid.UUID) -> int:
        """Return how many books reference `category_id`."""
        stmt = select(func.count()).select_from(models.Book).where(models.Book.category_id == category_id)
        return self.session.exec(stmt).one()

    def update(self, book: models.Book, fields: Dict[str, Any]) -> models.Book:
        book_id = book.id
        _apply(book, fields)
        self.session.add(book)
        self._commit(book.category_id)
        return self.get(book_id)

    def delete(self, book: models.Book) -> None:
        self.session.expunge(book)
        self.session.exec(delete(models.Book).where(models.Book.id == book.id))
        self.session.commit()

    def increment_likes(self, book_id: uuid.UUID) -> int:
        """Atomically add one to `like_count`.

        The increment is a single UPDATE evaluated by the database, so
        concurrent calls never lose an update. Returns the number of rows
        matched (0 when the book does not exist).
        """
        stmt = (
            update(models.Book)
            .where(models.Book.id == book_id)
            .values(like_count=models.Book.like_count + 1, updated_at=models.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.session.exec(stmt)
        self.session.commit()
        return result.rowcount


class UserRepository:
    """CRUD operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, user: models.User) -> models.User:
        """Persist a new user and return the managed instance."""
        email = user.email
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError(f"User with email {email} already exists")
        self.session.refresh(user)
        return user

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        return self.session.exec(stmt).first()
