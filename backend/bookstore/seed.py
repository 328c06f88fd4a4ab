"""Initial category data.

`seed_categories` is idempotent: it only inserts when the category table
is empty, so it is safe to call on every startup or from the CLI.
"""

import logging

from sqlmodel import Session

from . import models, repositories

logger = logging.getLogger("bookstore.seed")

DEFAULT_CATEGORIES = (
    ("Fiction", "Stories and novels"),
    ("Technology", "Computers and engineering"),
    ("History", "Past events"),
)


def seed_categories(session: Session) -> int:
    """Insert the default categories into an empty store.

    Returns the number of rows inserted (0 when data already exists).
    """
    repo = repositories.CategoryRepository(session)
    if repo.count() > 0:
        return 0
    logger.info("Seeding book categories...")
    created = repo.create_many(
        [models.BookCategory(name=name, description=desc) for name, desc in DEFAULT_CATEGORIES]
    )
    return len(created)
