import threading
import uuid
from decimal import Decimal

import pytest
from sqlmodel import Session

from bookstore import models, repositories, services
from bookstore.database import engine
from bookstore.errors import ConflictError, NotFoundError
from bookstore.models import UserRole
from bookstore.seed import seed_categories


def test_seed_is_idempotent(session):
    assert seed_categories(session) == 3
    assert seed_categories(session) == 0
    names = sorted(c.name for c in services.CategoryService(session).find_all())
    assert names == ['Fiction', 'History', 'Technology']


def test_seed_skips_non_empty_store(session):
    services.CategoryService(session).create('Existing')
    assert seed_categories(session) == 0
    assert len(services.CategoryService(session).find_all()) == 1


def test_not_found_is_always_not_found(session):
    with pytest.raises(NotFoundError):
        services.CategoryService(session).find_one(uuid.uuid4())
    with pytest.raises(NotFoundError):
        services.CategoryService(session).remove(uuid.uuid4())
    with pytest.raises(NotFoundError):
        services.BookService(session).find_one(uuid.uuid4())
    with pytest.raises(NotFoundError):
        services.BookService(session).increment_likes(uuid.uuid4())


def test_increment_likes_sequentially(session):
    cat = services.CategoryService(session).create('Tech')
    book = services.BookService(session).create('T', 'A', Decimal('5.00'), cat.id)
    svc = services.BookService(session)
    for expected in range(1, 8):
        assert svc.increment_likes(book.id).like_count == expected


def test_concurrent_likes_are_never_lost(session):
    cat = services.CategoryService(session).create('Tech')
    book_id = services.BookService(session).create('T', 'A', Decimal('5.00'), cat.id).id
    errors = []

    def like_many():
        try:
            with Session(engine) as own:
                svc = services.BookService(own)
                for _ in range(20):
                    svc.increment_likes(book_id)
        except Exception as e:
            errors.append(e)

    workers = [threading.Thread(target=like_many) for _ in range(4)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()
    assert errors == []
    with Session(engine) as fresh:
        assert services.BookService(fresh).find_one(book_id).like_count == 80


def test_remove_returns_prior_state(session):
    svc = services.CategoryService(session)
    cat = svc.create('Gone', 'soon')
    removed = svc.remove(cat.id)
    assert removed.id == cat.id
    assert removed.name == 'Gone'
    assert removed.description == 'soon'
    with pytest.raises(NotFoundError):
        svc.find_one(cat.id)


def test_category_in_use_cannot_be_removed(session):
    cat = services.CategoryService(session).create('Used')
    services.BookService(session).create('T', 'A', Decimal('1'), cat.id)
    with pytest.raises(ConflictError):
        services.CategoryService(session).remove(cat.id)


def test_book_insert_racing_category_delete_is_not_found(session):
    # the category vanished after the existence check passed
    missing = uuid.uuid4()
    book = models.Book(title='T', author='A', price=Decimal('1'), category_id=missing)
    with pytest.raises(NotFoundError) as exc:
        repositories.BookRepository(session).create(book)
    assert str(missing) in exc.value.message
    assert services.BookService(session).find_all() == []


def test_book_update_racing_category_delete_is_not_found(session):
    cat = services.CategoryService(session).create('Tech')
    book = services.BookService(session).create('T', 'A', Decimal('1'), cat.id)
    with pytest.raises(NotFoundError):
        repositories.BookRepository(session).update(book, {'category_id': uuid.uuid4()})
    assert services.BookService(session).find_one(book.id).category_id == cat.id


def test_category_delete_racing_book_insert_is_conflict(session):
    cat = services.CategoryService(session).create('Used')
    services.BookService(session).create('T', 'A', Decimal('1'), cat.id)
    with pytest.raises(ConflictError):
        repositories.CategoryRepository(session).delete(cat)
    assert services.CategoryService(session).find_one(cat.id).name == 'Used'


def test_duplicate_email_at_insert_is_conflict(session):
    services.UserService(session).create('race@example.com', 'password1')
    twin = models.User(email='race@example.com', password_hash='x')
    with pytest.raises(ConflictError):
        repositories.UserRepository(session).create(twin)


def test_passwords_are_hashed_on_write(session):
    user = services.UserService(session).create('Someone@Example.com', 'plain-password')
    assert user.email == 'someone@example.com'
    assert user.password_hash != 'plain-password'
    assert user.password_hash.startswith('$pbkdf2-sha256$')
    assert user.role == UserRole.USER


def test_duplicate_email_is_conflict(session):
    services.UserService(session).create('dup@example.com', 'password1')
    with pytest.raises(ConflictError):
        services.UserService(session).create('DUP@example.com', 'password2')


def test_validate_user(session):
    services.UserService(session).create('v@example.com', 'right-one', UserRole.ADMIN)
    auth = services.AuthService(session)
    assert auth.validate_user('v@example.com', 'wrong-one') is None
    assert auth.validate_user('missing@example.com', 'right-one') is None
    user = auth.validate_user('v@example.com', 'right-one')
    assert user is not None
    assert user.role == UserRole.ADMIN
