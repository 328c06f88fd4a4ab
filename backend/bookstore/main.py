"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the bookstore admin backend.
Controllers are intentionally thin: they accept requests, delegate to
services, and return JSON responses. Domain errors raised by services
are translated to status codes by the exception handlers below.

Endpoints implemented:
- POST /auth/login
- GET /auth/me
- POST|GET /book-category, GET|PATCH|DELETE /book-category/{id}
- POST|GET /book, GET|PATCH|DELETE /book/{id}, POST /book/{id}/like
- GET /health

Reads are public; catalog writes need an ADMIN token and liking a book
needs any valid token.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session

from . import services
from .auth import get_current_principal, require_admin
from .config import settings
from .database import engine, create_db_and_tables, get_session
from .errors import AuthenticationError, BookstoreError, LoginThrottledError
from .schemas import (
    BookCreate,
    BookRead,
    BookUpdate,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    LoginIn,
    Principal,
    TokenOut,
)
from .seed import seed_categories
from .utils.rate_limit import FailedLoginThrottle

logger = logging.getLogger("bookstore.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

_login_throttle = FailedLoginThrottle(settings.LOGIN_MAX_FAILURES, settings.LOGIN_FAILURE_WINDOW_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    if settings.SEED_ON_STARTUP:
        with Session(engine) as session:
            inserted = seed_categories(session)
        if inserted:
            logger.info("seeded %d book categories", inserted)
    yield


app = FastAPI(title="Bookstore Admin API", lifespan=lifespan)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    info = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(info, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    info["status_code"] = response.status_code
    info["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(info, ensure_ascii=True))
    return response


@app.exception_handler(BookstoreError)
async def handle_bookstore_error(request: Request, exc: BookstoreError):
    headers = {}
    if isinstance(exc, AuthenticationError):
        headers["WWW-Authenticate"] = "Bearer"
    elif isinstance(exc, LoginThrottledError):
        headers["Retry-After"] = str(exc.retry_after)
    if exc.status_code >= 500:
        logger.error("unhandled domain error: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Malformed input is a client error the caller can fix: 400, not 422.
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get('/health')
def health():
    return {'status': 'ok'}


@app.post('/auth/login', response_model=TokenOut)
def login(payload: LoginIn, request: Request, db: Session = Depends(get_session)):
    """Authenticate a user and return a JWT valid for one day.

    The token carries the user id (`sub`), email and role and must be
    sent back as `Authorization: Bearer <token>`.
    """
    client = request.client.host if request.client else "unknown"
    throttle_key = f"{client}:{payload.email.strip().lower()}"
    retry_after = _login_throttle.check(throttle_key)
    if retry_after:
        raise LoginThrottledError(retry_after)
    auth = services.AuthService(db)
    user = auth.validate_user(payload.email, payload.password)
    if not user:
        _login_throttle.record_failure(throttle_key)
        logger.warning("login failed for %s from %s", payload.email, client)
        raise AuthenticationError('Invalid credentials')
    _login_throttle.reset(throttle_key)
    return auth.login(user)


@app.get('/auth/me', response_model=Principal)
def me(principal: Principal = Depends(get_current_principal)):
    """Return the principal decoded from the bearer token."""
    return principal


@app.post('/book-category', response_model=CategoryRead, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    category = services.CategoryService(db).create(payload.name, payload.description)
    return CategoryRead.model_validate(category)


@app.get('/book-category', response_model=List[CategoryRead])
def list_categories(db: Session = Depends(get_session)):
    return [CategoryRead.model_validate(c) for c in services.CategoryService(db).find_all()]


@app.get('/book-category/{category_id}', response_model=CategoryRead)
def get_category(category_id: uuid.UUID, db: Session = Depends(get_session)):
    return CategoryRead.model_validate(services.CategoryService(db).find_one(category_id))


@app.patch('/book-category/{category_id}', response_model=CategoryRead)
def update_category(category_id: uuid.UUID, payload: CategoryUpdate, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    category = services.CategoryService(db).update(category_id, payload.model_dump(exclude_unset=True))
    return CategoryRead.model_validate(category)


@app.delete('/book-category/{category_id}', response_model=CategoryRead)
def delete_category(category_id: uuid.UUID, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    """Delete a category and return it; 409 while books still reference it."""
    return CategoryRead.model_validate(services.CategoryService(db).remove(category_id))


@app.post('/book', response_model=BookRead, status_code=201)
def create_book(payload: BookCreate, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    """Create a book; 404 when `categoryId` names no existing category."""
    svc = services.BookService(db)
    book = svc.create(payload.title, payload.author, payload.price, payload.category_id)
    return BookRead.model_validate(book)


@app.get('/book', response_model=List[BookRead])
def list_books(db: Session = Depends(get_session)):
    """List all books, each with its category embedded."""
    return [BookRead.model_validate(b) for b in services.BookService(db).find_all()]


@app.get('/book/{book_id}', response_model=BookRead)
def get_book(book_id: uuid.UUID, db: Session = Depends(get_session)):
    return BookRead.model_validate(services.BookService(db).find_one(book_id))


@app.patch('/book/{book_id}', response_model=BookRead)
def update_book(book_id: uuid.UUID, payload: BookUpdate, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    book = services.BookService(db).update(book_id, payload.model_dump(exclude_unset=True))
    return BookRead.model_validate(book)


@app.delete('/book/{book_id}', response_model=BookRead)
def delete_book(book_id: uuid.UUID, db: Session = Depends(get_session), _: Principal = Depends(require_admin)):
    return BookRead.model_validate(services.BookService(db).remove(book_id))


@app.post('/book/{book_id}/like', response_model=BookRead)
def like_book(book_id: uuid.UUID, db: Session = Depends(get_session), _: Principal = Depends(get_current_principal)):
    """Add one like to a book and return it with the new count."""
    return BookRead.model_validate(services.BookService(db).increment_likes(book_id))
