import pytest

from bookstore.config import Settings


def test_missing_jwt_secret_aborts(monkeypatch):
    monkeypatch.delenv('JWT_SECRET', raising=False)
    with pytest.raises(RuntimeError, match='JWT_SECRET'):
        Settings()


def test_blank_jwt_secret_aborts(monkeypatch):
    monkeypatch.setenv('JWT_SECRET', '   ')
    with pytest.raises(RuntimeError):
        Settings()


def test_database_url_precedence(monkeypatch):
    monkeypatch.setenv('JWT_SECRET', 'x')
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///explicit.db')
    monkeypatch.setenv('DB_HOST', 'db.internal')
    assert Settings().database_url == 'sqlite:///explicit.db'

    monkeypatch.delenv('DATABASE_URL')
    monkeypatch.setenv('DB_PORT', '6543')
    monkeypatch.setenv('DB_USERNAME', 'shop')
    monkeypatch.setenv('DB_PASSWORD', 'pw')
    monkeypatch.setenv('DB_DATABASE', 'books')
    assert Settings().database_url == 'postgresql+psycopg://shop:pw@db.internal:6543/books'

    monkeypatch.delenv('DB_HOST')
    assert Settings().database_url.startswith('sqlite:///')
    assert Settings().database_url.endswith('bookstore.db')


def test_health(client):
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers


def test_short_secret_only_allowed_in_dev(monkeypatch):
    monkeypatch.setenv('JWT_SECRET', 'short-secret')
    monkeypatch.setenv('ENV', 'dev')
    assert Settings().JWT_SECRET == 'short-secret'
    monkeypatch.setenv('ENV', 'production')
    with pytest.raises(RuntimeError, match='at least 32'):
        Settings()
    monkeypatch.setenv('JWT_SECRET', 'x' * 32)
    assert Settings().ENV == 'production'
