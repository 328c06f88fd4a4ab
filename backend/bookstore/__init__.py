"""Application package for the bookstore administration backend.

This package exposes the service, repository and model modules used by
the FastAPI application in `bookstore.main`. It is intentionally
lightweight; individual modules contain the concrete implementations
and documentation.
"""
