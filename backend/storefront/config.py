# backend/storefront/config.py
from __future__ import annotations
import os
from datetime import timedelta


def _csv(value: str) -> set[str]:
    return {item.strip() for item in value.split(",") if item.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/storefront.sqlite3; point DATABASE_URL at Postgres in production
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///storefront.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens (access + refresh share the secret, differ by "type" claim and lifetime)
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM = "HS256"
    JWT_ISSUER = os.environ.get("JWT_ISSUER", "hr-backend")
    JWT_AUDIENCE = os.environ.get("JWT_AUDIENCE", "hr-frontend")
    JWT_ACCESS_EXPIRES = timedelta(minutes=int(os.environ.get("JWT_ACCESS_EXPIRES_MINUTES", "15")))
    JWT_REFRESH_EXPIRES = timedelta(days=int(os.environ.get("JWT_REFRESH_EXPIRES_DAYS", "7")))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    CORS_ALLOWED_ORIGINS = _csv(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    ))

    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100

    # "compensating": one commit per statement, undo on failure.
    # "transactional": order + items written in a single database transaction.
    ORDER_WRITE_STRATEGY = os.environ.get("ORDER_WRITE_STRATEGY", "compensating")

    LOGIN_MAX_FAILED_ATTEMPTS = 5
    LOGIN_LOCKOUT_MINUTES = 15

    # Never enable in production: adds exception class names to 500 responses
    EXPOSE_ERROR_DETAILS = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET = "test-jwt-secret"
    BCRYPT_ROUNDS = 4
    LOGIN_MAX_FAILED_ATTEMPTS = 3
