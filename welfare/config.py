"""
Welfare Platform API
Configuration classes, selected by APP_ENV in create_app().

Environment variables:
    DATABASE_URL            PostgreSQL URL (SQLite file in development when unset)
    TEST_DATABASE_URL       overrides the in-memory test database
    SECRET_KEY              Flask secret, required in production
    JWT_SECRET_KEY          token signing key (falls back to SECRET_KEY)
    JWT_ACCESS_EXPIRES      access token lifetime in seconds (default 900)
    CORS_ORIGINS            comma-separated allowed origins, "*" for any
    RATELIMIT_STORAGE_URI   Flask-Limiter storage backend (default in-memory)
    LOG_LEVEL / LOG_FORMAT  see welfare.middleware.logging_config
"""

import os
import secrets

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

SQLITE_DEV_URL = "sqlite:///" + os.path.join(basedir, "instance", "welfare_dev.db")
SQLITE_TEST_URL = "sqlite:///:memory:"

POOL_OPTIONS = {
    "pool_pre_ping": True,
    "pool_size": 5,
    "max_overflow": 10,
    "pool_recycle": 300,
    "pool_timeout": 20,
}


def _database_url(default=None):
    """DATABASE_URL with the legacy postgres:// scheme rewritten for SQLAlchemy 2."""
    raw = os.getenv("DATABASE_URL", "")
    if not raw:
        return default
    if raw.startswith("postgres://"):
        return "postgresql://" + raw[len("postgres://"):]
    return raw


def _env_int(name, default):
    value = os.getenv(name)
    return int(value) if value and value.strip().lstrip("-").isdigit() else default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY") or secrets.token_hex(32)
    DEBUG = False
    TESTING = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ACCESS_EXPIRES = _env_int("JWT_ACCESS_EXPIRES", 900)
    BCRYPT_ROUNDS = 12

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = dict(POOL_OPTIONS)

    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Questionnaire payloads are small; anything larger is rejected by Werkzeug.
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = _database_url(SQLITE_DEV_URL)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", SQLITE_TEST_URL)
    # In-memory SQLite uses one static connection; pool sizing does not apply.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "test-jwt-secret"
    BCRYPT_ROUNDS = 4
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    SQLALCHEMY_DATABASE_URI = _database_url()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    SQLALCHEMY_ENGINE_OPTIONS = {
        **POOL_OPTIONS,
        "connect_args": {"options": "-c statement_timeout=30000"},
    }

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("DATABASE_URL environment variable is required in production")
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
