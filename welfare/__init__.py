"""
Welfare Platform API
Flask Application Factory.

Usage:
    from welfare import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import event as _sa_event, engine as _sa_engine
from sqlalchemy.exc import SQLAlchemyError

from welfare.config import config
from welfare.core.exceptions import ConflictError, NotFoundError, ValidationError
from welfare.middleware.jwt_auth import init_jwt_middleware
from welfare.middleware.logging_config import configure_logging
from welfare.middleware.rate_limiter import init_rate_limits
from welfare.middleware.route_guard import init_route_guard
from welfare.middleware.tenant_context import init_tenant_context
from welfare.middleware.timing import init_request_timing
from welfare.models import db
from welfare.utils.errors import E, api_error

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # per-blueprint limits only
)

DEMO_CENTERS = ("Head Office", "Northern Branch", "Southern Branch")
DEMO_GENDERS = ("Male", "Female")


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # ProductionConfig checks its required env vars in __init__.
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request pipeline (order matters) ─────────────────────────────────
    # timing → jwt_auth → tenant_context → route_guard → view
    init_request_timing(app)
    init_jwt_middleware(app)
    init_tenant_context(app)
    init_route_guard(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from welfare.models import auth as _auth_models                 # noqa: F401
    from welfare.models import center as _center_models             # noqa: F401
    from welfare.models import lookup as _lookup_models             # noqa: F401
    from welfare.models import madressa as _madressa_models         # noqa: F401
    from welfare.models import questionnaire as _questionnaire_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    if not app.config.get("TESTING"):
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///"):
            os.makedirs(app.instance_path, exist_ok=True)
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("db.create_all() completed successfully")
            except SQLAlchemyError as e:
                app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from welfare.blueprints.auth_bp import auth_bp
    from welfare.blueprints.center_bp import center_bp
    from welfare.blueprints.health_bp import health_bp
    from welfare.blueprints.lookup_bp import lookup_bp
    from welfare.blueprints.madressa_bp import madressa_bp
    from welfare.blueprints.parent_questionnaire_bp import parent_questionnaire_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(center_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(lookup_bp)
    app.register_blueprint(madressa_bp)
    app.register_blueprint(parent_questionnaire_bp)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        logger.info("%s (center=%s)", error, error.center_id)
        return api_error(E.NOT_FOUND, str(error))

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @app.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(E.CONFLICT_DUPLICATE, str(error))

    @app.errorhandler(SQLAlchemyError)
    def _handle_db_error(error: SQLAlchemyError):
        db.session.rollback()
        logger.error("Database error on %s %s: %s", request.method, request.path, error)
        return api_error(E.DATABASE, str(error))

    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", path=request.path)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.VALIDATION_INVALID, "Method not allowed", status=405)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Too many requests", retry_after=e.description)

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error")

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-demo")
    @click.option("--password", default="ChangeMe123!", help="Password for every demo user.")
    def seed_demo_cmd(password):
        """Seed demo centers, lookup values and one user per role."""
        _seed_demo(password)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app


def _seed_demo(password: str) -> None:
    from sqlalchemy import select

    from welfare.models.center import CenterDetail
    from welfare.services import center_service, lookup_service
    from welfare.services.rbac_matrix import Role
    from welfare.services.user_service import create_user, get_user_by_username

    db.create_all()

    centers = {}
    for name in DEMO_CENTERS:
        existing = db.session.execute(
            select(CenterDetail).where(CenterDetail.organisation_name == name)
        ).scalar_one_or_none()
        centers[name] = existing or center_service.create_center(
            {"organisation_name": name}, username="seed"
        )

    added = lookup_service.seed_values("Gender", list(DEMO_GENDERS))

    home = centers[DEMO_CENTERS[1]]
    created = 0
    for role in Role:
        username = role.name.lower()
        if get_user_by_username(username):
            continue
        create_user(
            username,
            password,
            role,
            center_id=None if role is Role.APP_ADMIN else home.id,
            full_name=role.name.replace("_", " ").title(),
        )
        created += 1

    logger.info(
        "Seeded %d centers, %d lookup values and %d users.",
        len(centers), added, created,
    )
