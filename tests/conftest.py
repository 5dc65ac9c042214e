"""
Shared pytest fixtures for the Welfare Platform API test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - center_a / center_b: Two pre-created centers
    - auth: Factory returning JWT Authorization headers for a role/center
    - make_application: Factory creating a Madressa application (+ student)
"""

import pytest

from welfare import create_app
from welfare.models import db as _db
from welfare.models.center import CenterDetail
from welfare.models.madressa import MadressaApplication, Relationship
from welfare.services.jwt_service import generate_access_token


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Helpers ──────────────────────────────────────────────────────────────


def make_center(name: str) -> CenterDetail:
    center = CenterDetail(organisation_name=name)
    _db.session.add(center)
    _db.session.commit()
    return center


def auth_headers(user_type, center_id=None, username="tester", user_id=1) -> dict:
    """Authorization headers carrying an access token for the given principal."""
    token = generate_access_token(user_id, username, int(user_type), center_id)
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def center_a():
    return make_center("Center A")


@pytest.fixture()
def center_b():
    return make_center("Center B")


@pytest.fixture()
def auth():
    """Factory: auth(Role.ORG_ADMIN, center_id=3) → headers."""
    return auth_headers


@pytest.fixture()
def make_application():
    """Factory: make_application(center, name="Aisha") → MadressaApplication."""

    def _make(center, name="Aisha", surname="Khan", status="pending"):
        student = Relationship(center_id=center.id, name=name, surname=surname, id_number="0101015000081")
        _db.session.add(student)
        _db.session.flush()
        application = MadressaApplication(
            center_id=center.id,
            applicant_relationship_id=student.id,
            status=status,
        )
        _db.session.add(application)
        _db.session.commit()
        return application

    return _make
