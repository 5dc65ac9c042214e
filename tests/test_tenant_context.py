"""
Tenant context resolution and data-layer isolation.

Test blocks:
  1. resolve_tenant_context / normalise_center_id (pure)
  2. center_filter against real rows
  3. Middleware: request-scoped tenant fields and failure handling
"""

import pytest
from sqlalchemy import select

from welfare.models import db as _db
from welfare.models.madressa import MadressaApplication
from welfare.services.rbac_matrix import Role
from welfare.services.user_service import create_user
from welfare.services.tenant_scope import (
    TenantContext,
    can_access_center,
    normalise_center_id,
    resolve_tenant_context,
    scope_query,
)


# ═════════════════════════════════════════════════════════════════════════════
# 1. Resolution
# ═════════════════════════════════════════════════════════════════════════════

class TestResolveTenantContext:
    def test_app_admin_is_global_without_center(self):
        ctx = resolve_tenant_context(1, 42)
        assert ctx.is_global_access is True
        assert ctx.is_app_admin is True
        assert ctx.is_super_admin is True
        assert ctx.is_multi_center is True
        assert ctx.center_id is None

    def test_hq_is_center_scoped(self):
        ctx = resolve_tenant_context(Role.HQ, "7")
        assert ctx.is_global_access is False
        assert ctx.is_hq is True
        assert ctx.center_id == 7

    @pytest.mark.parametrize("role", [3, 4, 5])
    def test_org_roles_are_center_scoped(self, role):
        ctx = resolve_tenant_context(role, 3)
        assert ctx.is_global_access is False
        assert ctx.is_app_admin is False
        assert ctx.center_id == 3

    @pytest.mark.parametrize("role", [None, 0, 9, "abc"])
    def test_unknown_role_fails_closed(self, role):
        ctx = resolve_tenant_context(role, 3)
        assert ctx.is_global_access is False
        assert ctx.role is None

    @pytest.mark.parametrize("value,expected", [
        (7, 7),
        ("7", 7),
        (" 12 ", 12),
        ("", None),
        (None, None),
        ("abc", None),
        (True, None),
    ])
    def test_normalise_center_id(self, value, expected):
        assert normalise_center_id(value) == expected

    def test_missing_center_for_scoped_role(self):
        ctx = resolve_tenant_context(Role.ORG_ADMIN, None)
        assert ctx.center_id is None
        assert ctx.is_global_access is False

    def test_to_dict_exposes_request_fields(self):
        assert resolve_tenant_context(5, 3).to_dict() == {
            "center_id": 3,
            "is_multi_center": False,
            "is_app_admin": False,
            "is_super_admin": False,
            "is_hq": False,
        }

    def test_can_access_center(self):
        assert can_access_center(resolve_tenant_context(1, None), 99) is True
        assert can_access_center(resolve_tenant_context(3, 7), "7") is True
        assert can_access_center(resolve_tenant_context(3, 7), 8) is False
        assert can_access_center(resolve_tenant_context(3, None), 7) is False
        assert can_access_center(None, 7) is False


# ═════════════════════════════════════════════════════════════════════════════
# 2. Data-layer isolation
# ═════════════════════════════════════════════════════════════════════════════

class TestCenterFilter:
    @pytest.fixture()
    def rows(self, center_a, center_b, make_application):
        make_application(center_a, name="A1")
        make_application(center_a, name="A2")
        make_application(center_b, name="B1")
        return center_a, center_b

    def _centers_seen(self, context):
        stmt = scope_query(select(MadressaApplication), MadressaApplication, context)
        return [a.center_id for a in _db.session.execute(stmt).scalars().all()]

    def test_center_scoped_sees_only_own_rows(self, rows):
        center_a, _ = rows
        seen = self._centers_seen(resolve_tenant_context(Role.ORG_ADMIN, center_a.id))
        assert len(seen) == 2
        assert set(seen) == {center_a.id}

    def test_hq_sees_only_own_rows(self, rows):
        _, center_b = rows
        seen = self._centers_seen(resolve_tenant_context(Role.HQ, center_b.id))
        assert seen == [center_b.id]

    def test_global_sees_everything(self, rows):
        assert len(self._centers_seen(resolve_tenant_context(Role.APP_ADMIN, None))) == 3

    def test_null_center_sees_nothing(self, rows):
        assert self._centers_seen(resolve_tenant_context(Role.ORG_CASEWORKER, None)) == []

    def test_missing_context_sees_nothing(self, rows):
        assert self._centers_seen(None) == []

    def test_query_for_center_matches_scope_query(self, rows):
        center_a, _ = rows
        ctx = TenantContext(center_id=center_a.id, is_global_access=False, is_hq=False,
                            is_app_admin=False)
        apps = _db.session.execute(MadressaApplication.query_for_center(ctx)).scalars().all()
        assert {a.center_id for a in apps} == {center_a.id}


# ═════════════════════════════════════════════════════════════════════════════
# 3. Middleware
# ═════════════════════════════════════════════════════════════════════════════

class TestTenantMiddleware:
    def test_me_reports_center_scope(self, client, auth, center_a):
        user = create_user("caseworker", "Pass1234!", Role.ORG_CASEWORKER, center_id=center_a.id)
        headers = auth(Role.ORG_CASEWORKER, center_a.id, username=user.username, user_id=user.id)

        res = client.get("/api/auth/me", headers=headers)
        assert res.status_code == 200
        assert res.get_json()["tenant"] == {
            "center_id": center_a.id,
            "is_multi_center": False,
            "is_app_admin": False,
            "is_super_admin": False,
            "is_hq": False,
        }

    def test_me_reports_global_scope_for_app_admin(self, client, auth):
        user = create_user("root", "Pass1234!", Role.APP_ADMIN)

        res = client.get("/api/auth/me", headers=auth(Role.APP_ADMIN, None, user_id=user.id))
        tenant = res.get_json()["tenant"]
        assert tenant["center_id"] is None
        assert tenant["is_multi_center"] is True
        assert tenant["is_super_admin"] is True

    def test_resolution_failure_yields_zero_rows(self, client, auth, center_a, make_application, monkeypatch):
        make_application(center_a)

        def _boom(*args, **kwargs):
            raise RuntimeError("tenant lookup exploded")

        monkeypatch.setattr("welfare.middleware.tenant_context.resolve_tenant_context", _boom)

        res = client.get("/api/madressaApplication", headers=auth(Role.ORG_ADMIN, center_a.id))
        assert res.status_code == 200
        assert res.get_json() == []

    def test_scoped_listing_through_api(self, client, auth, center_a, center_b, make_application):
        make_application(center_a)
        make_application(center_b)

        res = client.get("/api/madressaApplication", headers=auth(Role.ORG_EXECUTIVE, center_b.id))
        assert res.status_code == 200
        assert [a["center_id"] for a in res.get_json()] == [center_b.id]

        res = client.get("/api/madressaApplication", headers=auth(Role.APP_ADMIN))
        assert len(res.get_json()) == 2
