"""
RBAC Matrix — pure authorizer tests (no app, no database).

Test blocks:
  1. Role table & helpers
  2. Module classification
  3. App Admin bypass
  4. Org Executive read-only
  5. Org Caseworker allow-list and carve-outs
  6. HQ center management
  7. Route role lists & unknown roles
"""

import pytest

from welfare.services.rbac_matrix import (
    ALL_METHODS,
    CASEWORKER_MODULES,
    MODULE_ROUTE_MAP,
    ROLE_DEFINITIONS,
    AccessScope,
    Role,
    authorize,
    coerce_role,
    module_for_path,
    needs_center_restriction,
    role_label,
)

WRITE = ("POST", "PUT", "DELETE", "PATCH")

SAMPLE_PATHS = (
    "/api/tasks",
    "/api/tasks/4",
    "/api/centerDetail/5",
    "/api/employee",
    "/api/inventoryItems/2",
    "/api/parent-questionnaire/reports",
    "/api/lookup/Gender",
    "/api/somethingUnmapped",
    "/",
)


# ═════════════════════════════════════════════════════════════════════════════
# 1. Role table & helpers
# ═════════════════════════════════════════════════════════════════════════════

class TestRoleTable:
    def test_five_roles_defined(self):
        assert [int(r) for r in Role] == [1, 2, 3, 4, 5]
        assert set(ROLE_DEFINITIONS) == set(Role)

    def test_only_app_admin_is_global(self):
        globals_ = [r for r, d in ROLE_DEFINITIONS.items() if d.access_scope is AccessScope.GLOBAL]
        assert globals_ == [Role.APP_ADMIN]

    def test_center_restriction_flags(self):
        assert needs_center_restriction(Role.APP_ADMIN) is False
        assert needs_center_restriction(Role.HQ) is False
        assert needs_center_restriction(Role.ORG_ADMIN) is True
        assert needs_center_restriction(Role.ORG_EXECUTIVE) is True
        assert needs_center_restriction(Role.ORG_CASEWORKER) is True

    def test_unknown_role_is_restricted(self):
        assert needs_center_restriction(99) is True
        assert needs_center_restriction("abc") is True
        assert needs_center_restriction(None) is True

    def test_role_table_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_DEFINITIONS[Role.HQ] = ROLE_DEFINITIONS[Role.APP_ADMIN]

    @pytest.mark.parametrize("value,expected", [
        (1, Role.APP_ADMIN),
        ("4", Role.ORG_EXECUTIVE),
        (Role.ORG_CASEWORKER, Role.ORG_CASEWORKER),
        (0, None),
        (6, None),
        ("x", None),
        (None, None),
        (True, None),
    ])
    def test_coerce_role(self, value, expected):
        assert coerce_role(value) == expected

    def test_role_label(self):
        assert role_label(Role.ORG_EXECUTIVE) == "Org Executive"
        assert role_label(None) == "Unknown"


# ═════════════════════════════════════════════════════════════════════════════
# 2. Module classification
# ═════════════════════════════════════════════════════════════════════════════

class TestModuleForPath:
    def test_exact_prefix(self):
        assert module_for_path("/api/tasks") == "Tasks"
        assert module_for_path("/api/tasks/12") == "Tasks"

    def test_case_insensitive(self):
        assert module_for_path("/API/CenterDetail/5") == "Center_Detail"

    def test_sibling_prefixes_do_not_collide(self):
        assert module_for_path("/api/applicantIncome/3") == "Applicant_Income"
        assert module_for_path("/api/applicantExpense") == "Applicant_Expense"
        assert module_for_path("/api/applicantDetails/1") == "Applicant_Details"

    def test_prefix_must_end_on_segment_boundary(self):
        # /api/tasksArchive is not the Tasks module
        assert module_for_path("/api/tasksArchive") == "tasksarchive"

    def test_unmapped_falls_back_to_first_segment(self):
        assert module_for_path("/api/widgets/9") == "widgets"

    def test_every_mapped_prefix_resolves_to_itself(self):
        for module, prefix in MODULE_ROUTE_MAP.items():
            assert module_for_path(prefix + "/1") == module


# ═════════════════════════════════════════════════════════════════════════════
# 3. App Admin bypass
# ═════════════════════════════════════════════════════════════════════════════

class TestAppAdmin:
    @pytest.mark.parametrize("path", SAMPLE_PATHS)
    @pytest.mark.parametrize("method", sorted(ALL_METHODS))
    def test_app_admin_always_allowed(self, method, path):
        decision = authorize(Role.APP_ADMIN, method, path)
        assert decision.allowed is True

    def test_app_admin_bypasses_route_role_list(self):
        decision = authorize(1, "GET", "/api/anything", allowed_roles=[2, 3])
        assert decision.allowed is True
        assert decision.reason == "app_admin_bypass"


# ═════════════════════════════════════════════════════════════════════════════
# 4. Org Executive read-only
# ═════════════════════════════════════════════════════════════════════════════

class TestOrgExecutive:
    @pytest.mark.parametrize("module", [
        m for m in MODULE_ROUTE_MAP if m not in ("Folders", "Conversations", "Lookup")
    ])
    def test_get_allowed_writes_denied(self, module):
        path = MODULE_ROUTE_MAP[module] + "/1"
        assert authorize(Role.ORG_EXECUTIVE, "GET", path).allowed is True
        for method in WRITE:
            decision = authorize(Role.ORG_EXECUTIVE, method, path)
            assert decision.allowed is False, (method, path)
            assert decision.reason == "view_only"

    def test_denial_body(self):
        decision = authorize(4, "POST", "/api/tasks")
        assert decision.to_response() == {
            "msg": "Forbidden: Executives have view-only access",
            "your_role": 4,
            "role_name": "Org Executive",
            "allowed_methods": ["GET"],
            "attempted_method": "POST",
        }

    @pytest.mark.parametrize("path", [
        "/api/folders/2",
        "/api/personalfiles",
        "/api/conversations/7",
        "/api/conversations/7/messages",
        "/api/lookup/Gender",
    ])
    def test_file_manager_chat_and_lookup_exempt(self, path):
        for method in WRITE:
            assert authorize(Role.ORG_EXECUTIVE, method, path).allowed is True


# ═════════════════════════════════════════════════════════════════════════════
# 5. Org Caseworker allow-list and carve-outs
# ═════════════════════════════════════════════════════════════════════════════

class TestOrgCaseworker:
    @pytest.mark.parametrize("module", [m for m in CASEWORKER_MODULES if m in MODULE_ROUTE_MAP])
    def test_allow_list_modules_full_crud(self, module):
        path = MODULE_ROUTE_MAP[module]
        for method in sorted(ALL_METHODS):
            assert authorize(Role.ORG_CASEWORKER, method, path).allowed is True, (method, path)

    @pytest.mark.parametrize("path", [
        "/api/inventoryItems",
        "/api/inventoryTransactions/3",
        "/api/supplierProfile",
        "/api/centerDetail/1",
    ])
    def test_modules_outside_list_denied_for_all_methods(self, path):
        for method in sorted(ALL_METHODS):
            decision = authorize(Role.ORG_CASEWORKER, method, path)
            assert decision.allowed is False
            assert decision.reason == "module_not_permitted"

    def test_module_denial_body(self):
        body = authorize(5, "GET", "/api/supplierProfile/2").to_response()
        assert body["your_role"] == 5
        assert body["role_name"] == "Org Caseworker"
        assert body["allowed_modules"] == list(CASEWORKER_MODULES)
        assert body["attempted_route"] == "/api/supplierProfile/2"

    def test_lookup_carve_out_precedes_role_list(self):
        decision = authorize(5, "GET", "/api/lookup/Gender", allowed_roles=[1, 2, 3])
        assert decision.allowed is True
        assert decision.reason == "carve_out:lookup"

    def test_dashboard_carve_out(self):
        assert authorize(5, "GET", "/api/dashboard/summary").reason == "carve_out:dashboard"

    def test_employee_carve_out_get_only(self):
        assert authorize(5, "GET", "/api/employee").allowed is True
        assert authorize(5, "POST", "/api/employee").allowed is False

    def test_training_institution_carve_out_get_only(self):
        assert authorize(5, "GET", "/api/trainingInstitution").allowed is True
        assert authorize(5, "GET", "/api/training_institution/2").allowed is True
        assert authorize(5, "DELETE", "/api/trainingInstitution/2").allowed is False

    @pytest.mark.parametrize("path", [
        "/api/madressaApplication/1",
        "/api/madressah/results",
        "/api/parent-questionnaire/reports",
        "/api/policyAndProcedure",
        "/api/policy_and_procedure/3",
    ])
    def test_madressa_carve_out_bypasses_route_roles(self, path):
        decision = authorize(5, "POST", path, allowed_roles=[1, 2, 3])
        assert decision.allowed is True
        assert decision.reason == "carve_out:madressa"

    def test_file_manager_carve_out_requires_route_role(self):
        allowed = authorize(5, "PUT", "/api/folders/3", allowed_roles=[1, 2, 3, 4, 5])
        assert allowed.reason == "carve_out:file_manager_and_chat"

        denied = authorize(5, "PUT", "/api/folders/3", allowed_roles=[1, 2, 3])
        assert denied.allowed is False
        assert denied.reason == "role_mismatch"

    def test_carve_outs_checked_in_order(self):
        # "dashboard" wins even though the path also contains "lookup"
        assert authorize(5, "GET", "/api/dashboard/lookup").reason == "carve_out:dashboard"


# ═════════════════════════════════════════════════════════════════════════════
# 6. HQ center management
# ═════════════════════════════════════════════════════════════════════════════

class TestHQ:
    def test_hq_reads_centers(self):
        assert authorize(Role.HQ, "GET", "/api/centerDetail/5").allowed is True

    @pytest.mark.parametrize("method", WRITE)
    def test_hq_cannot_manage_centers(self, method):
        decision = authorize(Role.HQ, method, "/api/centerDetail/5")
        assert decision.allowed is False
        assert decision.reason == "hq_center_management"
        assert decision.to_response()["role_name"] == "HQ"

    def test_hq_full_crud_elsewhere(self):
        for method in sorted(ALL_METHODS):
            assert authorize(Role.HQ, method, "/api/tasks/1").allowed is True

    def test_module_metadata_overrides_path(self):
        decision = authorize(Role.HQ, "POST", "/api/whatever", module="Center_Detail")
        assert decision.allowed is False


# ═════════════════════════════════════════════════════════════════════════════
# 7. Route role lists & unknown roles
# ═════════════════════════════════════════════════════════════════════════════

class TestRouteRoles:
    def test_role_not_in_route_list(self):
        decision = authorize(Role.ORG_EXECUTIVE, "GET", "/api/parent-questionnaire/reports",
                             allowed_roles=[1, 2, 3])
        assert decision.allowed is False
        assert decision.to_response() == {
            "msg": "Forbidden: insufficient rights",
            "required_roles": [1, 2, 3],
            "your_role": 4,
            "role_name": "Org Executive",
        }

    def test_org_admin_full_crud(self):
        for method in sorted(ALL_METHODS):
            assert authorize(Role.ORG_ADMIN, method, "/api/inventoryItems/1").allowed is True

    @pytest.mark.parametrize("role", [None, 0, 7, "admin"])
    def test_unknown_role_denied(self, role):
        decision = authorize(role, "GET", "/api/lookup/Gender")
        assert decision.allowed is False
        assert decision.reason == "role_mismatch"

    def test_numeric_string_role_accepted(self):
        assert authorize("3", "DELETE", "/api/tasks/1").allowed is True
