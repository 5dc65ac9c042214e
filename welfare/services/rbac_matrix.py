"""
RBAC Matrix — centralized role table, module map and route authorizer.

Role hierarchy:
  1 = App Admin       — global access, all centers, all operations
  2 = HQ              — all operations except center management, own center data
  3 = Org Admin       — full CRUD within own center
  4 = Org Executive   — read-only within own center (file manager, chat, lookups exempt)
  5 = Org Caseworker  — CRUD on a fixed module allow-list within own center

Evaluation order of ``authorize`` (first match wins):
  unknown role → caseworker carve-outs → App Admin bypass → route role list
  → executive read-only → caseworker module allow-list → HQ center management
  → allow

Carve-outs match lower-cased path fragments anywhere in the request path,
so aliased routes (``/api/lookup/Gender``, ``/lookup/Gender``) classify alike.

This module is pure: no Flask imports, no database access.

Usage:
    from welfare.services.rbac_matrix import Role, authorize
    decision = authorize(Role.ORG_EXECUTIVE, "POST", "/api/tasks")
    decision.allowed       # False
    decision.to_response() # 403 body
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType


# ═════════════════════════════════════════════════════════════════════════════
# Enums & Role table
# ═════════════════════════════════════════════════════════════════════════════

class Role(IntEnum):
    APP_ADMIN = 1
    HQ = 2
    ORG_ADMIN = 3
    ORG_EXECUTIVE = 4
    ORG_CASEWORKER = 5


class AccessScope(str, Enum):
    GLOBAL = "global"
    MULTI_CENTER = "multi-center"
    CENTER_ONLY = "center-only"


ALL_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})
READ_ONLY_METHODS = frozenset({"GET"})
WRITE_METHODS = frozenset({"POST", "PUT", "DELETE", "PATCH"})

ALL_MODULES = "all"
ALL_EXCEPT_CENTERS = "all_except_centers"

CENTER_DETAIL = "Center_Detail"

CASEWORKER_MODULES = (
    "Dashboard",
    "Applicant_Details",
    "Tasks",
    "Comments",
    "Relationships",
    "Home_Visit",
    "Financial_Assistance",
    "Food_Assistance",
    "Attachments",
    "Programs",
    "Financial_Assessment",
    "Applicant_Income",
    "Applicant_Expense",
    "Madressa_Application",
    "Conduct_Assessment",
    "Islamic_Results",
    "Academic_Results",
    "Parent_Questionnaire",
    "Policy_and_Procedure",
    "Folders",
    "Conversations",
)


@dataclass(frozen=True)
class RoleDefinition:
    id: int
    label: str
    access_scope: AccessScope
    center_restricted: bool
    allowed_methods: frozenset
    allowed_modules: str | frozenset
    description: str = ""

    def permits_method(self, method: str) -> bool:
        return method.upper() in self.allowed_methods

    def permits_module(self, module: str) -> bool:
        if self.allowed_modules == ALL_MODULES:
            return True
        if self.allowed_modules == ALL_EXCEPT_CENTERS:
            return module != CENTER_DETAIL
        return module in self.allowed_modules


ROLE_DEFINITIONS = MappingProxyType({
    Role.APP_ADMIN: RoleDefinition(
        id=1,
        label="App Admin",
        access_scope=AccessScope.GLOBAL,
        center_restricted=False,
        allowed_methods=ALL_METHODS,
        allowed_modules=ALL_MODULES,
        description="Super Admin - full access to all centers and all operations",
    ),
    Role.HQ: RoleDefinition(
        id=2,
        label="HQ",
        access_scope=AccessScope.MULTI_CENTER,
        center_restricted=False,
        allowed_methods=ALL_METHODS,
        allowed_modules=ALL_EXCEPT_CENTERS,
        description="HQ - all data except organization management, filtered to the assigned center",
    ),
    Role.ORG_ADMIN: RoleDefinition(
        id=3,
        label="Org Admin",
        access_scope=AccessScope.CENTER_ONLY,
        center_restricted=True,
        allowed_methods=ALL_METHODS,
        allowed_modules=ALL_MODULES,
        description="Organization Admin - full CRUD within own center",
    ),
    Role.ORG_EXECUTIVE: RoleDefinition(
        id=4,
        label="Org Executive",
        access_scope=AccessScope.CENTER_ONLY,
        center_restricted=True,
        allowed_methods=READ_ONLY_METHODS,
        allowed_modules=ALL_MODULES,
        description="Organization Executive - view-only access within own center",
    ),
    Role.ORG_CASEWORKER: RoleDefinition(
        id=5,
        label="Org Caseworker",
        access_scope=AccessScope.CENTER_ONLY,
        center_restricted=True,
        allowed_methods=ALL_METHODS,
        allowed_modules=frozenset(CASEWORKER_MODULES),
        description="Caseworker - applicants, tasks, Madressa, file manager and chat within own center",
    ),
})

ALL_ROLES = frozenset(Role)


# ═════════════════════════════════════════════════════════════════════════════
# Module ↔ route map
# ═════════════════════════════════════════════════════════════════════════════

MODULE_ROUTE_MAP = MappingProxyType({
    "Applicant_Details": "/api/applicantDetails",
    "Tasks": "/api/tasks",
    "Comments": "/api/comments",
    "Relationships": "/api/relationships",
    "Home_Visit": "/api/homeVisit",
    "Financial_Assistance": "/api/financialAssistance",
    "Food_Assistance": "/api/foodAssistance",
    "Attachments": "/api/attachments",
    "Programs": "/api/programs",
    "Financial_Assessment": "/api/financialAssessment",
    "Applicant_Income": "/api/applicantIncome",
    "Applicant_Expense": "/api/applicantExpense",
    "Employee": "/api/employee",
    "Inventory_Items": "/api/inventoryItems",
    "Inventory_Transactions": "/api/inventoryTransactions",
    "Supplier_Profile": "/api/supplierProfile",
    "Center_Detail": "/api/centerDetail",
    "Dashboard": "/api/dashboard",
    "Folders": "/api/folders",
    "Conversations": "/api/conversations",
    "Madressa_Application": "/api/madressaApplication",
    "Conduct_Assessment": "/api/conductAssessment",
    "Islamic_Results": "/api/islamicResults",
    "Academic_Results": "/api/academicResults",
    "Parent_Questionnaire": "/api/parent-questionnaire",
    "Policy_and_Procedure": "/api/policyAndProcedure",
    "Lookup": "/api/lookup",
})


def module_for_path(path: str) -> str:
    """Classify a request path into a module name.

    Uses the longest MODULE_ROUTE_MAP prefix that matches on a segment
    boundary (case-insensitive), so ``/api/applicantIncome/3`` never
    resolves to a shorter sibling prefix. Unmapped paths fall back to their
    first segment after ``/api/``.
    """
    lowered = (path or "").lower().rstrip("/")
    best_module, best_len = None, -1
    for module, prefix in MODULE_ROUTE_MAP.items():
        p = prefix.lower()
        if (lowered == p or lowered.startswith(p + "/")) and len(p) > best_len:
            best_module, best_len = module, len(p)
    if best_module is not None:
        return best_module

    rest = lowered[len("/api/"):] if lowered.startswith("/api/") else lowered.lstrip("/")
    return rest.split("/", 1)[0]


# ═════════════════════════════════════════════════════════════════════════════
# Carve-outs (declarative precedence rules)
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CarveOut:
    """Path-fragment exemption from the default role restriction.

    Attributes:
        name: Reason recorded on the resulting decision.
        fragments: Lower-case substrings; any one matching is enough.
        methods: Restrict the carve-out to these methods (None = any).
        requires_route_role: Only applies when the route admits the role.
    """
    name: str
    fragments: tuple
    methods: frozenset | None = None
    requires_route_role: bool = False

    def matches(self, path_check: str, method: str, route_admits_role: bool) -> bool:
        if self.methods is not None and method not in self.methods:
            return False
        if self.requires_route_role and not route_admits_role:
            return False
        return any(fragment in path_check for fragment in self.fragments)


# Order matters: evaluated top to bottom, before the route role list.
CASEWORKER_CARVE_OUTS = (
    CarveOut("dashboard", ("dashboard",)),
    CarveOut("lookup", ("lookup",)),
    CarveOut("employee_dropdown", ("/employee",), methods=READ_ONLY_METHODS),
    CarveOut(
        "training_institution_dropdown",
        ("traininginstitution", "training_institution"),
        methods=READ_ONLY_METHODS,
    ),
    CarveOut(
        "madressa",
        ("madressa", "madressah", "parent-questionnaire",
         "policyandprocedure", "policy_and_procedure"),
    ),
    CarveOut(
        "file_manager_and_chat",
        ("/folders", "/conversations", "/personalfiles", "/messages"),
        requires_route_role=True,
    ),
)

# Executives keep full CRUD on file manager, chat and lookups.
EXECUTIVE_WRITE_EXEMPT_FRAGMENTS = (
    "/folders",
    "/personalfiles",
    "/conversations",
    "/messages",
    "/lookup",
)


# ═════════════════════════════════════════════════════════════════════════════
# Decision
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a single authorization check."""
    allowed: bool
    reason: str
    body: dict = field(default_factory=dict)

    def to_response(self) -> dict:
        return dict(self.body)


def _allow(reason: str) -> AccessDecision:
    return AccessDecision(allowed=True, reason=reason)


def _deny(reason: str, body: dict) -> AccessDecision:
    return AccessDecision(allowed=False, reason=reason, body=body)


def coerce_role(value) -> Role | None:
    """Parse a role identifier (int, numeric string or Role); None if unknown."""
    if isinstance(value, bool):
        return None
    try:
        return Role(int(value))
    except (TypeError, ValueError):
        return None


def role_label(role: Role | None) -> str:
    if role is None:
        return "Unknown"
    return ROLE_DEFINITIONS[role].label


def needs_center_restriction(role) -> bool:
    """Unknown roles are restricted."""
    resolved = coerce_role(role)
    if resolved is None:
        return True
    return ROLE_DEFINITIONS[resolved].center_restricted


def authorize(
    role,
    method: str,
    path: str,
    *,
    allowed_roles=None,
    module: str | None = None,
) -> AccessDecision:
    """Decide whether ``role`` may perform ``method`` on ``path``.

    Args:
        role: Role, int or numeric string from the authenticated principal.
        method: HTTP method.
        path: Full request path (e.g. ``/api/tasks/4``).
        allowed_roles: Roles admitted by the matched route, or None when the
            route declares no role list.
        module: Module name from route metadata; derived from ``path`` when None.

    Returns:
        AccessDecision — ``allowed`` plus, on denial, the 403 response body.
    """
    resolved = coerce_role(role)
    method = (method or "").upper()
    path = path or ""
    path_check = path.lower()
    admitted = frozenset(coerce_role(r) for r in allowed_roles) if allowed_roles is not None else None

    if resolved is None:
        return _deny("role_mismatch", {
            "msg": "Forbidden: insufficient rights",
            "required_roles": sorted(int(r) for r in admitted if r is not None) if admitted else [],
            "your_role": role,
            "role_name": role_label(None),
        })

    route_admits_role = admitted is None or resolved in admitted

    if resolved is Role.ORG_CASEWORKER:
        for carve_out in CASEWORKER_CARVE_OUTS:
            if carve_out.matches(path_check, method, route_admits_role):
                return _allow(f"carve_out:{carve_out.name}")

    if resolved is Role.APP_ADMIN:
        return _allow("app_admin_bypass")

    if not route_admits_role:
        return _deny("role_mismatch", {
            "msg": "Forbidden: insufficient rights",
            "required_roles": sorted(int(r) for r in admitted if r is not None),
            "your_role": int(resolved),
            "role_name": role_label(resolved),
        })

    definition = ROLE_DEFINITIONS[resolved]
    if module is None:
        module = module_for_path(path)

    if resolved is Role.ORG_EXECUTIVE:
        exempt = any(fragment in path_check for fragment in EXECUTIVE_WRITE_EXEMPT_FRAGMENTS)
        if not exempt and not definition.permits_method(method):
            return _deny("view_only", {
                "msg": "Forbidden: Executives have view-only access",
                "your_role": int(resolved),
                "role_name": definition.label,
                "allowed_methods": sorted(definition.allowed_methods),
                "attempted_method": method,
            })

    if resolved is Role.ORG_CASEWORKER and not definition.permits_module(module):
        return _deny("module_not_permitted", {
            "msg": (
                "Forbidden: Caseworkers can only access Applicants, Tasks, "
                "Madressa, File Manager, Chat, and Lookup APIs"
            ),
            "your_role": int(resolved),
            "role_name": definition.label,
            "allowed_modules": list(CASEWORKER_MODULES),
            "attempted_route": path,
        })

    if resolved is Role.HQ and module == CENTER_DETAIL and method in WRITE_METHODS:
        return _deny("hq_center_management", {
            "msg": "Forbidden: HQ cannot manage organizations (add/edit centers)",
            "your_role": int(resolved),
            "role_name": definition.label,
        })

    return _allow("role_permitted")
