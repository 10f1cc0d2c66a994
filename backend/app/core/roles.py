"""Module: roles."""

from enum import Enum

from app.core.config import settings


class Role(str, Enum):
    TEACHER = "teacher"
    HOD = "hod"
    PRINCIPAL = "principal"


class Capability(str, Enum):
    APPLY_LEAVE = "apply_leave"
    REVIEW_LEAVE = "review_leave"
    VIEW_ALL_LEAVES = "view_all_leaves"


# Explicit authorization map; call sites ask for a capability, never compare role strings.
ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.TEACHER: frozenset({Capability.APPLY_LEAVE}),
    Role.HOD: frozenset({Capability.APPLY_LEAVE, Capability.REVIEW_LEAVE}),
    Role.PRINCIPAL: frozenset(
        {Capability.APPLY_LEAVE, Capability.REVIEW_LEAVE, Capability.VIEW_ALL_LEAVES}
    ),
}

# Older records from the simplified variant used "admin" for every reviewer.
LEGACY_ROLE_ALIASES = {"admin": Role.HOD}


def parse_role(value: str | None) -> Role:
    raw = (value or "").strip().lower()
    if raw in LEGACY_ROLE_ALIASES:
        return LEGACY_ROLE_ALIASES[raw]
    return Role(raw)


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def is_department_scoped(role: Role) -> bool:
    """True when a reviewer of this role may only act within their own department."""
    if not has_capability(role, Capability.REVIEW_LEAVE):
        return False
    if has_capability(role, Capability.VIEW_ALL_LEAVES):
        return False
    return settings.reviewer_department_scope
