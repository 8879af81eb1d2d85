"""
Fixed role → capability table.

Roles are exactly user / admin / super_admin.  Every permission decision in
the service (route guards on token roles, service-level checks on the role
stored in the database) goes through ``can``; nothing else compares roles.
"""
from __future__ import annotations

import enum
from collections.abc import Iterable

from shared.constants import Role
from app.exceptions import (
    AdminAccessRequired,
    CannotModerateAdmin,
    SuperAdminAccessRequired,
)


class Capability(str, enum.Enum):
    SUBMIT_REPORTS = "submit_reports"
    # Work the report queue (open / resolve / reject / priority).
    HANDLE_REPORTS = "handle_reports"
    # See and act on every report, not only the ones assigned to you.
    HANDLE_ANY_REPORT = "handle_any_report"
    REASSIGN_REPORTS = "reassign_reports"
    # Picked by the load balancer when a report is submitted.
    RECEIVE_AUTO_ASSIGNMENT = "receive_auto_assignment"
    # Valid target of a manual reassignment.
    RECEIVE_REASSIGNMENT = "receive_reassignment"
    MODERATE_ACCOUNTS = "moderate_accounts"
    MAINTAIN_COUNTERS = "maintain_counters"
    # Target of suspend / ban / lives changes. Admins are immune.
    SUBJECT_TO_MODERATION = "subject_to_moderation"
    # Loses lives and collects conduct entries when content is removed.
    ACCRUES_CONDUCT = "accrues_conduct"


_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.USER: frozenset({
        Capability.SUBMIT_REPORTS,
        Capability.SUBJECT_TO_MODERATION,
        Capability.ACCRUES_CONDUCT,
    }),
    Role.ADMIN: frozenset({
        Capability.SUBMIT_REPORTS,
        Capability.HANDLE_REPORTS,
        Capability.RECEIVE_AUTO_ASSIGNMENT,
        Capability.RECEIVE_REASSIGNMENT,
        Capability.MODERATE_ACCOUNTS,
    }),
    Role.SUPER_ADMIN: frozenset({
        Capability.SUBMIT_REPORTS,
        Capability.HANDLE_REPORTS,
        Capability.HANDLE_ANY_REPORT,
        Capability.REASSIGN_REPORTS,
        Capability.RECEIVE_REASSIGNMENT,
        Capability.MODERATE_ACCOUNTS,
        Capability.MAINTAIN_COUNTERS,
    }),
}


def can(role: Role | str, capability: Capability) -> bool:
    try:
        role = Role(role)
    except ValueError:
        return False
    return capability in _CAPABILITIES.get(role, frozenset())


def any_can(roles: Iterable[Role | str], capability: Capability) -> bool:
    return any(can(r, capability) for r in roles)


def roles_with(capability: Capability) -> list[Role]:
    return [role for role, granted in _CAPABILITIES.items() if capability in granted]


def ensure_staff(role: Role | str) -> None:
    if not can(role, Capability.HANDLE_REPORTS):
        raise AdminAccessRequired()


def ensure_super_admin(role: Role | str) -> None:
    if not can(role, Capability.REASSIGN_REPORTS):
        raise SuperAdminAccessRequired()


def ensure_moderatable(role: Role | str) -> None:
    """Fail closed: anything not explicitly moderatable is treated as an admin."""
    if not can(role, Capability.SUBJECT_TO_MODERATION):
        raise CannotModerateAdmin()
