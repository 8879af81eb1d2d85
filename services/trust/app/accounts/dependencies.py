"""
Trust service — auth-specific FastAPI dependencies.

These wrap the shared auth dependencies and add the role guards backed by the
capability table.
"""
from __future__ import annotations

from fastapi import Depends

from shared.auth.dependencies import get_current_user_required
from shared.models.user import CurrentUser
from app.accounts.capabilities import Capability, any_can
from app.exceptions import AdminAccessRequired, SuperAdminAccessRequired

# Alias the shared dependency so routes import from here, not from shared
# directly.
get_current_user = get_current_user_required


def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raise 403 unless the token carries a role that can work the report queue."""
    if not any_can(current_user.roles, Capability.HANDLE_REPORTS):
        raise AdminAccessRequired()
    return current_user


def require_super_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Raise 403 unless the token carries SUPER_ADMIN."""
    if not any_can(current_user.roles, Capability.REASSIGN_REPORTS):
        raise SuperAdminAccessRequired()
    return current_user


def require_capability(capability: Capability):
    """Dependency factory: 403 unless one of the token's roles grants ``capability``."""

    def _guard(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not any_can(current_user.roles, capability):
            raise AdminAccessRequired()
        return current_user

    return _guard
