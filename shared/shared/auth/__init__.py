from shared.auth.config import AuthSettings
from shared.auth.dependencies import (
    get_auth_settings,
    get_current_user_optional,
    get_current_user_required,
)

__all__ = [
    "AuthSettings",
    "get_auth_settings",
    "get_current_user_optional",
    "get_current_user_required",
]
