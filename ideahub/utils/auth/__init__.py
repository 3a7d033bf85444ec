"""Authentication utilities."""

from .tokens import create_token, create_token_pair
from .dependencies import (
    get_current_user,
    get_optional_user,
    oauth2_scheme,
    require_role,
)

__all__ = [
    "create_token",
    "create_token_pair",
    "get_current_user",
    "get_optional_user",
    "oauth2_scheme",
    "require_role",
]
