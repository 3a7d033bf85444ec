"""Request dependencies used by the routers."""

from .auth.dependencies import (  # noqa: F401
    get_current_user,
    get_optional_user,
    require_role,
)
