"""
Role checks shared across apps.

The identity layer hands us an opaque role string per request; the only
privileged value the core understands is ``ROLE_ADMIN``.
"""

ROLE_USER = "User"
ROLE_SELLER = "Seller"
ROLE_ADMIN = "Admin"


def is_admin(user) -> bool:
    """True when an authenticated user carries the admin role."""
    if not getattr(user, "is_authenticated", False):
        return False
    return getattr(user, "role", None) == ROLE_ADMIN

