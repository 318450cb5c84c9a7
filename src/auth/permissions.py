"""Role checks for interaction moderation.

Roles arrive as free-form strings from the identity provider and are recorded
on each comment at post time. Moderation privileges (deleting anyone's
comment, purging a content item's interactions, reading engagement analytics)
are granted to a configurable set of roles.
"""

from collections.abc import Iterable
from enum import Enum


class UserRole(str, Enum):
    """Roles issued by the identity provider."""

    MEMBER = "Member"  # Default for any signed-in user
    ADMIN = "Admin"
    ADMINISTRATOR = "Administrator"


DEFAULT_PRIVILEGED_ROLES: frozenset[str] = frozenset(
    {UserRole.ADMIN.value, UserRole.ADMINISTRATOR.value}
)


def normalize_role(role: UserRole | str | None) -> str:
    """Case-folded role name ("" for a missing role)."""
    if role is None:
        return ""
    value = role.value if isinstance(role, UserRole) else role
    return value.strip().casefold()


def is_privileged(
    role: UserRole | str | None,
    privileged_roles: Iterable[str] = DEFAULT_PRIVILEGED_ROLES,
) -> bool:
    """Check if a role grants moderation privileges.

    Comparison is case-insensitive, so "admin" and "Admin" are equivalent.

    Examples:
        >>> is_privileged("Admin")
        True
        >>> is_privileged("administrator")
        True
        >>> is_privileged("Member")
        False
        >>> is_privileged(None)
        False
    """
    normalized = normalize_role(role)
    if not normalized:
        return False
    return normalized in {normalize_role(r) for r in privileged_roles}


def can_delete_comment(
    author_id: str,
    requester_id: str,
    requester_role: UserRole | str | None,
    privileged_roles: Iterable[str] = DEFAULT_PRIVILEGED_ROLES,
) -> bool:
    """Authors may delete their own comments; privileged roles may delete any."""
    if requester_id and requester_id == author_id:
        return True
    return is_privileged(requester_role, privileged_roles)
