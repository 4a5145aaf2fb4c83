"""
Access decisions for mutating operations.

Callers check that the target resource exists first, then ask ``authorize``
for a decision and hand it to ``enforce``. Checks run in a fixed order:
authentication, role, ownership.
"""

import enum
from dataclasses import dataclass
from typing import Any, Collection, Optional

from app.core.errors import AuthenticationRequired, Forbidden, ForbiddenReason
from app.models.user.user import UserRole


# Default for owner_id: the operation has no ownership rule.
NO_OWNER_RULE = object()


class Decision(enum.Enum):
    ALLOW = "allow"
    AUTH_REQUIRED = "auth_required"
    ROLE_DENIED = "role_denied"
    OWNER_DENIED = "owner_denied"


@dataclass(frozen=True)
class Subject:
    id: int
    email: str
    role: UserRole


def authorize(
    subject: Optional[Subject],
    roles: Optional[Collection[UserRole]] = None,
    owner_id: Any = NO_OWNER_RULE,
) -> Decision:
    """Decide whether ``subject`` may act.

    ``roles`` restricts the subject's role to that set when given.
    ``owner_id`` requires the subject to be the resource owner when given
    (None means the resource has no owner, so nobody passes); a matching
    role does not make up for an owner mismatch.
    """
    if subject is None:
        return Decision.AUTH_REQUIRED
    if roles is not None and subject.role not in roles:
        return Decision.ROLE_DENIED
    if owner_id is not NO_OWNER_RULE and subject.id != owner_id:
        return Decision.OWNER_DENIED
    return Decision.ALLOW


def enforce(decision: Decision, action: str) -> None:
    """Raise the error matching a non-ALLOW decision. ``action`` reads like "update trips"."""
    if decision is Decision.ALLOW:
        return
    if decision is Decision.AUTH_REQUIRED:
        raise AuthenticationRequired(f"You must be logged in to {action}")
    if decision is Decision.ROLE_DENIED:
        raise Forbidden(ForbiddenReason.ROLE_MISMATCH, f"Your role is not allowed to {action}")
    raise Forbidden(ForbiddenReason.NOT_OWNER, f"You can only {action} that you own")


def check(
    subject: Optional[Subject],
    action: str,
    roles: Optional[Collection[UserRole]] = None,
    owner_id: Any = NO_OWNER_RULE,
) -> Subject:
    """authorize + enforce in one call; returns the now-known subject."""
    enforce(authorize(subject, roles=roles, owner_id=owner_id), action)
    return subject
