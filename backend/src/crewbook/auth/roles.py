"""Roles and statuses used for access control.

Two independent role axes exist:

- SystemRole lives on User and is global. "admin" is a platform operator
  who may list all organisations and manage user accounts.
- MemberRole lives on Member and only applies inside one organisation.

Organisation permission matrix:
┌──────────────────────────────┬───────┬────┬──────────┬──────┐
│ Action                       │ ADMIN │ HR │ EMPLOYEE │ SELF │
├──────────────────────────────┼───────┼────┼──────────┼──────┤
│ View organisation            │   ✓   │ ✓  │    ✓     │      │
│ Update / delete organisation │   ✓   │    │          │      │
│ List / add / edit members    │   ✓   │ ✓  │          │      │
│ Deactivate member            │   ✓   │    │          │      │
│ Rename own member record     │   ✓   │ ✓  │          │  ✓   │
│ Upload / read documents      │   ✓   │ ✓  │          │  ✓   │
│ Delete documents             │   ✓   │ ✓  │          │      │
│ Read audit log               │   ✓   │    │          │      │
└──────────────────────────────┴───────┴────┴──────────┴──────┘
"""

from enum import Enum
from typing import FrozenSet


class SystemRole(str, Enum):
    """Global account role stored on user.role."""
    USER = "user"
    ADMIN = "admin"


class MemberRole(str, Enum):
    """Organisation-scoped role stored on member.role."""
    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"


class MemberStatus(str, Enum):
    """Employment status stored on member.status.

    Only ACTIVE members pass organisation access checks.
    """
    PENDING = "pending"
    ACTIVE = "active"
    VACATION = "vacation"
    PAID_LEAVE = "paid_leave"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


ADMIN_ROLES: FrozenSet[str] = frozenset({MemberRole.ADMIN.value})
ADMIN_OR_HR_ROLES: FrozenSet[str] = frozenset({MemberRole.ADMIN.value, MemberRole.HR.value})


def has_member_role(role: str, allowed: FrozenSet[str]) -> bool:
    """Check a member role against an allowed set.

    Examples:
        >>> has_member_role("hr", ADMIN_OR_HR_ROLES)
        True
        >>> has_member_role("employee", ADMIN_OR_HR_ROLES)
        False
    """
    return role in allowed
