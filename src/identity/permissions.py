"""Permission tags and the member group policy.

A group is visible to callers holding its ``view`` permission. Members
holding its ``signup`` permission receive mail about the group's events.
"""

from collections.abc import Iterable
from dataclasses import dataclass

MANAGE_EVENTS = "manage:events"


@dataclass(frozen=True)
class GroupPermissions:
    view: str
    signup: str


MEMBER_GROUPS: dict[str, GroupPermissions] = {
    "dutch_garrison": GroupPermissions(view="view:dgevents", signup="signup:dgevent"),
    "dune_sea_base": GroupPermissions(view="view:dsbevents", signup="signup:dsbevent"),
}


def groups_for_permissions(
    permissions: Iterable[str],
    member_groups: dict[str, GroupPermissions] = MEMBER_GROUPS,
) -> frozenset[str]:
    """Return the groups whose events the permission set may view."""
    held = set(permissions)
    return frozenset(group for group, perms in member_groups.items() if perms.view in held)


def signup_permissions_for_groups(
    groups: Iterable[str],
    member_groups: dict[str, GroupPermissions] = MEMBER_GROUPS,
) -> frozenset[str]:
    return frozenset(member_groups[group].signup for group in groups if group in member_groups)
