from collections.abc import Iterable

from src.events.dtos import Event
from src.identity.dtos import Profile
from src.identity.permissions import signup_permissions_for_groups


def eligible_recipients(event: Event, profiles: Iterable[Profile]) -> list[str]:
    """E-mail addresses of members who may sign up for ``event``.

    Only verified addresses of members who picked a username count.
    """
    wanted = signup_permissions_for_groups(event.group_visibility)
    emails: list[str] = []
    seen: set[str] = set()
    for profile in profiles:
        if not (profile.email and profile.email_verified and profile.username):
            continue
        if wanted.isdisjoint(profile.permissions):
            continue
        if profile.email not in seen:
            seen.add(profile.email)
            emails.append(profile.email)
    return emails
