"""Which events a caller may list, and under which heading.

An event stays active through the day after its last date: every check
compares against ``as_of - 1 day``.
"""

from datetime import datetime, timedelta

from src.events.dtos import Event

GRACE_PERIOD = timedelta(days=1)


def cutoff(as_of: datetime) -> datetime:
    return as_of - GRACE_PERIOD


def is_visible_to(event: Event, groups: frozenset[str]) -> bool:
    return not event.group_visibility.isdisjoint(groups)


def is_active(event: Event, groups: frozenset[str], as_of: datetime) -> bool:
    if event.is_archived or not is_visible_to(event, groups):
        return False
    limit = cutoff(as_of)
    return any(event_date.date >= limit for event_date in event.event_dates)


def is_archived(event: Event, groups: frozenset[str], as_of: datetime) -> bool:
    if not is_visible_to(event, groups):
        return False
    limit = cutoff(as_of)
    return event.is_archived or all(event_date.date < limit for event_date in event.event_dates)


def is_signed_up(event: Event, user_id: str, as_of: datetime) -> bool:
    if event.is_archived:
        return False
    limit = cutoff(as_of)
    return any(
        event_date.date > limit and event_date.find_entry(user_id) is not None
        for event_date in event.event_dates
    )
