from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from schemas import Event


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _cmp(dt: datetime, now: datetime) -> datetime:
    # naive timestamps are taken as UTC
    if dt.tzinfo is None and now.tzinfo is not None:
        return dt.replace(tzinfo=timezone.utc)
    if dt.tzinfo is not None and now.tzinfo is None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def is_active(event: Event, now: Optional[datetime] = None) -> bool:
    """Registration has not closed yet (open-ended windows stay active)."""
    now = _now(now)
    end = event.registration_end
    return end is None or _cmp(end, now) > now


def active_events(events: Iterable[Event], now: Optional[datetime] = None) -> List[Event]:
    """Events still open for registration, in input order."""
    now = _now(now)
    return [e for e in events if e is not None and is_active(e, now)]


def upcoming_events(events: Iterable[Event], now: Optional[datetime] = None) -> List[Event]:
    now = _now(now)
    out = [
        e for e in events
        if e is not None
        and e.registration_start is not None
        and _cmp(e.registration_start, now) > now
    ]
    return sorted(out, key=lambda e: _start_key(e, now))


def ongoing_events(events: Iterable[Event], now: Optional[datetime] = None) -> List[Event]:
    now = _now(now)
    out = [
        e for e in events
        if e is not None
        and e.registration_start is not None
        and e.registration_end is not None
        and _cmp(e.registration_start, now) < now < _cmp(e.registration_end, now)
    ]
    return sorted(out, key=lambda e: _start_key(e, now))


def past_events(events: Iterable[Event], now: Optional[datetime] = None) -> List[Event]:
    now = _now(now)
    out = [
        e for e in events
        if e is not None
        and e.registration_end is not None
        and _cmp(e.registration_end, now) < now
    ]
    # most recently closed first
    return sorted(out, key=lambda e: _cmp(e.registration_end, now), reverse=True)


def _start_key(event: Event, now: datetime) -> datetime:
    start = event.registration_start
    if start is None:
        return datetime.min.replace(tzinfo=now.tzinfo)
    return _cmp(start, now)
