from __future__ import annotations

from typing import Iterable, List, Tuple

from schemas import Event
from services.geo import distance_km

DEFAULT_RADIUS_KM = 100.0


def nearby(
    point: Tuple[float, float],
    events: Iterable[Event],
    radius_km: float = DEFAULT_RADIUS_KM,
) -> List[Event]:
    """
    Events within `radius_km` of `point`, in input order.
    Events without coordinates never match.
    """
    lat, lon = point
    out: List[Event] = []
    for event in events:
        if event is None or not event.has_coordinates:
            continue
        if distance_km(lat, lon, event.latitude, event.longitude) <= radius_km:
            out.append(event)
    return out
