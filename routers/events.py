from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, NonNegativeInt, model_validator

from routers.deps import get_default_radius_km, get_profile_store
from schemas import Event, ScoredEvent
from services.profiles import ProfileStore
from services.proximity import nearby
from services.recommend import rank_events
from services.windows import active_events

router = APIRouter(prefix="/events", tags=["events"])

logger = logging.getLogger(__name__)

# ---------- Requests / Responses ----------


class RecommendEventsRequest(BaseModel):
    participant_id: Optional[str] = None
    proficiency: Optional[Dict[str, NonNegativeInt]] = None
    events: List[Event] = Field(default_factory=list)
    active_only: bool = True

    @model_validator(mode="after")
    def _needs_profile_source(self) -> "RecommendEventsRequest":
        if self.proficiency is None and not self.participant_id:
            raise ValueError("either participant_id or proficiency is required")
        return self


class RecommendEventsResponse(BaseModel):
    count: int
    items: List[ScoredEvent]


class NearbyRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius_km: Optional[float] = Field(None, gt=0)
    events: List[Event] = Field(default_factory=list)
    active_only: bool = True


class NearbyResponse(BaseModel):
    radius_km: float
    count: int
    items: List[Event]


# ---------- Routes ----------


@router.post("/recommended", response_model=RecommendEventsResponse)
def recommended(
    body: RecommendEventsRequest,
    profiles: ProfileStore = Depends(get_profile_store),
) -> RecommendEventsResponse:
    """
    Rank events for a participant.

    - Uses `proficiency` from the body, or loads it by `participant_id`.
    - Restricts to events whose registration is still open unless
      `active_only` is false.
    """
    try:
        proficiency = body.proficiency
        if proficiency is None:
            proficiency = profiles.get(body.participant_id)

        events = active_events(body.events) if body.active_only else body.events
        ranked = rank_events(proficiency, events)
        return RecommendEventsResponse(count=len(ranked), items=ranked)

    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("events.recommended failed")
        raise HTTPException(
            status_code=500, detail=f"events.recommended failed: {exc!r}"
        )


@router.post("/nearby", response_model=NearbyResponse)
def nearby_events(
    body: NearbyRequest,
    default_radius: float = Depends(get_default_radius_km),
) -> NearbyResponse:
    radius = body.radius_km or default_radius
    try:
        events = active_events(body.events) if body.active_only else body.events
        items = nearby((body.latitude, body.longitude), events, radius)
        return NearbyResponse(radius_km=radius, count=len(items), items=items)

    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("events.nearby failed")
        raise HTTPException(
            status_code=500, detail=f"events.nearby failed: {exc!r}"
        )
