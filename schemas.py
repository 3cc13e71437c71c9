from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, NonNegativeInt, model_validator

ProficiencyMapping = Dict[str, NonNegativeInt]


class Event(BaseModel):
    id: str
    title: Optional[str] = None
    theme: Optional[str] = None
    organization: Optional[str] = None
    mode: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    required_technologies: List[str] = Field(default_factory=list)
    creator_id: Optional[str] = None
    accepted_participants: List[str] = Field(default_factory=list)
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_registration_window(self) -> "Event":
        start, end = self.registration_start, self.registration_end
        if start is None or end is None:
            return self
        if (start.tzinfo is None) != (end.tzinfo is None):
            # naive timestamps are taken as UTC
            start = start if start.tzinfo else start.replace(tzinfo=timezone.utc)
            end = end if end.tzinfo else end.replace(tzinfo=timezone.utc)
        if end < start:
            raise ValueError("registration_end cannot be before registration_start")
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Candidate(BaseModel):
    # id/name stay optional: malformed records are skipped by the rankers,
    # not rejected at the boundary.
    id: Optional[str] = None
    display_name: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    proficiency: Optional[ProficiencyMapping] = None

    @property
    def name(self) -> Optional[str]:
        return self.display_name or self.username

    @property
    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.name)

    @property
    def has_profile(self) -> bool:
        return bool(self.proficiency)


class ScoredEvent(BaseModel):
    event: Event
    match_count: int = Field(0, ge=0)
    proficiency_score: float = Field(0.0, ge=0)


class ScoredCandidate(BaseModel):
    candidate_id: str
    display_name: str
    score: float = Field(..., ge=0, le=100)
    matched_skills: List[str] = Field(default_factory=list)


class MatchEvaluation(BaseModel):
    match_score: int = Field(..., ge=0, le=100)
    skill_level: str = "Intermediate"
    reason: str = "Matched based on tech stack"
