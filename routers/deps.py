from __future__ import annotations

from functools import lru_cache

from config import settings
from services.ai_client import AIScoringConfig
from services.candidate_scorer import CandidateScorer
from services.participant_ranker import ParticipantRanker, build_participant_ranker
from services.profiles import ProfileStore, SqliteProfileStore


@lru_cache(maxsize=1)
def get_profile_store() -> ProfileStore:
    return SqliteProfileStore(settings.profile_db_path)


@lru_cache(maxsize=1)
def get_ai_config() -> AIScoringConfig:
    return AIScoringConfig.from_settings(settings)


@lru_cache(maxsize=1)
def get_candidate_scorer() -> CandidateScorer:
    return CandidateScorer(get_ai_config())


@lru_cache(maxsize=1)
def get_participant_ranker() -> ParticipantRanker:
    return build_participant_ranker(get_ai_config(), profiles=get_profile_store())


def get_default_radius_km() -> float:
    return settings.default_radius_km
