"""
Participant ranking for an event.

Scoring strategies are tried in order (AI, deterministic fallback, last
resort) until one yields a non-empty result. Only failures on the external
call and response-parsing boundaries (ScoringTierError) are absorbed here;
anything else is a defect and propagates.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from schemas import Candidate, Event, ScoredCandidate
from services.ai_client import AIScoringConfig, ScoringBackend, ScoringTierError
from services.candidate_scorer import CandidateScorer
from services.fallback import FallbackScorer, LastResortScorer, by_score
from services.profiles import ProfileStore

logger = logging.getLogger(__name__)


class ScoringStrategy(Protocol):
    name: str

    def score(self, event: Event, candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
        ...


class ParticipantRanker:
    def __init__(
        self,
        strategies: Optional[Sequence[ScoringStrategy]] = None,
        profiles: Optional[ProfileStore] = None,
    ) -> None:
        self._strategies: List[ScoringStrategy] = list(
            strategies if strategies is not None else (FallbackScorer(), LastResortScorer())
        )
        self._last_resort = LastResortScorer()
        self._profiles = profiles

    def _with_profile(self, candidate: Candidate) -> Candidate:
        if self._profiles is None or candidate.proficiency or not candidate.id:
            return candidate
        return candidate.model_copy(update={"proficiency": self._profiles.get(candidate.id)})

    def rank_candidates(
        self, event: Event, candidates: Sequence[Optional[Candidate]]
    ) -> List[ScoredCandidate]:
        everyone = list(candidates or [])
        if not everyone:
            logger.info("rank_candidates: no candidates for event %s", event.id)
            return []

        excluded = set(event.accepted_participants)
        if event.creator_id:
            excluded.add(event.creator_id)

        eligible = [
            self._with_profile(c)
            for c in everyone
            if c is not None and c.id not in excluded
        ]
        logger.info(
            "rank_candidates: %d eligible of %d for event %s",
            len(eligible),
            len(everyone),
            event.id,
        )

        if not eligible:
            # every candidate is excluded; still surface one
            logger.warning(
                "no eligible candidates for event %s, picking from the full set",
                event.id,
            )
            return self._last_resort.score(event, everyone)

        for strategy in self._strategies:
            try:
                result = strategy.score(event, eligible)
            except ScoringTierError as exc:
                logger.warning(
                    "%s tier failed for event %s: %s", strategy.name, event.id, exc
                )
                continue
            if result:
                logger.info(
                    "%s tier produced %d candidates for event %s",
                    strategy.name,
                    len(result),
                    event.id,
                )
                return by_score(result)
            logger.info("%s tier empty for event %s", strategy.name, event.id)

        # nothing usable among eligible candidates
        result = self._last_resort.score(event, everyone)
        if not result:
            logger.warning("rank_candidates: no recommendation for event %s", event.id)
        return result


def build_participant_ranker(
    config: AIScoringConfig,
    profiles: Optional[ProfileStore] = None,
    backend: Optional[ScoringBackend] = None,
) -> ParticipantRanker:
    ai = CandidateScorer(config, backend=backend)
    if ai.enabled:
        logger.info(
            "AI scoring enabled: provider=%s model=%s key=%s",
            config.provider,
            config.model,
            config.masked_key,
        )
    else:
        logger.info("AI scoring disabled (no API key/model configured)")
    return ParticipantRanker(
        strategies=[ai, FallbackScorer(), LastResortScorer()],
        profiles=profiles,
    )
