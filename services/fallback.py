from __future__ import annotations

import logging
from typing import List, Sequence

from schemas import Candidate, Event, ScoredCandidate
from services.normalize import distinct_technologies, proficiency_index

logger = logging.getLogger(__name__)

# score given to candidates kept only to avoid an empty result
PLACEHOLDER_SCORE = 10.0


def placeholder(candidate: Candidate) -> ScoredCandidate:
    return ScoredCandidate(
        candidate_id=candidate.id,
        display_name=candidate.name,
        score=PLACEHOLDER_SCORE,
        matched_skills=[],
    )


def skill_score(event: Event, candidate: Candidate) -> tuple[List[str], float]:
    """Matched required technologies (event spelling) and the summed weight behind them."""
    index = proficiency_index(candidate.proficiency)
    matched: List[str] = []
    raw = 0.0
    for norm, tech in distinct_technologies(event.required_technologies):
        if norm in index:
            matched.append(tech)
            raw += index[norm]
    return matched, raw


def by_score(results: List[ScoredCandidate]) -> List[ScoredCandidate]:
    return sorted(results, key=lambda s: (-s.score, -len(s.matched_skills)))


class FallbackScorer:
    """
    Deterministic skill-overlap scoring.

    Candidates with a profile and a positive overlap are scored
    ``min(100, raw / 10)``. Candidates without any profile data are held as
    backups; candidates whose profile simply does not overlap are dropped.
    """

    name = "fallback"

    def score(self, event: Event, candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
        scored: List[ScoredCandidate] = []
        backups: List[ScoredCandidate] = []

        for candidate in candidates:
            if candidate is None or not candidate.is_valid:
                continue
            if not candidate.has_profile:
                backups.append(placeholder(candidate))
                continue
            matched, raw = skill_score(event, candidate)
            if matched and raw > 0:
                scored.append(
                    ScoredCandidate(
                        candidate_id=candidate.id,
                        display_name=candidate.name,
                        score=min(100.0, raw / 10),
                        matched_skills=matched,
                    )
                )

        logger.info(
            "fallback scorer: %d scored, %d without profile for event %s",
            len(scored),
            len(backups),
            event.id,
        )
        if scored:
            return by_score(scored)
        if backups:
            return backups[:1]
        return []


class LastResortScorer:
    """First structurally valid candidate at the placeholder score."""

    name = "last_resort"

    def score(self, event: Event, candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
        for candidate in candidates:
            if candidate is not None and candidate.is_valid:
                return [placeholder(candidate)]
        logger.warning("last resort: no valid candidate for event %s", event.id)
        return []
