from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from routers.deps import get_candidate_scorer, get_participant_ranker, get_profile_store
from schemas import Candidate, Event, MatchEvaluation, ScoredCandidate
from services.candidate_scorer import CandidateScorer
from services.participant_ranker import ParticipantRanker
from services.profiles import ProfileStore

router = APIRouter(prefix="/candidates", tags=["candidates"])

logger = logging.getLogger(__name__)


class RecommendCandidatesRequest(BaseModel):
    event: Event
    candidates: List[Optional[Candidate]] = Field(default_factory=list)


class RecommendCandidatesResponse(BaseModel):
    event_id: str
    count: int
    items: List[ScoredCandidate]


class EvaluateRequest(BaseModel):
    event: Event
    candidate: Candidate


class EvaluateResponse(BaseModel):
    ok: bool
    evaluation: Optional[MatchEvaluation] = None
    debug: Optional[dict] = None


@router.post("/recommended", response_model=RecommendCandidatesResponse)
def recommended(
    body: RecommendCandidatesRequest,
    ranker: ParticipantRanker = Depends(get_participant_ranker),
) -> RecommendCandidatesResponse:
    try:
        items = ranker.rank_candidates(body.event, body.candidates)
        return RecommendCandidatesResponse(
            event_id=body.event.id, count=len(items), items=items
        )

    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("candidates.recommended failed for %s", body.event.id)
        raise HTTPException(
            status_code=500, detail=f"candidates.recommended failed: {exc!r}"
        )


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(
    body: EvaluateRequest,
    scorer: CandidateScorer = Depends(get_candidate_scorer),
    profiles: ProfileStore = Depends(get_profile_store),
) -> EvaluateResponse:
    """
    Single-candidate AI evaluation (score, skill level, reason).
    Returns ok=False instead of failing when the AI is unavailable.
    """
    candidate = body.candidate
    if not candidate.is_valid:
        raise HTTPException(status_code=422, detail="candidate needs an id and a name")
    if not candidate.proficiency:
        candidate = candidate.model_copy(
            update={"proficiency": profiles.get(candidate.id)}
        )

    if not scorer.enabled:
        return EvaluateResponse(ok=False, debug={"ai": "not_configured"})

    result = scorer.evaluate(body.event, candidate)
    if result is None:
        return EvaluateResponse(ok=False, debug={"ai": "unavailable"})
    return EvaluateResponse(ok=True, evaluation=result)
