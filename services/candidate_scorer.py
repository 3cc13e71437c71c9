"""
AI-assisted candidate scoring.

One prompt per event lists every candidate (id, name, skill names, bio);
the model answers with a JSON array of
``{"candidateId", "score", "matchedSkills"}`` objects which is validated
against the known candidates and the event's required technologies.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, List, Optional, Sequence

from schemas import Candidate, Event, MatchEvaluation, ScoredCandidate
from services.ai_client import (
    AIScoringConfig,
    ScoringBackend,
    ScoringResponseError,
    ScoringTierError,
    build_backend,
)
from services.normalize import distinct_technologies, normalize_tech

logger = logging.getLogger(__name__)

SKILL_LEVELS = ("Beginner", "Intermediate", "Advanced", "Expert")

RANKING_PROMPT = """You are an AI hackathon recruiter.

Hackathon:
Title: {title}
Theme: {theme}
Organization: {organization}
Required Tech Stacks: {techs}
Mode: {mode}
Location: {location}

Candidates:
{candidates}

Task:
- Score each candidate from 0 to 100 based on how well they match the hackathon requirements
- Consider: tech stack alignment, experience level, and relevance to theme
- Return ONLY a JSON array in this exact format:
[{{"candidateId": "user123", "score": 85, "matchedSkills": ["Java", "Spring Boot"]}}]

Rules:
- Return ONLY the JSON array, no explanation text
- Include every candidate who has at least one matching skill
- score must be an integer between 0 and 100
- matchedSkills must only include skills that are in the hackathon's required tech stacks
"""

EVALUATION_PROMPT = """You are an expert at matching developers with hackathons based on their technical skills and experience.

HACKATHON DETAILS:
- Title: {title}
- Theme: {theme}
- Organization: {organization}
{about}- Required Tech Stacks: {techs}
- Mode: {mode}
- Location: {location}

DEVELOPER PROFILE:
- Display Name: {name}
{bio}- Framework Usage (proficiency scores):
{usage}

TASK:
Evaluate how well this developer matches the hackathon requirements.
Consider:
1. Tech stack alignment (how many required technologies match)
2. Proficiency level in matching technologies
3. Overall skill level based on framework usage scores
4. Relevance to hackathon theme and requirements

Return a JSON object with the following structure:
{{
  "matchScore": <integer 0-100>,
  "overallSkillLevel": "<Beginner|Intermediate|Advanced|Expert>",
  "matchingReason": "<brief explanation of why this developer is a good match>"
}}

Only return the JSON object, no additional text.
"""

# --------------------------
# Prompt construction
# --------------------------

def _event_fields(event: Event) -> Dict[str, str]:
    return {
        "title": event.title or "",
        "theme": event.theme or "",
        "organization": event.organization or "",
        "techs": ", ".join(event.required_technologies),
        "mode": event.mode or "",
        "location": event.location or "",
    }


def candidate_record(candidate: Candidate) -> Dict[str, Any]:
    # skill names only; weights, credentials and contact data stay out
    return {
        "id": candidate.id,
        "name": candidate.name,
        "skills": list((candidate.proficiency or {}).keys()),
        "bio": (candidate.bio or "").replace("\n", " ").strip(),
    }


def build_prompt(event: Event, candidates: Sequence[Candidate]) -> str:
    records = [candidate_record(c) for c in candidates]
    return RANKING_PROMPT.format(
        candidates=json.dumps(records, ensure_ascii=False, indent=1),
        **_event_fields(event),
    )


def build_evaluation_prompt(event: Event, candidate: Candidate) -> str:
    usage = "\n".join(
        f"  * {tech}: {weight}"
        for tech, weight in (candidate.proficiency or {}).items()
    )
    return EVALUATION_PROMPT.format(
        about=f"- About: {event.about}\n" if event.about else "",
        name=candidate.name or "",
        bio=f"- Bio: {candidate.bio}\n" if candidate.bio else "",
        usage=usage or "  * (none)",
        **_event_fields(event),
    )


# --------------------------
# Response extraction
# --------------------------

def _extract_first(text: str | None, opener: str, kind: type) -> Any:
    if not text or not text.strip():
        raise ScoringResponseError("empty response text")
    # fences and prose around the value are skipped, never rewritten
    decoder = json.JSONDecoder()
    idx = text.find(opener)
    while idx != -1:
        try:
            value, _ = decoder.raw_decode(text, idx)
        except json.JSONDecodeError:
            value = None
        if isinstance(value, kind):
            return value
        idx = text.find(opener, idx + 1)
    raise ScoringResponseError(f"no JSON {kind.__name__} found in response")


def extract_json_array(text: str | None) -> List[Any]:
    """First well-formed top-level JSON array in `text`, ignoring prose and code fences."""
    return _extract_first(text, "[", list)


def extract_json_object(text: str | None) -> Dict[str, Any]:
    return _extract_first(text, "{", dict)


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return float(min(100.0, max(0.0, value)))


def _validated_skills(value: Any, required: Dict[str, str]) -> Optional[List[str]]:
    if value is None:
        return []
    if not isinstance(value, list):
        return None
    out: List[str] = []
    for skill in value:
        if not isinstance(skill, str):
            continue
        canonical = required.get(normalize_tech(skill))
        if canonical is not None and canonical not in out:
            out.append(canonical)
    return out


def parse_response(
    text: str | None, event: Event, candidates: Sequence[Candidate]
) -> List[ScoredCandidate]:
    """
    Validate the model's answer against the candidates that were sent.

    Unknown ids and entries without a numeric score are dropped, scores are
    clamped into [0, 100], skills outside the event's stack are removed.
    """
    entries = extract_json_array(text)

    known: Dict[str, Candidate] = {}
    for c in candidates:
        if c is not None and c.is_valid:
            known.setdefault(c.id, c)
    required = {norm: tech for norm, tech in distinct_technologies(event.required_technologies)}

    out: List[ScoredCandidate] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        cid = entry.get("candidateId", entry.get("userId"))
        if cid is None:
            continue
        cid = str(cid)
        if cid not in known or cid in seen:
            continue
        score = _coerce_score(entry.get("score"))
        skills = _validated_skills(entry.get("matchedSkills"), required)
        if score is None or skills is None:
            logger.debug("dropping malformed AI entry for %s: %r", cid, entry)
            continue
        seen.add(cid)
        out.append(
            ScoredCandidate(
                candidate_id=cid,
                display_name=known[cid].name,
                score=score,
                matched_skills=skills,
            )
        )
    return out


def parse_evaluation(text: str | None) -> MatchEvaluation:
    data = extract_json_object(text)

    # out-of-range scores are replaced, not clamped
    raw = data.get("matchScore")
    match_score = 50
    if (
        isinstance(raw, (int, float))
        and not isinstance(raw, bool)
        and math.isfinite(raw)
        and 0 <= raw <= 100
    ):
        match_score = int(round(raw))

    level = data.get("overallSkillLevel")
    level = level.strip().capitalize() if isinstance(level, str) else ""
    if level not in SKILL_LEVELS:
        level = "Intermediate"

    reason = data.get("matchingReason")
    if not isinstance(reason, str) or not reason.strip():
        reason = "Matched based on tech stack"

    return MatchEvaluation(match_score=match_score, skill_level=level, reason=reason.strip())


# --------------------------
# Scorer
# --------------------------

class CandidateScorer:
    """AI tier. Unconfigured means a clean skip (empty result), not an error."""

    name = "ai"

    def __init__(
        self,
        config: AIScoringConfig,
        backend: Optional[ScoringBackend] = None,
    ) -> None:
        self._config = config
        self._backend = backend if backend is not None else build_backend(config)

    @property
    def enabled(self) -> bool:
        return self._config.is_configured and self._backend is not None

    def score(self, event: Event, candidates: Sequence[Candidate]) -> List[ScoredCandidate]:
        if not self.enabled:
            logger.debug("AI scorer not configured; skipping tier")
            return []

        batch = [c for c in candidates if c is not None and c.is_valid]
        batch = batch[: self._config.max_prompt_candidates]
        if not batch:
            return []

        prompt = build_prompt(event, batch)
        text = self._backend.generate(prompt)
        scored = parse_response(text, event, batch)
        logger.info(
            "AI scorer returned %d usable entries for event %s", len(scored), event.id
        )
        return scored

    def evaluate(self, event: Event, candidate: Candidate) -> Optional[MatchEvaluation]:
        """Single-candidate evaluation with skill level and reason; None when unavailable."""
        if not self.enabled or candidate is None or not candidate.is_valid:
            return None
        try:
            text = self._backend.generate(build_evaluation_prompt(event, candidate))
            return parse_evaluation(text)
        except ScoringTierError as exc:
            logger.warning(
                "AI evaluation failed for %s on event %s: %s",
                candidate.id,
                event.id,
                exc,
            )
            return None
