from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping

from schemas import Event, ScoredEvent
from services.normalize import distinct_technologies, proficiency_index

logger = logging.getLogger(__name__)

# events are ranked by how many required technologies the participant knows,
# then by how much weight the participant carries in them


def score_event(event: Event, index: Dict[str, int]) -> ScoredEvent:
    match_count = 0
    proficiency = 0.0
    for norm, _tech in distinct_technologies(event.required_technologies):
        if norm in index:
            match_count += 1
            proficiency += index[norm]
    return ScoredEvent(
        event=event, match_count=match_count, proficiency_score=proficiency
    )


def rank_events(
    proficiency: Mapping[str, int] | None, events: Iterable[Event]
) -> List[ScoredEvent]:
    index = proficiency_index(proficiency)
    if not index:
        logger.info("rank_events: empty proficiency mapping, nothing to rank")
        return []

    scored = [score_event(e, index) for e in events if e is not None]
    # sorted() is stable: equal keys keep input order
    scored = sorted(
        scored, key=lambda s: (-s.match_count, -s.proficiency_score)
    )
    ranked = [s for s in scored if s.proficiency_score > 0]
    logger.debug(
        "rank_events: %d of %d events with positive proficiency",
        len(ranked),
        len(scored),
    )
    return ranked
