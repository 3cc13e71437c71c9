"""
Service package marker.

Intentionally empty to avoid heavy imports at package import time.
Import the concrete modules directly, e.g.:

    from services.recommend import rank_events
    from services.participant_ranker import build_participant_ranker
    from services.proximity import nearby
"""
__all__: list[str] = []
