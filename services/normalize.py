from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping

_ws_re = re.compile(r"\s+")


def normalize_tech(name: str | None) -> str:
    """Canonical form used for every technology-name comparison."""
    if not name:
        return ""
    return _ws_re.sub("", name).lower()


def proficiency_index(proficiency: Mapping[str, int] | None) -> Dict[str, int]:
    """
    Map normalized technology name -> weight.

    Keys that collapse to the same normalized form keep the highest weight;
    negative or non-integer weights count as zero.
    """
    index: Dict[str, int] = {}
    for key, weight in (proficiency or {}).items():
        norm = normalize_tech(key)
        if not norm:
            continue
        try:
            w = max(0, int(weight))
        except (TypeError, ValueError):
            w = 0
        index[norm] = max(index.get(norm, 0), w)
    return index


def distinct_technologies(techs: Iterable[str] | None) -> List[tuple[str, str]]:
    """
    (normalized, original) pairs in first-seen order, one per normalized name.
    """
    seen: set[str] = set()
    out: List[tuple[str, str]] = []
    for tech in techs or []:
        norm = normalize_tech(tech)
        if not norm or norm in seen:
            continue
        seen.add(norm)
        out.append((norm, tech))
    return out
