"""
Proficiency profile accessors.

A profile is a mapping of technology name -> non-negative usage weight.
"Not found" is always reported as an empty mapping, never raised.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    def get(self, participant_id: str) -> Dict[str, int]:
        ...


class InMemoryProfileStore:
    def __init__(self, profiles: Optional[Mapping[str, Mapping[str, int]]] = None):
        self._profiles: Dict[str, Dict[str, int]] = {
            pid: dict(mapping) for pid, mapping in (profiles or {}).items()
        }

    def get(self, participant_id: str) -> Dict[str, int]:
        return dict(self._profiles.get(participant_id) or {})

    def upsert(self, participant_id: str, mapping: Mapping[str, int]) -> None:
        self._profiles[participant_id] = dict(mapping)


class SqliteProfileStore:
    def __init__(self, db_path: Path | str):
        self._db_path = str(db_path)
        with self._connect() as conn:
            self._init_schema(conn)

    # ---------- DB helpers ----------

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _init_schema(conn: sqlite3.Connection) -> None:
        conn.execute("""
        CREATE TABLE IF NOT EXISTS proficiency (
            participant_id TEXT,
            technology TEXT,
            weight INTEGER CHECK (weight >= 0) NOT NULL,
            PRIMARY KEY (participant_id, technology)
        )
        """)
        conn.commit()

    # ---------- Profiles ----------

    def get(self, participant_id: str) -> Dict[str, int]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT technology, weight FROM proficiency WHERE participant_id = ?",
                    (participant_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            logger.warning(
                "profile lookup failed for %s: %s (treating as no profile)",
                participant_id,
                exc,
            )
            return {}
        return {r["technology"]: int(r["weight"]) for r in rows}

    def upsert(self, participant_id: str, mapping: Mapping[str, int]) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM proficiency WHERE participant_id = ?",
                (participant_id,),
            )
            conn.executemany(
                """
                INSERT INTO proficiency (participant_id, technology, weight)
                VALUES (?, ?, ?)
                """,
                [
                    (participant_id, tech, max(0, int(weight)))
                    for tech, weight in mapping.items()
                ],
            )
            conn.commit()
