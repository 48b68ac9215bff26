"""Confusion Tracker: how often each person was mistaken for each other person."""

import logging

from pydantic import TypeAdapter, ValidationError

from facecards.domain.constants import CONFUSION_RECORD
from facecards.domain.ports import StateStore

logger = logging.getLogger(__name__)

_MATRIX = TypeAdapter(dict[str, dict[str, int]])


class ConfusionTracker:
    """
    Nested counts ``target_id -> other_id -> times other_id was picked for target_id``.

    Counts only ever grow. With ``symmetric=True`` a mistake is recorded in
    both directions, so the wrongly picked person also gets the target as a
    preferred distractor.
    """

    def __init__(self, store: StateStore, symmetric: bool = False):
        self._store = store
        self.symmetric = symmetric
        self._matrix: dict[str, dict[str, int]] = self._load()

    def _load(self) -> dict[str, dict[str, int]]:
        raw = self._store.load(CONFUSION_RECORD)
        if raw is None:
            return {}
        try:
            return _MATRIX.validate_python(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable confusion matrix: {e.error_count()} errors")
            return {}

    def record(self, target_id: str, picked_id: str) -> None:
        self._bump(target_id, picked_id)
        if self.symmetric:
            self._bump(picked_id, target_id)
        self._store.save(CONFUSION_RECORD, self._matrix)

    def _bump(self, a: str, b: str) -> None:
        row = self._matrix.setdefault(a, {})
        row[b] = row.get(b, 0) + 1

    def count(self, target_id: str, other_id: str) -> int:
        return self._matrix.get(target_id, {}).get(other_id, 0)

    def confused_with(self, target_id: str) -> list[tuple[str, int]]:
        """Ids mistaken for the target, most frequent first (ties keep insertion order)."""
        row = self._matrix.get(target_id, {})
        return sorted(row.items(), key=lambda item: item[1], reverse=True)

    def top_pairs(self, limit: int = 5) -> list[tuple[str, str, int]]:
        pairs = [
            (target, other, n)
            for target, row in self._matrix.items()
            for other, n in row.items()
        ]
        pairs.sort(key=lambda p: p[2], reverse=True)
        return pairs[:limit]

    def as_dict(self) -> dict[str, dict[str, int]]:
        return {target: dict(row) for target, row in self._matrix.items()}
