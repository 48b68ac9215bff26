"""Streak counter and the cosmetic feedback derived from it."""

import logging
from dataclasses import dataclass

from facecards.domain import constants as C
from facecards.domain.constants import STREAK_RECORD
from facecards.domain.ports import StateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakDisplay:
    """What a renderer needs to draw the streak bar."""

    count: int
    visible: bool
    progress_percent: int  # fills up every 10 points
    color: str | None
    shake_intensity: int  # px, grows every 5 points


def announcement_for(count: int) -> str | None:
    return C.STREAK_NAMES.get(count)


def display_for(count: int) -> StreakDisplay:
    if count <= 0:
        return StreakDisplay(
            count=0, visible=False, progress_percent=0, color=None, shake_intensity=0
        )
    color = next(c for threshold, c in C.STREAK_COLORS if count >= threshold)
    return StreakDisplay(
        count=count,
        visible=True,
        progress_percent=(count % 10 or 10) * 10,
        color=color,
        shake_intensity=min(count // C.STREAK_SHAKE_STEP, C.STREAK_MAX_SHAKE),
    )


class Streak:
    """Consecutive first-try correct answers, persisted across reloads."""

    def __init__(self, store: StateStore):
        self._store = store
        raw = store.load(STREAK_RECORD)
        self.count = raw if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0 else 0

    def hit(self) -> str | None:
        """Count a first-try correct answer; returns a milestone announcement if one was reached."""
        self.count += 1
        self._store.save(STREAK_RECORD, self.count)
        announcement = announcement_for(self.count)
        if announcement:
            logger.info(f"Streak milestone {self.count}: {announcement}")
        return announcement

    def reset(self) -> None:
        self.count = 0
        self._store.save(STREAK_RECORD, 0)

    @property
    def display(self) -> StreakDisplay:
        return display_for(self.count)
