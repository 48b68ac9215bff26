"""
Domain models for the memory game.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class Direction(str, Enum):
    """The two ways a person can be tested."""

    FACE_TO_NAME = "face-to-name"
    NAME_TO_FACE = "name-to-face"


class CardState(IntEnum):
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class Rating(IntEnum):
    """FSRS review outcome. The game only ever produces AGAIN and GOOD."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


@dataclass(frozen=True)
class Person:
    """
    One roster entry.

    Attributes:
        id: Opaque identifier from the directory, always a string.
        display_name: Full name as shown in the directory.
        image_ref: URL or path of the profile photo.
        pronouns: Free-form pronoun string, used to pick plausible distractors.
    """

    id: str
    display_name: str
    image_ref: str
    pronouns: str | None = None

    @property
    def is_usable(self) -> bool:
        return bool(self.display_name and self.display_name.strip() and self.image_ref)


@dataclass
class Card:
    """
    Mastery record for one (person, direction) pair.

    Attributes:
        state: FSRS learning state.
        due: When the card becomes eligible for re-testing (UTC).
        difficulty: FSRS difficulty (1-10), None until the first grade.
        stability: FSRS stability in days, None until the first grade.
        last_review: Time of the most recent grade.
        reps: Number of grades applied.
        lapses: Number of AGAIN grades received while in REVIEW.
    """

    due: datetime
    state: CardState = CardState.NEW
    difficulty: float | None = None
    stability: float | None = None
    last_review: datetime | None = None
    reps: int = 0
    lapses: int = 0


@dataclass(frozen=True)
class CardRef:
    """Pointer to a card: the person and the direction being tested."""

    person: Person
    direction: Direction

    @property
    def key(self) -> str:
        return card_key(self.person.id, self.direction)


@dataclass
class ActiveChallenge:
    """A round in progress, persisted so a reload resumes it."""

    target_id: str
    direction: Direction
    option_ids: list[str] = field(default_factory=list)
    has_errored: bool = False


def card_key(person_id: str, direction: Direction) -> str:
    return f"{person_id}:{direction.value}"
