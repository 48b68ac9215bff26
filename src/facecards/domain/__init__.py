# Domain Package
from .errors import (
    DirectoryAuthError,
    DirectoryUnavailableError,
    FacecardsError,
    NoActiveChallengeError,
    RosterTooSmallError,
    UnknownChoiceError,
)
from .models import (
    ActiveChallenge,
    Card,
    CardRef,
    CardState,
    Direction,
    Person,
    Rating,
    card_key,
)
from .ports import StateStore

__all__ = [
    "ActiveChallenge",
    "Card",
    "CardRef",
    "CardState",
    "Direction",
    "Person",
    "Rating",
    "card_key",
    "StateStore",
    "FacecardsError",
    "DirectoryAuthError",
    "DirectoryUnavailableError",
    "RosterTooSmallError",
    "NoActiveChallengeError",
    "UnknownChoiceError",
]
