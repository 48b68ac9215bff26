"""Exceptions raised by the game engine and the directory proxy."""


class FacecardsError(Exception):
    """Base class for every error facecards raises on purpose."""


class DirectoryAuthError(FacecardsError):
    """The directory refused us (HTTP 401) or no token was available. The user must log in."""


class DirectoryUnavailableError(FacecardsError):
    """The directory could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RosterTooSmallError(FacecardsError):
    """Fewer than two people have both a name and a photo."""

    def __init__(self, usable: int):
        super().__init__(f"Not enough profiles to start a game ({usable} usable).")
        self.usable = usable


class NoActiveChallengeError(FacecardsError):
    """A choice arrived while no round was open (e.g. double submission)."""


class UnknownChoiceError(FacecardsError):
    """A choice id that is not one of the current round's options."""

    def __init__(self, choice_id: str):
        super().__init__(f"'{choice_id}' is not an option in the current challenge.")
        self.choice_id = choice_id
