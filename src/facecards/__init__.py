"""facecards: learn the names and faces of a community roster."""

from facecards.consts import VERSION

__version__ = VERSION
__all__ = ["__version__"]
