"""Exceptions raised by the Macau engine."""


class MacauError(Exception):
    """Base class for engine errors."""


class ValidationError(MacauError):
    """Rejected input: wrong turn, malformed card or suit, bad player count.

    Raised before any state is touched.
    """


class IllegalPlayError(ValidationError):
    """A card cannot be played right now."""


class ResourceExhaustion(MacauError):
    """A finite resource ran out."""


class EmptyDeckError(ResourceExhaustion):
    """Draw attempted from an empty deck."""


class InvariantViolation(MacauError):
    """Internal state is inconsistent. Indicates a bug, not a bad command."""
