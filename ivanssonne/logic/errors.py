class EngineError(Exception):
    """Base class for rule engine contract violations."""


class InvalidArgument(EngineError, ValueError):
    """A rotation step, side number or feature address is malformed."""


class InconsistentState(EngineError):
    """The game state contradicts itself (missing feature, unknown player...)."""
