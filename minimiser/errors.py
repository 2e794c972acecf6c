class MinimisationError(ValueError):
    """Base class for errors raised by the minimisation pipeline."""


class CapacityExceeded(MinimisationError):
    """Adding a state would exceed the store's configured maximum."""


class InvalidStart(MinimisationError):
    """Pruning was started from a state that is not live in the store."""


class InvalidHandle(MinimisationError):
    """A state handle or name does not refer to a live state of the store."""


class UnknownSymbol(MinimisationError):
    """A transition used a symbol outside the store's alphabet."""
