"""Error kinds raised by the spatial layout engine."""


class SpatialError(Exception):
    """Base class for layout engine failures."""


class NotFoundError(SpatialError, LookupError):
    """A referenced universe, zone or layer id does not exist."""

    def __init__(self, kind: str, ref_id: str):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"{kind} not found: {ref_id}")


class InsufficientInputError(SpatialError, ValueError):
    """An operation needs more inputs than it was given."""

    def __init__(self, message: str, required: int = 0, given: int = 0):
        self.required = required
        self.given = given
        super().__init__(message)
