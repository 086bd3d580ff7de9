"""### Failure kinds of the geometry transformer. ###"""

# Standard Library
from enum import IntEnum


class ErrorKind(IntEnum):
    """Where a transform failed. One kind per origin. The values are stable codes."""
    INVALID_ARGUMENT = 1
    DECODE_FAILURE = 2
    ITERATOR_OPEN_FAILURE = 3
    VERTEX_READ_FAILURE = 4
    VERTEX_WRITE_FAILURE = 5
    ENCODE_FAILURE = 6
    ALLOCATION_FAILURE = 7


class GeometryTransformError(RuntimeError):
    """Raised by the geometry transformer. `kind` names the step that failed."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(f"{kind.name}: {message}")
        self.kind = kind

    @property
    def code(self) -> int:
        return int(self.kind)
