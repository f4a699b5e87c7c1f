"""
Validation error model for the OS Concepts Simulator.

Algorithms report bad input as a typed result instead of raising, so a
caller can render the message and retry with corrected input.
"""

from dataclasses import dataclass
from enum import Enum


class ValidationErrorKind(Enum):
    """Kinds of input-validation failure."""
    NEGATIVE_NEED = "NegativeNeed"
    SHAPE_MISMATCH = "ShapeMismatch"
    NEGATIVE_VALUE = "NegativeValue"
    INVALID_FRAME_COUNT = "InvalidFrameCount"
    INVALID_TIME_QUANTUM = "InvalidTimeQuantum"
    DUPLICATE_PROCESS_ID = "DuplicateProcessId"
    MISSING_PRIORITY = "MissingPriority"
    REQUEST_EXCEEDS_NEED = "RequestExceedsNeed"
    INVALID_REQUEST = "InvalidRequest"


@dataclass(frozen=True)
class ValidationError:
    """
    A rejected input.

    Attributes:
        kind: Category of the failure
        message: Human-readable explanation
    """
    kind: ValidationErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
