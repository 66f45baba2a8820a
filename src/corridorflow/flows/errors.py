"""Exceptions and validation issue types for flow definitions.

Operator mistakes (bad field values, wrong step order) are never raised:
they are collected as ValidationIssue records. The exceptions below are
reserved for programmer errors and storage boundary failures.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a validation issue."""

    FIELD = "field"                      # Malformed or missing scalar input
    SEQUENCE_SHAPE = "sequence_shape"    # Payout missing, misplaced or repeated
    STEP_TRANSITION = "step_transition"  # Location/asset precondition violated
    CROSS_FIELD = "cross_field"          # min > max


@dataclass(frozen=True)
class ValidationIssue:
    """A single operator-recoverable problem with a draft."""

    key: str
    kind: ErrorKind
    message: str


def step_key(index: int) -> str:
    """Error map key for the step at a given position."""
    return f"step-{index}"


def issues_to_map(issues: list[ValidationIssue]) -> dict[str, str]:
    """Collapse issues into a key -> message map, first issue per key wins."""
    errors: dict[str, str] = {}
    for issue in issues:
        errors.setdefault(issue.key, issue.message)
    return errors


class FlowError(Exception):
    """Base class for corridor flow errors."""


class UnknownStepError(FlowError, TypeError):
    """Raised when a step object is not one of the known variants."""

    def __init__(self, step: object):
        self.step = step
        super().__init__(f"Unknown flow step: {type(step).__name__}")


class DraftNormalizationError(FlowError, ValueError):
    """Raised when a non-blank field cannot be converted to a number."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Cannot normalize {field}={value!r}: not a finite number")


class ProviderDefaultsError(FlowError, KeyError):
    """Raised when reference data has no entry for a provider."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No defaults configured for provider '{provider}'")

    def __str__(self) -> str:
        return self.args[0]


class FlowDefinitionBuilderError(FlowError):
    """Raised when a definition cannot be expanded into system steps."""


class FlowDefinitionConflictError(FlowError):
    """Raised when a corridor already has a flow definition."""


class FlowDefinitionNotFoundError(FlowError):
    """Raised when updating a definition id that does not exist."""

    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(f"Flow definition '{definition_id}' not found")


class CorridorUnsupportedError(FlowError):
    """Raised when opening a corridor that is marked unsupported."""

    def __init__(self, corridor: str, reason: Optional[str] = None):
        self.corridor = corridor
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Corridor {corridor} is unsupported{detail}")
