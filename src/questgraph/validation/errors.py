"""Error taxonomy for research graph operations.

- QuestGraphError: Base class for every recoverable operation failure
- InvalidParameterError: Caller input failed a parameter check
- WrongStageError: Operation invoked out of stage order
- MissingNodeError: Referenced node is absent or of the wrong kind
- HypothesisBatchError: Every item of a hypothesis batch failed
"""

from __future__ import annotations

import json
from typing import Any


class QuestGraphError(Exception):
    """Base class for recoverable graph operation failures."""


class InvalidParameterError(QuestGraphError, ValueError):
    """A caller-supplied value failed validation.

    Attributes:
        field: Name of the offending parameter (e.g. ``hypotheses[1].content``).
        received: The value that was supplied.
        expected: Human-readable description of the accepted shape.
        examples: Up to three example valid values.
    """

    def __init__(
        self,
        field: str,
        received: Any,
        expected: str,
        examples: list[Any] | None = None,
    ) -> None:
        self.field = field
        self.received = received
        self.expected = expected
        self.examples = list(examples or [])[:3]
        super().__init__(
            f"Invalid parameter '{field}': {expected}. Received: {_render(received)}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the structured error detail."""
        return {
            "field": self.field,
            "received": self.received,
            "expected": self.expected,
            "examples": self.examples,
        }


class WrongStageError(QuestGraphError):
    """An operation was invoked when the stage cursor did not match."""

    def __init__(self, operation: str, current: int, expected: int) -> None:
        self.operation = operation
        self.current = current
        self.expected = expected
        super().__init__(
            f"Cannot {operation}. Current stage: {current}, expected: {expected}"
        )


class MissingNodeError(QuestGraphError, KeyError):
    """A referenced node does not exist or has the wrong kind."""

    def __init__(self, node_id: str, message: str) -> None:
        self.node_id = node_id
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return self.message


class HypothesisBatchError(QuestGraphError):
    """No hypothesis in a batch could be created."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(
            f"Failed to create any hypotheses. Errors: {'; '.join(self.errors)}"
        )


def _render(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


__all__ = [
    "QuestGraphError",
    "InvalidParameterError",
    "WrongStageError",
    "MissingNodeError",
    "HypothesisBatchError",
]
