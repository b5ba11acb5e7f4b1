"""Stage transition records for ResearchGraph operations.

Every successful stage-advancing operation appends one StageTransition
to the graph's StageLog, which feeds the reasoning trace in exports.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4


@dataclass
class StageTransition:
    """Single stage transition record.

    Attributes:
        operation: Operation that advanced the stage (e.g. "decompose").
        from_stage: Cursor value before the operation.
        to_stage: Cursor value after the operation.
        node_ids: Node ids created by the operation.
        labels: Display labels of the created nodes, when meaningful.
        errors: Per-item failures that did not abort the operation.
        warnings: Non-fatal notes collected while running.
        id: Unique transition ID (UUID4 hex).
        timestamp: When the transition happened.
    """

    operation: str
    from_stage: int
    to_stage: int
    node_ids: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"[{self.id[:8]}] {self.operation}({self.from_stage}->{self.to_stage})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "operation": self.operation,
            "from_stage": self.from_stage,
            "to_stage": self.to_stage,
            "node_ids": list(self.node_ids),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "timestamp": self.timestamp.isoformat(),
        }


class StageLog:
    """Append-only stage transition history.

    Example:
        >>> log = StageLog()
        >>> log.append(StageTransition(operation="initialize", from_stage=0, to_stage=1))
        >>> len(log)
        1
    """

    def __init__(self) -> None:
        """Initialize an empty log."""
        self._entries: list[StageTransition] = []

    def append(self, entry: StageTransition) -> None:
        self._entries.append(entry)

    def iter_entries(self) -> Iterator[StageTransition]:
        """Iterate over all entries in chronological order."""
        yield from self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


__all__ = ["StageLog", "StageTransition"]
