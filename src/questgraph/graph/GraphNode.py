"""GraphNode - Node representation for the research reasoning graph.

This module provides the core node structures:
- NodeKind: Enum of node types
- GraphNode: A node with content, confidence, metadata and edge tracking
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator

from questgraph.graph.metadata import ConfidenceDistribution, NodeMetadata

if TYPE_CHECKING:
    from questgraph.graph.relations import Edge


class NodeKind(Enum):
    """Types of nodes in the research graph.

    Only ROOT, DIMENSION and HYPOTHESIS are created by the current
    operations; the others are reserved for later stages.
    """

    ROOT = "root"
    DIMENSION = "dimension"
    HYPOTHESIS = "hypothesis"
    EVIDENCE = "evidence"
    BRIDGE = "bridge"
    PLACEHOLDER_GAP = "placeholder_gap"


@dataclass
class GraphNode:
    """A node in the research graph.

    The id encodes the node's position: ``n0`` for the root, ``2.<k>``
    for a dimension and ``3.<dim>.<k>`` for a hypothesis.

    Attributes:
        id: Unique identifier for this node.
        kind: The type of node.
        label: Short display string.
        content: Free text payload.
        confidence: Confidence distribution record.
        metadata: Full metadata bundle.
    """

    id: str
    kind: NodeKind
    label: str
    content: str
    confidence: ConfidenceDistribution
    metadata: NodeMetadata

    # Internal storage (prefixed)
    _outgoing_edges: list[Edge] = field(default_factory=list, repr=False)
    _incoming_edges: list[Edge] = field(default_factory=list, repr=False)

    def iter_outgoing_edges(self) -> Iterator[Edge]:
        """Iterate over outgoing edges."""
        yield from self._outgoing_edges

    def iter_children_ids(self) -> Iterator[str]:
        """Iterate target ids of outgoing edges."""
        for e in self._outgoing_edges:
            yield e.target

    @property
    def degree(self) -> int:
        """Number of incident edges, ignoring direction."""
        return len(self._outgoing_edges) + len(self._incoming_edges)

    def neighbor_ids(self) -> set[str]:
        """Ids adjacent to this node in the undirected view."""
        ids = {e.target for e in self._outgoing_edges}
        ids.update(e.source for e in self._incoming_edges)
        ids.discard(self.id)
        return ids

    @property
    def layer_id(self) -> str:
        return self.metadata.layer_id

    @property
    def impact_score(self) -> float:
        return self.metadata.impact_score

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "node_id": self.id,
            "label": self.label,
            "type": self.kind.value,
            "content": self.content,
            "confidence": self.confidence.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
