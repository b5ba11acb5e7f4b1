"""Relations - Edge types and layers.

This module defines the connections and partitions of the graph:
- EdgeKind: Enum of well-known edge type tags
- Edge: A directed edge between two node ids
- Layer: A named partition holding member node and edge ids
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from questgraph.graph.metadata import EdgeMetadata, utc_now


class EdgeKind(Enum):
    """Well-known ``edge_type`` tags.

    The tag stored on an edge is free-form; these are the values the
    built-in operations and the basic/causal/temporal vocabularies use.
    """

    DECOMPOSITION = "Decomposition"
    HYPOTHESIS = "Hypothesis"
    CORRELATIVE = "Correlative"
    SUPPORTIVE = "Supportive"
    CONTRADICTORY = "Contradictory"
    PREREQUISITE = "Prerequisite"
    GENERALIZATION = "Generalization"
    SPECIALIZATION = "Specialization"
    CAUSAL = "Causal"
    TEMPORAL_PRECEDENCE = "Temporal Precedence"
    OTHER = "Other"

    def is_structural(self) -> bool:
        """True for edges created by decomposition and hypothesis stages."""
        return self in (EdgeKind.DECOMPOSITION, EdgeKind.HYPOTHESIS)


@dataclass
class Edge:
    """A directed edge between two graph nodes.

    Attributes:
        id: Edge identifier (``e_<source>_<target>`` for built-in edges).
        source: Source node id.
        target: Target node id.
        metadata: Full edge metadata bundle.
    """

    id: str
    source: str
    target: str
    metadata: EdgeMetadata

    @property
    def edge_type(self) -> str:
        return self.metadata.edge_type

    def __eq__(self, other: object) -> bool:
        """Check equality based on id, source and target."""
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.id, self.source, self.target) == (other.id, other.source, other.target)

    def __hash__(self) -> int:
        return hash((self.id, self.source, self.target))

    def to_dict(self) -> dict[str, Any]:
        return {
            "edge_id": self.id,
            "source": self.source,
            "target": self.target,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class Layer:
    """A named partition of the graph.

    Attributes:
        id: Layer key (``base``, ``methodological``, ...).
        name: Display name.
        description: What the layer groups.
        nodes: Member node ids.
        edges: Member edge ids.
        inter_layer_edges: Ids of edges crossing into other layers.
    """

    id: str
    name: str
    description: str
    created: str = field(default_factory=utc_now)
    nodes: set[str] = field(default_factory=set)
    edges: set[str] = field(default_factory=set)
    inter_layer_edges: set[str] = field(default_factory=set)

    def clear(self) -> None:
        """Drop all members, keeping the layer itself."""
        self.nodes.clear()
        self.edges.clear()
        self.inter_layer_edges.clear()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created": self.created,
            "nodes": sorted(self.nodes),
            "edges": sorted(self.edges),
            "inter_layer_edges": sorted(self.inter_layer_edges),
        }


DEFAULT_LAYERS: tuple[tuple[str, str, str], ...] = (
    ("base", "Base Conceptual Layer", "Core concepts and relationships"),
    ("methodological", "Methodological Layer", "Research methods and approaches"),
    ("empirical", "Empirical Evidence Layer", "Data and evidence"),
    ("theoretical", "Theoretical Framework Layer", "Theoretical constructs"),
    ("interdisciplinary", "Interdisciplinary Bridge Layer", "Cross-domain connections"),
)


def seed_layers() -> dict[str, Layer]:
    """Create the five default layers, keyed by id."""
    return {lid: Layer(id=lid, name=name, description=desc) for lid, name, desc in DEFAULT_LAYERS}
