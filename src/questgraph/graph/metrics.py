"""Graph metrics - Topology and quality figures for summaries and exports.

This module defines the aggregate records reported by the summary:
- TopologySummary: Density, degree, clustering, components and diameter
- ConfidenceStatistics: Spread of per-node average confidence
- ImpactDistribution: Impact score buckets
plus helpers for centrality, layer connectivity and quality counts.

All figures treat the graph as undirected. The diameter is a size-based
estimate, not a shortest-path computation.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from questgraph.graph.GraphNode import GraphNode, NodeKind
from questgraph.graph.relations import EdgeKind

if TYPE_CHECKING:
    from questgraph.graph.builder import ResearchGraph

HIGH_IMPACT = 0.7
MEDIUM_IMPACT = 0.4


@dataclass
class TopologySummary:
    """Graph-wide topology figures.

    Attributes:
        density: 2E / (N(N-1)), 0 for fewer than two nodes.
        average_degree: 2E / N, 0 for an empty graph.
        clustering_coefficient: Mean local clustering over nodes with at
            least two neighbors.
        connected_components: Number of components in the undirected view.
        diameter: max(1, floor(log2 N) + 1), 0 for an empty graph.
    """

    density: float = 0.0
    average_degree: float = 0.0
    clustering_coefficient: float = 0.0
    connected_components: int = 0
    diameter: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ConfidenceStatistics:
    """Population statistics of per-node average confidence."""

    mean: float = 0.0
    std: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ImpactDistribution:
    """Impact score buckets: high >= 0.7, medium [0.4, 0.7), low < 0.4."""

    high_impact: int = 0
    medium_impact: int = 0
    low_impact: int = 0
    average_impact: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _neighbor_map(graph: ResearchGraph) -> dict[str, set[str]]:
    return {node.id: node.neighbor_ids() for node in graph.all_nodes()}


def clustering_coefficient(graph: ResearchGraph) -> float:
    """Average local clustering coefficient.

    Only nodes with two or more neighbors contribute; a graph with none
    of those scores 0.
    """
    neighbors = _neighbor_map(graph)
    total = 0.0
    counted = 0
    for adjacent in neighbors.values():
        if len(adjacent) < 2:
            continue
        possible = len(adjacent) * (len(adjacent) - 1) / 2
        actual = 0
        for neighbor_id in adjacent:
            neighbor = graph.find_by_id(neighbor_id)
            if neighbor is not None:
                actual += sum(1 for child in neighbor.iter_children_ids() if child in adjacent)
        total += actual / possible
        counted += 1
    return total / counted if counted else 0.0


def connected_components(graph: ResearchGraph) -> int:
    """Count connected components with an iterative depth-first search."""
    neighbors = _neighbor_map(graph)
    visited: set[str] = set()
    components = 0
    for start in neighbors:
        if start in visited:
            continue
        components += 1
        stack = [start]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(n for n in neighbors.get(current, ()) if n not in visited)
    return components


def estimate_diameter(node_count: int) -> int:
    if node_count <= 0:
        return 0
    return max(1, math.floor(math.log2(node_count)) + 1)


def compute_topology(graph: ResearchGraph) -> TopologySummary:
    """Compute the graph-wide topology summary."""
    n = graph.node_count()
    e = graph.edge_count()
    return TopologySummary(
        density=(2 * e) / (n * (n - 1)) if n > 1 else 0.0,
        average_degree=(2 * e) / n if n > 0 else 0.0,
        clustering_coefficient=clustering_coefficient(graph),
        connected_components=connected_components(graph),
        diameter=estimate_diameter(n),
    )


def confidence_statistics(graph: ResearchGraph) -> ConfidenceStatistics:
    averages = [node.confidence.average for node in graph.all_nodes()]
    if not averages:
        return ConfidenceStatistics()
    mean = sum(averages) / len(averages)
    variance = sum((a - mean) ** 2 for a in averages) / len(averages)
    return ConfidenceStatistics(
        mean=mean, std=math.sqrt(variance), min=min(averages), max=max(averages)
    )


def impact_distribution(graph: ResearchGraph) -> ImpactDistribution:
    impacts = [node.impact_score for node in graph.all_nodes()]
    if not impacts:
        return ImpactDistribution()
    return ImpactDistribution(
        high_impact=sum(1 for i in impacts if i >= HIGH_IMPACT),
        medium_impact=sum(1 for i in impacts if MEDIUM_IMPACT <= i < HIGH_IMPACT),
        low_impact=sum(1 for i in impacts if i < MEDIUM_IMPACT),
        average_impact=sum(impacts) / len(impacts),
    )


def node_type_breakdown(graph: ResearchGraph) -> dict[str, int]:
    """Count nodes per kind, in order of first appearance."""
    breakdown: dict[str, int] = {}
    for node in graph.all_nodes():
        breakdown[node.kind.value] = breakdown.get(node.kind.value, 0) + 1
    return breakdown


def layer_distribution(graph: ResearchGraph) -> dict[str, int]:
    return {layer.id: len(layer.nodes) for layer in graph.iter_layers()}


def edge_type_counts(graph: ResearchGraph) -> dict[str, Any]:
    """Count edges per ``edge_type`` and split structural from the rest.

    Structural edges are those produced by decomposition and hypothesis
    generation. Unknown tags count as non-structural.
    """
    structural_tags = {kind.value for kind in EdgeKind if kind.is_structural()}
    by_type: dict[str, int] = {}
    structural = 0
    for edge in graph.all_edges():
        by_type[edge.edge_type] = by_type.get(edge.edge_type, 0) + 1
        if edge.edge_type in structural_tags:
            structural += 1
    return {
        "by_type": by_type,
        "structural": structural,
        "non_structural": graph.edge_count() - structural,
    }


def degree_centrality(graph: ResearchGraph, node: GraphNode) -> float:
    """Degree / (N - 1), 0 when the graph has fewer than two nodes."""
    n = graph.node_count()
    return node.degree / (n - 1) if n > 1 else 0.0


def most_central_nodes(graph: ResearchGraph, limit: int = 5) -> list[dict[str, Any]]:
    """Top nodes by degree centrality; ties keep insertion order."""
    scored = [
        {"node_id": node.id, "centrality": degree_centrality(graph, node)}
        for node in graph.all_nodes()
    ]
    scored.sort(key=lambda item: item["centrality"], reverse=True)
    return scored[:limit]


def layer_connectivity(graph: ResearchGraph) -> dict[str, dict[str, int]]:
    """Per layer: member count plus internal and cross-layer edge counts."""
    connectivity = {
        layer.id: {"node_count": len(layer.nodes), "internal_edges": 0, "external_edges": 0}
        for layer in graph.iter_layers()
    }
    for source in graph.all_nodes():
        for edge in source.iter_outgoing_edges():
            target = graph.find_by_id(edge.target)
            if target is None:
                continue
            _count_layer_edge(connectivity, source.layer_id, target.layer_id)
    return connectivity


def _count_layer_edge(
    connectivity: dict[str, dict[str, int]], src_layer: str, tgt_layer: str
) -> None:
    if src_layer not in connectivity or tgt_layer not in connectivity:
        return
    if src_layer == tgt_layer:
        connectivity[src_layer]["internal_edges"] += 1
    else:
        connectivity[src_layer]["external_edges"] += 1
        connectivity[tgt_layer]["external_edges"] += 1


def count_bias_flags(graph: ResearchGraph) -> int:
    return sum(len(node.metadata.bias_flags) for node in graph.all_nodes())


def falsifiability_coverage(graph: ResearchGraph) -> float:
    """Share of hypotheses with falsification criteria (1.0 when none exist)."""
    hypotheses = list(graph.nodes_by_kind(NodeKind.HYPOTHESIS))
    if not hypotheses:
        return 1.0
    with_criteria = sum(1 for h in hypotheses if h.metadata.falsification_criteria)
    return with_criteria / len(hypotheses)


def knowledge_gaps(graph: ResearchGraph) -> list[dict[str, Any]]:
    gaps = []
    for node in graph.nodes_by_kind(NodeKind.PLACEHOLDER_GAP):
        variances = node.confidence.variances
        gaps.append(
            {
                "gap_id": node.id,
                "description": node.content,
                "impact": node.impact_score,
                "confidence_variance": sum(variances) / len(variances) if variances else 0.0,
            }
        )
    return gaps


def interdisciplinary_connections(graph: ResearchGraph) -> list[dict[str, Any]]:
    return [
        {
            "bridge_id": node.id,
            "disciplines": list(node.metadata.disciplinary_tags),
            "impact": node.impact_score,
            "semantic_similarity": node.metadata.extra.get("semantic_similarity", 0),
        }
        for node in graph.nodes_by_kind(NodeKind.BRIDGE)
    ]


__all__ = [
    "ConfidenceStatistics",
    "ImpactDistribution",
    "TopologySummary",
    "clustering_coefficient",
    "compute_topology",
    "confidence_statistics",
    "connected_components",
    "count_bias_flags",
    "degree_centrality",
    "edge_type_counts",
    "estimate_diameter",
    "falsifiability_coverage",
    "impact_distribution",
    "interdisciplinary_connections",
    "knowledge_gaps",
    "layer_connectivity",
    "layer_distribution",
    "most_central_nodes",
    "node_type_breakdown",
]
