"""Graph Serialization - Summaries and exports of a ResearchGraph.

This module provides the read-only views of a graph:
- get_summary: Counts, stage, topology and quality figures
- build_export_document: The full JSON-compatible export structure
- export_graph: Render the export as JSON or YAML text
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import yaml

from questgraph.graph import metrics
from questgraph.graph.catalog import (
    CATALOG_VERSION,
    PARAMETERS,
    active_parameter_keys,
    parameters_by_key,
)
from questgraph.graph.metadata import utc_now
from questgraph.graph.stages import completed_stage_names, stage_progression
from questgraph.validation.params import validate_export_format

if TYPE_CHECKING:
    from questgraph.graph.builder import ResearchGraph

FORMALISM = "G_t = (V_t, E_t ∪ Eh_t, L_t, T, C_t, M_t, I_t)"
YAML_DESCRIPTION_WIDTH = 80


def get_summary(graph: ResearchGraph) -> dict[str, Any]:
    """Summarize a graph without modifying it.

    Args:
        graph: The graph to summarize.

    Returns:
        Dict with ``graph_state`` counts, stage, layer and node-type
        breakdowns, topology, confidence and impact statistics, the
        parameter listing and quality counts.
    """
    return {
        "graph_state": {
            "vertices_count": graph.node_count(),
            "edges_count": graph.edge_count(),
            "hyperedges_count": graph.hyperedge_count(),
            "layers_count": graph.layer_count(),
            "node_types": graph.node_types(),
        },
        "current_stage": int(graph.stage),
        "stage_name": graph.stage.stage_name,
        "layers": [layer.id for layer in graph.iter_layers()],
        "layer_distribution": metrics.layer_distribution(graph),
        "node_types": metrics.node_type_breakdown(graph),
        "edge_types": metrics.edge_type_counts(graph),
        "topology_metrics": metrics.compute_topology(graph).to_dict(),
        "confidence_statistics": metrics.confidence_statistics(graph).to_dict(),
        "impact_distribution": metrics.impact_distribution(graph).to_dict(),
        "active_parameters": active_parameter_keys(),
        "total_parameters": len(PARAMETERS),
        "bias_flags_count": metrics.count_bias_flags(graph),
        "falsifiability_coverage": metrics.falsifiability_coverage(graph),
        "interdisciplinary_bridges": len(metrics.interdisciplinary_connections(graph)),
        "knowledge_gaps": len(metrics.knowledge_gaps(graph)),
    }


def _parameter_activations() -> dict[str, dict[str, Any]]:
    return {
        p.key: {"title": p.title, "description": p.description, "active": p.active}
        for p in PARAMETERS
    }


def reasoning_trace(graph: ResearchGraph) -> dict[str, Any]:
    return {
        "current_stage": int(graph.stage),
        "completed_stages": completed_stage_names(graph.stage),
        "parameter_activations": _parameter_activations(),
        "stage_progression": stage_progression(graph.stage),
        "transitions": [entry.to_dict() for entry in graph.stage_log.iter_entries()],
    }


def topology_insights(graph: ResearchGraph) -> dict[str, Any]:
    return {
        "most_central_nodes": metrics.most_central_nodes(graph),
        "knowledge_gaps": metrics.knowledge_gaps(graph),
        "interdisciplinary_connections": metrics.interdisciplinary_connections(graph),
        "layer_connectivity": metrics.layer_connectivity(graph),
    }


def build_export_document(graph: ResearchGraph) -> dict[str, Any]:
    """Assemble the full JSON-compatible export structure."""
    metadata = graph.graph_metadata()
    metadata["parameters"] = _parameter_activations()
    metadata["catalog_version"] = CATALOG_VERSION
    return {
        "formalism": {
            "state": FORMALISM,
            "vertices": graph.node_count(),
            "edges": graph.edge_count(),
            "hyperedges": graph.hyperedge_count(),
            "layers": graph.layer_count(),
            "node_types": graph.node_types(),
            "timestamp": utc_now(),
        },
        "metadata": metadata,
        "vertices": [node.to_dict() for node in graph.all_nodes()],
        "edges": [edge.to_dict() for edge in graph.all_edges()],
        "hyperedges": list(graph.hyperedges().values()),
        "layers": {layer.id: layer.to_dict() for layer in graph.iter_layers()},
        "summary": get_summary(graph),
        "reasoning_trace": reasoning_trace(graph),
        "topology_insights": topology_insights(graph),
    }


def _truncate(text: str, width: int = YAML_DESCRIPTION_WIDTH) -> str:
    return f"{text[:width]}..." if len(text) > width else text


def render_yaml(document: dict[str, Any]) -> str:
    """Render the condensed narrative YAML view of an export document.

    Only headline figures are kept: graph metadata, counts, layer sizes,
    stage progression, the parameter listing and quality metrics.
    """
    summary = document["summary"]
    metadata = document["metadata"]
    catalog = parameters_by_key()
    condensed = {
        "metadata": {
            "created": metadata["created"],
            "stage": metadata["stage"],
            "current_stage": summary["current_stage"],
            "parameters_active": summary["total_parameters"],
            "task_description": metadata["task_description"],
        },
        "formalism": document["formalism"]["state"],
        "summary": {
            "vertices": summary["graph_state"]["vertices_count"],
            "edges": summary["graph_state"]["edges_count"],
            "hyperedges": summary["graph_state"]["hyperedges_count"],
            "layers": summary["graph_state"]["layers_count"],
        },
        "layers": [
            {layer_id: f"{count} nodes"} for layer_id, count in summary["layer_distribution"].items()
        ],
        "stage_progression": document["reasoning_trace"]["stage_progression"],
        "active_parameters": [
            {key: _truncate(catalog[key].description)} for key in summary["active_parameters"]
        ],
        "quality_metrics": {
            "bias_flags": summary["bias_flags_count"],
            "falsifiability_coverage": f"{summary['falsifiability_coverage'] * 100:.1f}%",
            "interdisciplinary_bridges": summary["interdisciplinary_bridges"],
            "knowledge_gaps": summary["knowledge_gaps"],
        },
    }
    body = yaml.dump(condensed, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return "# Research graph export\n" + body


def export_graph(graph: ResearchGraph, format: Any = "json") -> str:
    """Export a graph as text.

    Args:
        graph: The graph to export.
        format: ``json`` or ``yaml``, case-insensitive.

    Returns:
        Indented JSON of the full export document, or the condensed YAML
        view.

    Raises:
        InvalidParameterError: If the format is not supported.
    """
    fmt = validate_export_format(format)
    document = build_export_document(graph)
    if fmt == "yaml":
        return render_yaml(document)
    return json.dumps(document, indent=2, ensure_ascii=False)


__all__ = [
    "build_export_document",
    "export_graph",
    "get_summary",
    "reasoning_trace",
    "render_yaml",
    "topology_insights",
]
