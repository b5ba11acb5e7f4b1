"""Graph module - Core research graph data structures.

Exports:
- NodeKind: Enum of node types
- GraphNode: Node with content, confidence and metadata
- Edge: Directed edge between two node ids
- EdgeKind: Enum of well-known edge types
- Layer: Named partition of the graph
- Stage: Stage cursor enum
- StageLog / StageTransition: Stage transition history
- ResearchGraph: The stage-gated graph store
- ParameterSpec / PARAMETERS: Static parameter catalog
"""

from questgraph.graph.builder import ResearchGraph
from questgraph.graph.catalog import PARAMETERS, ParameterSpec, active_parameter_keys
from questgraph.graph.GraphNode import GraphNode, NodeKind
from questgraph.graph.mutations import StageLog, StageTransition
from questgraph.graph.relations import Edge, EdgeKind, Layer
from questgraph.graph.serialize import export_graph, get_summary
from questgraph.graph.stages import Stage

__all__ = [
    "NodeKind",
    "GraphNode",
    "Edge",
    "EdgeKind",
    "Layer",
    "Stage",
    "StageLog",
    "StageTransition",
    "ResearchGraph",
    "ParameterSpec",
    "PARAMETERS",
    "active_parameter_keys",
    "export_graph",
    "get_summary",
]
