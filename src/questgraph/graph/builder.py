"""Graph Builder - The stage-gated research reasoning graph.

This module provides ResearchGraph, the in-memory store of nodes, edges
and layers together with the three stage operations that populate it:
initialize, decompose and generate_hypotheses. Each operation checks the
stage cursor, validates its input, mutates the store and only then
advances the cursor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

from questgraph.graph.GraphNode import GraphNode, NodeKind
from questgraph.graph.metadata import (
    build_edge_metadata,
    build_node_metadata,
    utc_now,
    wrap_confidence,
)
from questgraph.graph.mutations import StageLog, StageTransition
from questgraph.graph.relations import Edge, EdgeKind, Layer, seed_layers
from questgraph.graph.stages import Stage, require_stage
from questgraph.validation.errors import (
    HypothesisBatchError,
    InvalidParameterError,
    MissingNodeError,
    QuestGraphError,
)
from questgraph.validation.params import (
    MAX_HYPOTHESES,
    HypothesisInput,
    apply_defaults,
    check_string_list,
    validate_confidence,
    validate_config,
    validate_dimension_node_id,
    validate_hypotheses,
    validate_hypothesis,
    validate_hypothesis_config,
    validate_task_description,
)

logger = logging.getLogger(__name__)

GRAPH_VERSION = "1.0.0"
ROOT_ID = "n0"

DEFAULT_CONFIDENCE = [0.8, 0.8, 0.8, 0.8]
DEFAULT_DISCIPLINARY_TAGS = ["immunology", "dermatology"]
DEFAULT_DIMENSIONS = [
    "Scope",
    "Objectives",
    "Constraints",
    "Data Needs",
    "Use Cases",
    "Potential Biases",
    "Knowledge Gaps",
]

DIMENSION_TAGS: dict[str, list[str]] = {
    "Scope": ["methodology", "research_design"],
    "Objectives": ["goals", "outcomes"],
    "Constraints": ["limitations", "resources"],
    "Data Needs": ["data_science", "methodology"],
    "Use Cases": ["application", "translation"],
    "Potential Biases": ["methodology", "bias_detection"],
    "Knowledge Gaps": ["knowledge_discovery", "research_gaps"],
}

# flag -> keywords that raise it
BIAS_KEYWORDS: dict[str, tuple[str, ...]] = {
    "absolute_thinking": ("always", "never"),
    "confirmation_bias_risk": ("obvious", "clearly"),
    "overconfidence_bias": ("proven", "definitively"),
}


def infer_dimension_tags(dimension: str) -> list[str]:
    """Look up disciplinary tags for a dimension name."""
    return list(DIMENSION_TAGS.get(dimension, ["general"]))


def assess_bias_flags(content: str) -> list[str]:
    """Flag risky wording in hypothesis text with a plain keyword scan."""
    lowered = content.lower()
    return [flag for flag, words in BIAS_KEYWORDS.items() if any(w in lowered for w in words)]


def default_plan(content: str) -> dict[str, Any]:
    """Investigation plan used when a hypothesis arrives without one."""
    return {
        "type": "literature_search",
        "description": f"Systematic literature review for: {content}",
        "tools": ["pubmed_search", "citation_analysis"],
        "timeline": "2-4 weeks",
        "resources_needed": ["database_access", "literature_review_tools"],
        "expected_outcome": "evidence_collection",
    }


@dataclass
class ResearchGraph:
    """Container for one research reasoning graph.

    Provides indexed access to nodes and edges, layer membership and the
    stage cursor. Node and edge maps are only mutated through the stage
    operations and ``reset``.

    Attributes:
        default_tags: Root tags when initialize receives none.
        default_dimensions: Dimension names when decompose receives none.
        max_hypotheses: Upper bound on hypotheses processed per batch.
        enable_multi_layer: Seed all five layers (False keeps only ``base``).
    """

    default_tags: list[str] = field(default_factory=lambda: list(DEFAULT_DISCIPLINARY_TAGS))
    default_dimensions: list[str] = field(default_factory=lambda: list(DEFAULT_DIMENSIONS))
    max_hypotheses: int = MAX_HYPOTHESES
    enable_multi_layer: bool = True
    created: str = field(default_factory=utc_now)
    version: str = GRAPH_VERSION

    # Internal storage (prefixed) - excluded from constructor
    _nodes: dict[str, GraphNode] = field(default_factory=dict, init=False, repr=False)
    _edges: dict[str, Edge] = field(default_factory=dict, init=False, repr=False)
    _hyperedges: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _layers: dict[str, Layer] = field(default_factory=dict, init=False, repr=False)
    _node_types: set[str] = field(default_factory=set, init=False)
    _stage: Stage = field(default=Stage.EMPTY, init=False)
    _stage_log: StageLog = field(default_factory=StageLog, init=False, repr=False)
    _task_description: str | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._seed_layers()

    # ─────────────────────────────────────────────────────────────────────
    # Read access
    # ─────────────────────────────────────────────────────────────────────

    @property
    def stage(self) -> Stage:
        """Current stage cursor."""
        return self._stage

    @property
    def stage_log(self) -> StageLog:
        return self._stage_log

    @property
    def task_description(self) -> str | None:
        return self._task_description

    def find_by_id(self, node_id: str) -> GraphNode | None:
        """Find node by ID.

        Args:
            node_id: The node ID to find.

        Returns:
            The matching GraphNode, or None if not found.
        """
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def all_nodes(self) -> Iterator[GraphNode]:
        """Iterate all nodes in insertion order."""
        yield from self._nodes.values()

    def all_edges(self) -> Iterator[Edge]:
        """Iterate all edges in insertion order."""
        yield from self._edges.values()

    def iter_layers(self) -> Iterator[Layer]:
        yield from self._layers.values()

    def get_layer(self, layer_id: str) -> Layer | None:
        return self._layers.get(layer_id)

    def nodes_by_kind(self, kind: NodeKind) -> Iterator[GraphNode]:
        """Iterate nodes of a specific kind."""
        for node in self._nodes.values():
            if node.kind == kind:
                yield node

    def node_ids(self) -> list[str]:
        return list(self._nodes)

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    def hyperedge_count(self) -> int:
        return len(self._hyperedges)

    def layer_count(self) -> int:
        return len(self._layers)

    def node_types(self) -> list[str]:
        """Node kinds observed so far, sorted."""
        return sorted(self._node_types)

    def hyperedges(self) -> dict[str, Any]:
        return dict(self._hyperedges)

    # ─────────────────────────────────────────────────────────────────────
    # Store mutation
    # ─────────────────────────────────────────────────────────────────────

    def _seed_layers(self) -> None:
        layers = seed_layers()
        if not self.enable_multi_layer:
            layers = {"base": layers["base"]}
        self._layers = layers

    def _resolve_layer(self, layer_id: str) -> Layer:
        layer = self._layers.get(layer_id)
        if layer is not None:
            return layer
        logger.warning("Layer %s not found, adding to base layer", layer_id)
        if "base" not in self._layers:
            self._seed_layers()
        return self._layers["base"]

    def _add_node(self, node: GraphNode) -> None:
        if node.id in self._nodes:
            raise QuestGraphError(f"Node {node.id} already exists")
        layer = self._resolve_layer(node.metadata.layer_id)
        node.metadata.layer_id = layer.id
        self._nodes[node.id] = node
        self._node_types.add(node.kind.value)
        layer.nodes.add(node.id)

    def _add_edge(
        self,
        source_id: str,
        target_id: str,
        edge_kind: EdgeKind,
        confidence: list[float],
    ) -> Edge:
        source = self._nodes[source_id]
        target = self._nodes[target_id]
        edge_id = f"e_{source_id}_{target_id}"
        metadata = build_edge_metadata(
            {
                "edge_id": edge_id,
                "edge_type": edge_kind.value,
                "confidence": wrap_confidence(confidence),
            }
        )
        if source.layer_id != target.layer_id:
            metadata.layer_connection = f"{source.layer_id}->{target.layer_id}"

        edge = Edge(id=edge_id, source=source_id, target=target_id, metadata=metadata)
        self._edges[edge_id] = edge
        source._outgoing_edges.append(edge)
        target._incoming_edges.append(edge)

        self._layers[source.layer_id].edges.add(edge_id)
        if metadata.layer_connection:
            self._layers[source.layer_id].inter_layer_edges.add(edge_id)
            self._layers[target.layer_id].inter_layer_edges.add(edge_id)
        return edge

    def _clear_store(self) -> None:
        self._nodes.clear()
        self._edges.clear()
        self._hyperedges.clear()
        self._node_types.clear()
        self._task_description = None
        for layer in self._layers.values():
            layer.clear()

    def reset(self) -> None:
        """Return to the empty pre-initialization state."""
        self._clear_store()
        self._stage_log.clear()
        if not self._layers:
            self._seed_layers()
        self._stage = Stage.EMPTY
        logger.info("Graph reset to pre-initialization state")

    def _advance(self, operation: str, target: Stage, node_ids: list[str], **extra: Any) -> StageTransition:
        transition = StageTransition(
            operation=operation,
            from_stage=int(self._stage),
            to_stage=int(target),
            node_ids=list(node_ids),
            **extra,
        )
        self._stage_log.append(transition)
        self._stage = target
        logger.info("Stage %d (%s) completed by %s", int(target), target.stage_name, operation)
        return transition

    # ─────────────────────────────────────────────────────────────────────
    # Stage operations
    # ─────────────────────────────────────────────────────────────────────

    def initialize(
        self,
        task_description: Any,
        initial_confidence: Any = None,
        config: Any = None,
    ) -> StageTransition:
        """Create the root node ``n0`` for a research task.

        Args:
            task_description: Research task text (10 to 1000 characters).
            initial_confidence: Root confidence vector, default [0.8]*4.
            config: Optional mapping with ``disciplinary_tags``,
                ``attribution`` and ``enable_multi_layer``.

        Returns:
            The recorded transition; ``warnings`` holds config notes.

        Raises:
            WrongStageError: If the cursor is not 0.
            InvalidParameterError: If any argument fails validation.
        """
        target = require_stage(self._stage, "initialize")
        task = validate_task_description(task_description)
        if initial_confidence is None:
            confidence = list(DEFAULT_CONFIDENCE)
        else:
            confidence = validate_confidence(initial_confidence, "initial_confidence")
        graph_config = validate_config(config)
        warnings = list(graph_config.warnings)

        if self._nodes:
            logger.warning("Graph already has %d vertices, reinitializing", len(self._nodes))
            self._clear_store()
        if graph_config.enable_multi_layer != self.enable_multi_layer:
            self.enable_multi_layer = graph_config.enable_multi_layer
            self._seed_layers()
        if not self._layers:
            warnings.append("No layers initialized")

        tags = graph_config.disciplinary_tags
        metadata = build_node_metadata(
            {
                "node_id": ROOT_ID,
                "provenance": "user_input",
                "epistemic_status": "accepted",
                "confidence": wrap_confidence(confidence),
                "layer_id": "base",
                "disciplinary_tags": tags if tags is not None else list(self.default_tags),
                "impact_score": 0.8,
                "attribution": graph_config.attribution or [],
            }
        )
        root = GraphNode(
            id=ROOT_ID,
            kind=NodeKind.ROOT,
            label="Task Understanding",
            content=task,
            confidence=wrap_confidence(confidence),
            metadata=metadata,
        )
        self._add_node(root)
        self._task_description = task

        return self._advance("initialize", target, [ROOT_ID], warnings=warnings)

    def decompose(self, custom_dimensions: Any = None) -> StageTransition:
        """Create one dimension node per facet of the task.

        Args:
            custom_dimensions: Dimension names; defaults to
                ``default_dimensions``.

        Returns:
            The recorded transition with the created ``2.<i>`` ids.

        Raises:
            WrongStageError: If the cursor is not 1.
            InvalidParameterError: If custom_dimensions is not a non-empty
                list of names.
        """
        target = require_stage(self._stage, "decompose")
        dimensions, warnings = self._resolve_dimensions(custom_dimensions)

        created: list[str] = []
        for index, dimension in enumerate(dimensions, start=1):
            node_id = f"2.{index}"
            metadata = build_node_metadata(
                {
                    "node_id": node_id,
                    "provenance": "task_decomposition",
                    "epistemic_status": "pending",
                    "confidence": wrap_confidence(DEFAULT_CONFIDENCE),
                    "layer_id": "base",
                    "impact_score": 0.6,
                    "disciplinary_tags": infer_dimension_tags(dimension),
                }
            )
            node = GraphNode(
                id=node_id,
                kind=NodeKind.DIMENSION,
                label=dimension,
                content=f"Analysis of {dimension} aspects of the research task",
                confidence=wrap_confidence(DEFAULT_CONFIDENCE),
                metadata=metadata,
            )
            self._add_node(node)
            self._add_edge(ROOT_ID, node_id, EdgeKind.DECOMPOSITION, [0.9, 0.9, 0.9, 0.9])
            created.append(node_id)

        return self._advance(
            "decompose", target, created, labels=list(dimensions), warnings=warnings
        )

    def _resolve_dimensions(self, custom_dimensions: Any) -> tuple[list[str], list[str]]:
        if custom_dimensions is None:
            return list(self.default_dimensions), []
        checked = check_string_list(custom_dimensions, "dimension")
        if not checked.ok:
            raise InvalidParameterError(
                "dimensions", custom_dimensions, "an array of dimension names", [DEFAULT_DIMENSIONS[:3]]
            )
        resolved, warnings = apply_defaults({"dimensions": checked}, {})
        if not resolved["dimensions"]:
            raise InvalidParameterError(
                "dimensions",
                custom_dimensions,
                "an array with at least one non-empty dimension name",
                [DEFAULT_DIMENSIONS[:3]],
            )
        return resolved["dimensions"], warnings

    def generate_hypotheses(
        self,
        dimension_node_id: Any,
        hypotheses: Any,
        config: Any = None,
    ) -> StageTransition:
        """Attach hypothesis nodes under one dimension.

        Items are processed one at a time. A failing item is recorded in
        ``errors`` and still consumes its position ``k`` in ``3.<dim>.<k>``;
        the batch succeeds when at least one item was created.

        Args:
            dimension_node_id: Id of an existing dimension node (``2.<n>``).
            hypotheses: Three to five strings or hypothesis objects.
            config: Optional mapping with ``max_hypotheses``.

        Returns:
            The recorded transition with created ids, ``errors`` and
            ``warnings``.

        Raises:
            WrongStageError: If the cursor is not 2.
            InvalidParameterError: If the id or collection is malformed.
            MissingNodeError: If the id is absent or not a dimension.
            HypothesisBatchError: If no item could be created.
        """
        target = require_stage(self._stage, "generate hypotheses")
        dimension_id = validate_dimension_node_id(dimension_node_id, self._nodes.keys())
        dimension = self._nodes[dimension_id]
        if dimension.kind != NodeKind.DIMENSION:
            raise MissingNodeError(
                dimension_id,
                f"Node {dimension_id} is not a dimension node (type: {dimension.kind.value}). "
                "Expected a dimension node created in Stage 2.",
            )
        items = validate_hypotheses(hypotheses)
        limit = validate_hypothesis_config(config, self.max_hypotheses)
        dimension_number = dimension_id.split(".", 1)[1]

        created: list[str] = []
        errors: list[str] = []
        notes: list[str] = []
        for index, item in enumerate(items[:limit]):
            node_id = f"3.{dimension_number}.{index + 1}"
            try:
                checked = validate_hypothesis(item, index)
                self._add_hypothesis(dimension_id, node_id, f"{dimension_number}.{index + 1}", checked)
            except QuestGraphError as e:
                logger.error("Failed to create hypothesis %d: %s", index + 1, e)
                errors.append(f"Hypothesis {index + 1}: {e}")
                continue
            created.append(node_id)
            notes.extend(checked.warnings)

        if not created:
            raise HypothesisBatchError(errors)

        warnings: list[str] = []
        if errors:
            warnings.append(f"{len(errors)} hypotheses failed to create")
        warnings.extend(notes)
        return self._advance(
            "generate hypotheses", target, created, errors=errors, warnings=warnings
        )

    def _add_hypothesis(
        self,
        dimension_id: str,
        node_id: str,
        number: str,
        item: HypothesisInput,
    ) -> GraphNode:
        confidence = wrap_confidence(item.confidence or [0.5, 0.5, 0.5, 0.5])
        metadata = build_node_metadata(
            {
                "node_id": node_id,
                "provenance": "hypothesis_generation",
                "epistemic_status": "hypothetical",
                "confidence": confidence,
                "disciplinary_tags": item.disciplinary_tags or [],
                "falsification_criteria": item.falsification_criteria,
                "bias_flags": assess_bias_flags(item.content),
                "impact_score": item.impact_score if item.impact_score is not None else 0.6,
                "attribution": item.attribution or [],
                "layer_id": "theoretical",
                "plan": default_plan(item.content) if item.needs_plan else item.plan,
            }
        )
        node = GraphNode(
            id=node_id,
            kind=NodeKind.HYPOTHESIS,
            label=f"Hypothesis {number}",
            content=item.content,
            confidence=confidence,
            metadata=metadata,
        )
        self._add_node(node)
        self._add_edge(dimension_id, node_id, EdgeKind.HYPOTHESIS, [0.8, 0.8, 0.8, 0.8])
        return node

    def graph_metadata(self) -> dict[str, Any]:
        """Graph-level metadata block for exports."""
        return {
            "created": self.created,
            "version": self.version,
            "stage": self._stage.stage_name,
            "task_description": self._task_description,
            "config": {
                "default_disciplinary_tags": list(self.default_tags),
                "default_dimensions": list(self.default_dimensions),
                "max_hypotheses": self.max_hypotheses,
                "enable_multi_layer": self.enable_multi_layer,
            },
        }


__all__ = [
    "BIAS_KEYWORDS",
    "DEFAULT_DIMENSIONS",
    "DEFAULT_DISCIPLINARY_TAGS",
    "DIMENSION_TAGS",
    "ROOT_ID",
    "ResearchGraph",
    "assess_bias_flags",
    "default_plan",
    "infer_dimension_tags",
]
