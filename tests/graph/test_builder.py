"""Tests for ResearchGraph and its three stage operations.

Each operation checks the stage cursor first, validates its input second
and only then mutates the store and advances the cursor. A failing call
must leave nodes, edges and the cursor exactly as they were.
"""

import pytest

from questgraph.graph import GraphNode, NodeKind, Stage
from questgraph.graph.builder import (
    DEFAULT_DIMENSIONS,
    ResearchGraph,
    assess_bias_flags,
    default_plan,
    infer_dimension_tags,
)
from questgraph.validation.errors import (
    HypothesisBatchError,
    InvalidParameterError,
    QuestGraphError,
    WrongStageError,
)

TASK = "Investigate the role of skin microbiome in disease"


def snapshot(graph):
    """Capture everything a failed operation must not change."""
    return (graph.node_ids(), [e.id for e in graph.all_edges()], graph.stage, len(graph.stage_log))


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


class TestHelpers:
    def test_known_dimension_tags(self):
        assert infer_dimension_tags("Potential Biases") == ["methodology", "bias_detection"]

    def test_unknown_dimension_is_general(self):
        assert infer_dimension_tags("Ethics") == ["general"]

    @pytest.mark.parametrize(
        "content, flags",
        [
            ("Treatment always works", ["absolute_thinking"]),
            ("It is NEVER the diet", ["absolute_thinking"]),
            ("Clearly the cause", ["confirmation_bias_risk"]),
            ("An obvious link", ["confirmation_bias_risk"]),
            ("Definitively established", ["overconfidence_bias"]),
            ("This is proven", ["overconfidence_bias"]),
            ("A modest association", []),
        ],
    )
    def test_bias_keywords(self, content, flags):
        assert assess_bias_flags(content) == flags

    def test_all_bias_flags(self):
        assert assess_bias_flags("clearly always proven") == [
            "absolute_thinking",
            "confirmation_bias_risk",
            "overconfidence_bias",
        ]

    def test_default_plan(self):
        plan = default_plan("Diet shapes flora")

        assert plan["type"] == "literature_search"
        assert plan["description"] == "Systematic literature review for: Diet shapes flora"
        assert plan["tools"] == ["pubmed_search", "citation_analysis"]
        assert plan["timeline"] == "2-4 weeks"


# ─────────────────────────────────────────────────────────────────────────────
# Store
# ─────────────────────────────────────────────────────────────────────────────


class TestEmptyGraph:
    def test_starts_empty_with_five_layers(self, graph):
        assert graph.stage is Stage.EMPTY
        assert graph.node_count() == 0
        assert graph.edge_count() == 0
        assert graph.hyperedge_count() == 0
        assert [layer.id for layer in graph.iter_layers()] == [
            "base",
            "methodological",
            "empirical",
            "theoretical",
            "interdisciplinary",
        ]

    def test_single_layer_mode(self):
        graph = ResearchGraph(enable_multi_layer=False)

        assert graph.layer_count() == 1
        assert graph.get_layer("base") is not None

    def test_find_missing_node(self, graph):
        assert graph.find_by_id("n0") is None
        assert not graph.has_node("n0")

    def test_duplicate_node_rejected(self, initialized_graph):
        root = initialized_graph.find_by_id("n0")

        with pytest.raises(QuestGraphError, match="already exists"):
            initialized_graph._add_node(root)


class TestReset:
    def test_reset_clears_everything(self, hypothesis_graph):
        hypothesis_graph.reset()

        assert hypothesis_graph.stage is Stage.EMPTY
        assert hypothesis_graph.node_count() == 0
        assert hypothesis_graph.edge_count() == 0
        assert len(hypothesis_graph.stage_log) == 0
        assert hypothesis_graph.task_description is None
        assert hypothesis_graph.layer_count() == 5
        assert all(not layer.nodes and not layer.edges for layer in hypothesis_graph.iter_layers())

    def test_initialize_after_reset(self, hypothesis_graph):
        hypothesis_graph.reset()

        hypothesis_graph.initialize(TASK)

        assert hypothesis_graph.node_count() == 1
        assert hypothesis_graph.stage is Stage.INITIALIZATION


# ─────────────────────────────────────────────────────────────────────────────
# Stage 1: initialize
# ─────────────────────────────────────────────────────────────────────────────


class TestInitialize:
    def test_creates_root(self, graph):
        entry = graph.initialize(TASK, [0.8, 0.7, 0.9, 0.6])

        root = graph.find_by_id("n0")
        assert isinstance(root, GraphNode)
        assert root.kind is NodeKind.ROOT
        assert root.label == "Task Understanding"
        assert root.content == TASK
        assert root.confidence.means == [0.8, 0.7, 0.9, 0.6]
        assert root.layer_id == "base"
        assert root.metadata.provenance == "user_input"
        assert root.metadata.epistemic_status == "accepted"
        assert root.metadata.disciplinary_tags == ["immunology", "dermatology"]
        assert root.impact_score == 0.8
        assert "n0" in graph.get_layer("base").nodes
        assert graph.stage is Stage.INITIALIZATION
        assert entry.node_ids == ["n0"]
        assert entry.from_stage == 0
        assert entry.to_stage == 1

    def test_default_confidence(self, graph):
        graph.initialize(TASK)

        assert graph.find_by_id("n0").confidence.means == [0.8, 0.8, 0.8, 0.8]

    def test_description_is_trimmed(self, graph):
        graph.initialize(f"   {TASK}   ")

        assert graph.task_description == TASK

    def test_nine_character_description_fails(self, graph):
        with pytest.raises(InvalidParameterError):
            graph.initialize("123456789")

        assert graph.node_count() == 0
        assert graph.stage is Stage.EMPTY

    def test_ten_character_description_succeeds(self, graph):
        graph.initialize("1234567890")

        assert graph.node_count() == 1

    def test_invalid_confidence_does_not_mutate(self, graph):
        with pytest.raises(InvalidParameterError):
            graph.initialize(TASK, [0.8, 0.8, 0.8])

        assert snapshot(graph) == ([], [], Stage.EMPTY, 0)

    def test_invalid_config_does_not_mutate(self, graph):
        with pytest.raises(InvalidParameterError):
            graph.initialize(TASK, None, ["not", "an", "object"])

        assert graph.node_count() == 0

    def test_config_tags_and_attribution(self, graph):
        graph.initialize(TASK, config={"disciplinary_tags": ["genetics"], "attribution": ["lab-a"]})

        meta = graph.find_by_id("n0").metadata
        assert meta.disciplinary_tags == ["genetics"]
        assert meta.attribution == ["lab-a"]

    def test_constructor_default_tags(self):
        graph = ResearchGraph(default_tags=["cardiology"])

        graph.initialize(TASK)

        assert graph.find_by_id("n0").metadata.disciplinary_tags == ["cardiology"]

    def test_config_warnings_are_returned(self, graph):
        entry = graph.initialize(
            TASK, config={"disciplinary_tags": ["genetics", ""], "enable_multi_layer": "yes"}
        )

        assert len(entry.warnings) == 2
        assert graph.enable_multi_layer is True

    def test_config_can_disable_layers(self, graph):
        graph.initialize(TASK, config={"enable_multi_layer": False})

        assert graph.layer_count() == 1
        assert graph.enable_multi_layer is False

    def test_second_call_is_wrong_stage(self, initialized_graph):
        with pytest.raises(WrongStageError):
            initialized_graph.initialize(TASK)

        assert initialized_graph.node_count() == 1

    def test_non_empty_store_is_cleared(self, decomposed_graph):
        decomposed_graph._stage = Stage.EMPTY

        decomposed_graph.initialize("A completely different research question")

        assert decomposed_graph.node_count() == 1
        assert decomposed_graph.edge_count() == 0
        assert decomposed_graph.get_layer("base").nodes == {"n0"}
        assert decomposed_graph.stage is Stage.INITIALIZATION


# ─────────────────────────────────────────────────────────────────────────────
# Stage 2: decompose
# ─────────────────────────────────────────────────────────────────────────────


class TestDecompose:
    def test_before_initialize_is_wrong_stage(self, graph):
        with pytest.raises(WrongStageError) as exc_info:
            graph.decompose()

        assert exc_info.value.current == 0
        assert exc_info.value.expected == 1
        assert graph.node_count() == 0

    def test_default_dimensions(self, initialized_graph):
        entry = initialized_graph.decompose()

        assert entry.node_ids == [f"2.{i}" for i in range(1, 8)]
        assert entry.labels == DEFAULT_DIMENSIONS
        assert initialized_graph.find_by_id("2.6").label == "Potential Biases"
        assert initialized_graph.find_by_id("2.7").label == "Knowledge Gaps"
        assert initialized_graph.stage is Stage.DECOMPOSITION

    def test_dimension_nodes(self, decomposed_graph):
        node = decomposed_graph.find_by_id("2.1")

        assert node.kind is NodeKind.DIMENSION
        assert node.content == "Analysis of Scope aspects of the research task"
        assert node.confidence.means == [0.8, 0.8, 0.8, 0.8]
        assert node.metadata.disciplinary_tags == ["methodology", "research_design"]
        assert node.metadata.provenance == "task_decomposition"
        assert node.impact_score == 0.6

    def test_decomposition_edges(self, decomposed_graph):
        edges = list(decomposed_graph.all_edges())

        assert [e.id for e in edges] == [f"e_n0_2.{i}" for i in range(1, 8)]
        assert all(e.source == "n0" for e in edges)
        assert all(e.edge_type == "Decomposition" for e in edges)
        assert edges[0].metadata.confidence.means == [0.9, 0.9, 0.9, 0.9]
        assert edges[0].metadata.layer_connection is None
        assert decomposed_graph.find_by_id("n0").degree == 7

    def test_custom_dimensions(self, initialized_graph):
        entry = initialized_graph.decompose(["Ethics", "", "Scope"])

        assert entry.node_ids == ["2.1", "2.2"]
        assert entry.labels == ["Ethics", "Scope"]
        assert len(entry.warnings) == 1
        assert initialized_graph.find_by_id("2.1").metadata.disciplinary_tags == ["general"]

    def test_constructor_default_dimensions(self):
        graph = ResearchGraph(default_dimensions=["Scope", "Knowledge Gaps"])
        graph.initialize(TASK)

        assert graph.decompose().labels == ["Scope", "Knowledge Gaps"]

    @pytest.mark.parametrize("dimensions", [[], ["", "  "], "Scope", {"Scope": 1}])
    def test_unusable_dimensions_fail(self, initialized_graph, dimensions):
        before = snapshot(initialized_graph)

        with pytest.raises(InvalidParameterError):
            initialized_graph.decompose(dimensions)

        assert snapshot(initialized_graph) == before

    def test_second_call_is_wrong_stage(self, decomposed_graph):
        with pytest.raises(WrongStageError):
            decomposed_graph.decompose()

        assert decomposed_graph.node_count() == 8


# ─────────────────────────────────────────────────────────────────────────────
# Stage 3: generate hypotheses
# ─────────────────────────────────────────────────────────────────────────────


class TestGenerateHypotheses:
    def test_skin_microbiome_scenario(self):
        graph = ResearchGraph()
        graph.initialize(TASK, [0.8, 0.7, 0.9, 0.6])
        graph.decompose()

        graph.generate_hypotheses("2.6", ["H1 text", "H2 text", "H3 text"])

        assert graph.find_by_id("2.6").label == "Potential Biases"
        for node_id in ("3.6.1", "3.6.2", "3.6.3"):
            assert graph.find_by_id(node_id).kind is NodeKind.HYPOTHESIS
        assert int(graph.stage) == 3

    def test_before_decompose_is_wrong_stage(self, initialized_graph):
        with pytest.raises(WrongStageError):
            initialized_graph.generate_hypotheses("2.1", ["a", "b", "c"])

    def test_two_items_fail(self, decomposed_graph):
        before = snapshot(decomposed_graph)

        with pytest.raises(InvalidParameterError):
            decomposed_graph.generate_hypotheses("2.1", ["a", "b"])

        assert snapshot(decomposed_graph) == before

    def test_unknown_dimension_fails(self, decomposed_graph):
        with pytest.raises(InvalidParameterError, match="Available: 2.1"):
            decomposed_graph.generate_hypotheses("2.9", ["a", "b", "c"])

        assert decomposed_graph.stage is Stage.DECOMPOSITION

    def test_three_strings(self, decomposed_graph):
        entry = decomposed_graph.generate_hypotheses("2.2", ["First", "Second", "Third"])

        assert entry.node_ids == ["3.2.1", "3.2.2", "3.2.3"]
        assert entry.errors == []
        assert len(entry.warnings) == 3
        node = decomposed_graph.find_by_id("3.2.1")
        assert node.label == "Hypothesis 2.1"
        assert node.content == "First"
        assert node.confidence.means == [0.5, 0.5, 0.5, 0.5]
        assert node.impact_score == 0.6
        assert node.metadata.epistemic_status == "hypothetical"
        assert node.metadata.falsification_criteria is None
        assert node.metadata.extra["plan"] == default_plan("First")

    def test_hypothesis_edges_cross_layers(self, decomposed_graph):
        decomposed_graph.generate_hypotheses("2.3", ["a1", "a2", "a3"])

        edge = next(e for e in decomposed_graph.all_edges() if e.id == "e_2.3_3.3.1")
        assert edge.edge_type == "Hypothesis"
        assert edge.source == "2.3"
        assert edge.target == "3.3.1"
        assert edge.metadata.layer_connection == "base->theoretical"
        assert decomposed_graph.find_by_id("3.3.1").layer_id == "theoretical"
        assert "3.3.1" in decomposed_graph.get_layer("theoretical").nodes
        assert edge.id in decomposed_graph.get_layer("base").edges
        assert edge.id in decomposed_graph.get_layer("base").inter_layer_edges
        assert edge.id in decomposed_graph.get_layer("theoretical").inter_layer_edges

    def test_single_layer_mode_uses_base(self):
        graph = ResearchGraph(enable_multi_layer=False)
        graph.initialize(TASK)
        graph.decompose()

        graph.generate_hypotheses("2.1", ["a1", "a2", "a3"])

        assert graph.find_by_id("3.1.1").layer_id == "base"
        assert graph.get_layer("base").inter_layer_edges == set()
        assert all(e.metadata.layer_connection is None for e in graph.all_edges())

    def test_partial_failure(self, decomposed_graph):
        entry = decomposed_graph.generate_hypotheses(
            "2.1", ["Valid one", "", "Valid three", "Valid four", "Valid five"]
        )

        assert entry.node_ids == ["3.1.1", "3.1.3", "3.1.4", "3.1.5"]
        assert len(entry.errors) == 1
        assert entry.errors[0].startswith("Hypothesis 2:")
        assert entry.warnings[0] == "1 hypotheses failed to create"
        assert not decomposed_graph.has_node("3.1.2")
        assert decomposed_graph.stage is Stage.HYPOTHESIS_PLANNING

    def test_all_items_failing(self, decomposed_graph):
        before = snapshot(decomposed_graph)

        with pytest.raises(HypothesisBatchError) as exc_info:
            decomposed_graph.generate_hypotheses("2.1", ["", "   ", {"content": ""}])

        assert len(exc_info.value.errors) == 3
        assert snapshot(decomposed_graph) == before

    def test_config_limits_processed_items(self, decomposed_graph):
        entry = decomposed_graph.generate_hypotheses(
            "2.1", ["a", "b", "c", "d", "e"], {"max_hypotheses": 3}
        )

        assert entry.node_ids == ["3.1.1", "3.1.2", "3.1.3"]

    def test_constructor_limit(self):
        graph = ResearchGraph(max_hypotheses=4)
        graph.initialize(TASK)
        graph.decompose()

        entry = graph.generate_hypotheses("2.1", ["a", "b", "c", "d", "e"])

        assert len(entry.node_ids) == 4

    def test_call_config_cannot_raise_constructor_limit(self):
        graph = ResearchGraph(max_hypotheses=3)
        graph.initialize(TASK)
        graph.decompose()

        entry = graph.generate_hypotheses(
            "2.1", ["a", "b", "c", "d", "e"], {"max_hypotheses": 5}
        )

        assert entry.node_ids == ["3.1.1", "3.1.2", "3.1.3"]

    def test_call_config_can_lower_constructor_limit(self):
        graph = ResearchGraph(max_hypotheses=4)
        graph.initialize(TASK)
        graph.decompose()

        entry = graph.generate_hypotheses(
            "2.1", ["a", "b", "c", "d", "e"], {"max_hypotheses": 2}
        )

        assert entry.node_ids == ["3.1.1", "3.1.2"]

    def test_object_items(self, decomposed_graph):
        plan = {"type": "experimental_study", "description": "Cohort study"}
        decomposed_graph.generate_hypotheses(
            "2.4",
            [
                {
                    "content": "Microbial diversity clearly predicts flare severity",
                    "confidence": [0.6, 0.6, 0.6, 0.6],
                    "falsification_criteria": "No correlation in a 200-patient cohort",
                    "plan": plan,
                    "impact_score": 0.9,
                    "disciplinary_tags": ["microbiology"],
                    "attribution": ["lab-a"],
                },
                "Second",
                "Third",
            ],
        )

        node = decomposed_graph.find_by_id("3.4.1")
        assert node.confidence.means == [0.6, 0.6, 0.6, 0.6]
        assert node.metadata.falsification_criteria == "No correlation in a 200-patient cohort"
        assert node.metadata.extra["plan"] == plan
        assert node.impact_score == 0.9
        assert node.metadata.disciplinary_tags == ["microbiology"]
        assert node.metadata.attribution == ["lab-a"]
        assert node.metadata.bias_flags == ["confirmation_bias_risk"]

    def test_second_call_is_wrong_stage(self, hypothesis_graph):
        with pytest.raises(WrongStageError) as exc_info:
            hypothesis_graph.generate_hypotheses("2.1", ["a", "b", "c"])

        assert exc_info.value.current == 3
        assert exc_info.value.expected == 2


class TestStageLogRecording:
    def test_transitions_recorded(self, hypothesis_graph):
        operations = [e.operation for e in hypothesis_graph.stage_log.iter_entries()]

        assert operations == ["initialize", "decompose", "generate hypotheses"]

    def test_failed_operation_not_recorded(self, initialized_graph):
        with pytest.raises(InvalidParameterError):
            initialized_graph.decompose([])

        assert len(initialized_graph.stage_log) == 1


class TestGraphMetadata:
    def test_fields(self, decomposed_graph):
        meta = decomposed_graph.graph_metadata()

        assert meta["stage"] == "decomposition"
        assert meta["task_description"] == TASK
        assert meta["version"] == "1.0.0"
        assert meta["config"]["max_hypotheses"] == 5
        assert meta["config"]["default_dimensions"] == DEFAULT_DIMENSIONS


class TestNodeEdges:
    def test_root_children(self, decomposed_graph):
        root = decomposed_graph.find_by_id("n0")

        assert list(root.iter_children_ids()) == [f"2.{i}" for i in range(1, 8)]

    def test_dimension_neighbors(self, hypothesis_graph):
        dimension = hypothesis_graph.find_by_id("2.6")

        assert dimension.neighbor_ids() == {"n0", "3.6.1", "3.6.2", "3.6.3"}
        assert "n0" not in set(dimension.iter_children_ids())
        assert len(list(dimension.iter_outgoing_edges())) == 3
        assert dimension.degree == 4

    def test_node_to_dict(self, initialized_graph):
        data = initialized_graph.find_by_id("n0").to_dict()

        assert data["node_id"] == "n0"
        assert data["type"] == "root"
        assert data["label"] == "Task Understanding"
        assert data["metadata"]["node_id"] == "n0"
