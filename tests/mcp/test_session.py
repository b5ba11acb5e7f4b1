"""Tests for GraphSession and the settings it derives from config."""

import copy

from questgraph.config import DEFAULT_CONFIG, merge_configs
from questgraph.graph import Stage
from questgraph.graph.builder import DEFAULT_DIMENSIONS
from questgraph.mcp.context import GraphSession, GraphSettings


def config_with(**sections):
    return merge_configs(DEFAULT_CONFIG, sections)


class TestGraphSettings:
    def test_defaults(self):
        settings = GraphSettings.from_config(copy.deepcopy(DEFAULT_CONFIG))

        assert settings.default_tags == ["immunology", "dermatology"]
        assert settings.default_dimensions == DEFAULT_DIMENSIONS
        assert settings.enable_multi_layer is True
        assert settings.max_hypotheses == 5
        assert settings.default_format == "json"

    def test_empty_config_uses_defaults(self):
        settings = GraphSettings.from_config({})

        assert settings.default_tags == ["immunology", "dermatology"]
        assert settings.max_hypotheses == 5

    def test_overrides(self):
        settings = GraphSettings.from_config(
            config_with(
                graph={"default_disciplinary_tags": ["cardiology"], "enable_multi_layer": False},
                hypotheses={"max_hypotheses": 3},
                export={"default_format": "YAML"},
            )
        )

        assert settings.default_tags == ["cardiology"]
        assert settings.enable_multi_layer is False
        assert settings.max_hypotheses == 3
        assert settings.default_format == "yaml"

    def test_malformed_values_fall_back(self):
        settings = GraphSettings.from_config(
            config_with(
                graph={
                    "default_disciplinary_tags": "cardiology",
                    "default_dimensions": [],
                    "enable_multi_layer": "no",
                },
                hypotheses={"max_hypotheses": 12},
                export={"default_format": "xml"},
            )
        )

        assert settings.default_tags == ["immunology", "dermatology"]
        assert settings.default_dimensions == DEFAULT_DIMENSIONS
        assert settings.enable_multi_layer is True
        assert settings.max_hypotheses == 5
        assert settings.default_format == "json"


class TestGraphSession:
    def test_new_session_has_empty_graph(self):
        session = GraphSession()

        assert session.graph.stage is Stage.EMPTY
        assert session.graph.node_count() == 0
        assert session.uptime_ms >= 0

    def test_graph_uses_settings(self):
        session = GraphSession(
            config=config_with(
                graph={"enable_multi_layer": False, "default_dimensions": ["Scope", "Data Needs"]},
                hypotheses={"max_hypotheses": 4},
            )
        )

        assert session.graph.layer_count() == 1
        assert session.graph.max_hypotheses == 4
        assert session.graph.default_dimensions == ["Scope", "Data Needs"]

    def test_replace_graph(self):
        session = GraphSession()
        old = session.graph
        old.initialize("Investigate the role of skin microbiome in disease")

        new = session.replace_graph()

        assert new is session.graph
        assert new is not old
        assert new.node_count() == 0

    def test_reset_keeps_instance(self):
        session = GraphSession()
        graph = session.graph
        graph.initialize("Investigate the role of skin microbiome in disease")

        session.reset()

        assert session.graph is graph
        assert graph.stage is Stage.EMPTY

    def test_from_working_dir_reads_config(self, tmp_path):
        (tmp_path / ".questgraph.toml").write_text("[hypotheses]\nmax_hypotheses = 3\n")

        session = GraphSession.from_working_dir(tmp_path)

        assert session.working_dir == tmp_path
        assert session.settings.max_hypotheses == 3

    def test_sessions_are_independent(self):
        first = GraphSession()
        second = GraphSession()

        first.graph.initialize("Investigate the role of skin microbiome in disease")

        assert second.graph.node_count() == 0
