"""Shared pytest fixtures for questgraph tests."""

import os

import pytest

TASK = "Investigate the role of skin microbiome in disease"


@pytest.fixture(autouse=True)
def _clean_questgraph_env(monkeypatch):
    """Keep QUESTGRAPH_* variables from the outer shell out of every test."""
    for name in list(os.environ):
        if name.startswith("QUESTGRAPH_"):
            monkeypatch.delenv(name)


@pytest.fixture
def graph():
    """Fresh, empty ResearchGraph."""
    from questgraph.graph.builder import ResearchGraph

    return ResearchGraph()


@pytest.fixture
def initialized_graph(graph):
    """Graph at stage 1 with root n0."""
    graph.initialize(TASK, [0.8, 0.7, 0.9, 0.6])
    return graph


@pytest.fixture
def decomposed_graph(initialized_graph):
    """Graph at stage 2 with the seven default dimensions."""
    initialized_graph.decompose()
    return initialized_graph


@pytest.fixture
def hypothesis_graph(decomposed_graph):
    """Graph at stage 3 with three hypotheses under Potential Biases (2.6)."""
    decomposed_graph.generate_hypotheses("2.6", ["H1 text", "H2 text", "H3 text"])
    return decomposed_graph
