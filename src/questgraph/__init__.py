"""
questgraph - Stage-gated research reasoning graph

questgraph keeps an in-memory graph of a research task, its dimensions
and candidate hypotheses, built one stage at a time, and serves it to
AI agents as MCP tools.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("questgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from questgraph.graph import ResearchGraph, Stage
from questgraph.validation.errors import (
    HypothesisBatchError,
    InvalidParameterError,
    MissingNodeError,
    QuestGraphError,
    WrongStageError,
)

__all__ = [
    "__version__",
    "ResearchGraph",
    "Stage",
    "QuestGraphError",
    "InvalidParameterError",
    "WrongStageError",
    "MissingNodeError",
    "HypothesisBatchError",
]
