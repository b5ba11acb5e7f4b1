"""
questgraph.mcp.context - Session state for the MCP server.

A GraphSession owns one ResearchGraph, the resolved configuration and
the lock that serializes operations on that graph.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from questgraph.config import DEFAULT_CONFIG, get_config
from questgraph.graph.builder import ResearchGraph
from questgraph.validation.params import (
    apply_defaults,
    check_flag,
    check_string_list,
    validate_export_format,
    validate_hypothesis_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSettings:
    """Graph defaults resolved from the ``[graph]`` and ``[hypotheses]`` tables."""

    default_tags: list[str]
    default_dimensions: list[str]
    enable_multi_layer: bool
    max_hypotheses: int
    default_format: str

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> GraphSettings:
        """Read settings, falling back to defaults for malformed values."""
        graph_cfg = config.get("graph") or {}
        defaults = DEFAULT_CONFIG["graph"]
        resolved, _ = apply_defaults(
            {
                "default_disciplinary_tags": check_string_list(
                    graph_cfg.get("default_disciplinary_tags", defaults["default_disciplinary_tags"]),
                    "graph.default_disciplinary_tags",
                ),
                "default_dimensions": check_string_list(
                    graph_cfg.get("default_dimensions", defaults["default_dimensions"]),
                    "graph.default_dimensions",
                ),
                "enable_multi_layer": check_flag(
                    graph_cfg.get("enable_multi_layer", defaults["enable_multi_layer"]),
                    "graph.enable_multi_layer",
                ),
            },
            defaults,
        )
        dimensions = resolved["default_dimensions"] or list(defaults["default_dimensions"])

        fmt = (config.get("export") or {}).get("default_format", "json")
        try:
            fmt = validate_export_format(fmt)
        except ValueError:
            logger.warning("Invalid export.default_format %r, using json", fmt)
            fmt = "json"

        return cls(
            default_tags=list(resolved["default_disciplinary_tags"]),
            default_dimensions=list(dimensions),
            enable_multi_layer=resolved["enable_multi_layer"],
            max_hypotheses=validate_hypothesis_config(config.get("hypotheses") or {}),
            default_format=fmt,
        )


@dataclass
class GraphSession:
    """One client's graph plus the lock guarding it.

    Every operation runs inside ``lock`` so the stage check and the
    mutation it guards cannot interleave with another call.

    Attributes:
        config: Resolved configuration dict.
        working_dir: Directory the configuration was resolved from.
    """

    config: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_CONFIG))
    working_dir: Path | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    started_at: float = field(default_factory=time.monotonic, repr=False)
    settings: GraphSettings = field(init=False)
    graph: ResearchGraph = field(init=False)

    def __post_init__(self) -> None:
        self.settings = GraphSettings.from_config(self.config)
        self.graph = self.new_graph()

    @classmethod
    def from_working_dir(cls, working_dir: Path | None = None) -> GraphSession:
        """Create a session configured from ``.questgraph.toml`` and env vars."""
        working_dir = working_dir or Path.cwd()
        return cls(config=get_config(start_path=working_dir), working_dir=working_dir)

    def new_graph(self) -> ResearchGraph:
        """Build an empty graph with this session's defaults."""
        return ResearchGraph(
            default_tags=list(self.settings.default_tags),
            default_dimensions=list(self.settings.default_dimensions),
            max_hypotheses=self.settings.max_hypotheses,
            enable_multi_layer=self.settings.enable_multi_layer,
        )

    def replace_graph(self) -> ResearchGraph:
        """Discard the current graph for a fresh one."""
        self.graph = self.new_graph()
        return self.graph

    def reset(self) -> None:
        """Return the current graph to its empty state."""
        self.graph.reset()

    @property
    def uptime_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)


__all__ = ["GraphSession", "GraphSettings"]
