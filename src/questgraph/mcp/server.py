"""questgraph.mcp.server - MCP server implementation.

Creates and runs the MCP server exposing the research graph operations.

Every tool delegates to a ``_helper(session, ...)`` function that takes
the session lock, runs one graph operation and turns the outcome into a
result dict. Helpers never raise: failures come back as
``{"success": False, "error": ...}``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

try:
    from mcp.server.fastmcp import FastMCP

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False
    FastMCP = None

from questgraph.graph.catalog import active_parameter_keys
from questgraph.graph.metadata import utc_now
from questgraph.graph.mutations import StageTransition
from questgraph.graph.serialize import export_graph, get_summary
from questgraph.mcp.context import GraphSession
from questgraph.validation.errors import InvalidParameterError, QuestGraphError

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Result helpers
# ─────────────────────────────────────────────────────────────────────────────


def _stage_fields(session: GraphSession) -> dict[str, Any]:
    stage = session.graph.stage
    return {"current_stage": int(stage), "stage_name": stage.stage_name}


def _failure(session: GraphSession, error: Exception, message: str) -> dict[str, Any]:
    """Result for a recoverable failure; the graph is left untouched."""
    result: dict[str, Any] = {
        "success": False,
        "error": str(error),
        "message": message,
        "recovery_attempted": False,
        **_stage_fields(session),
    }
    if isinstance(error, InvalidParameterError):
        result["details"] = error.to_dict()
    return result


def _recover(session: GraphSession, error: Exception, message: str) -> dict[str, Any]:
    """Reset the graph after a failure and report the outcome.

    A reset that itself fails produces a distinct critical result.
    """
    try:
        session.reset()
    except Exception as reset_error:
        logger.critical("Recovery failed: %s", reset_error, exc_info=True)
        return {
            "success": False,
            "critical": True,
            "error": str(error),
            "recovery_error": str(reset_error),
            "message": f"Critical failure: {message.lower()} and recovery both failed",
        }
    result: dict[str, Any] = {
        "success": False,
        "error": str(error),
        "message": f"{message}, graph reset to initial state",
        "recovery_attempted": True,
        **_stage_fields(session),
    }
    if isinstance(error, InvalidParameterError):
        result["details"] = error.to_dict()
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Operation helpers
# ─────────────────────────────────────────────────────────────────────────────


def _initialize_graph(
    session: GraphSession,
    task_description: Any,
    initial_confidence: Any = None,
    config: Any = None,
) -> dict[str, Any]:
    """Start a fresh graph rooted at the task description.

    Any previous graph is discarded first. On failure the new graph is
    reset to its empty state.
    """
    with session.lock:
        session.replace_graph()
        try:
            entry = session.graph.initialize(task_description, initial_confidence, config)
        except QuestGraphError as e:
            logger.warning("Initialization failed: %s", e)
            return _recover(session, e, "Initialization failed")
        except Exception as e:
            logger.exception("Initialization failed")
            return _recover(session, e, "Initialization failed")
        return {
            "success": True,
            "node_id": entry.node_ids[0],
            "message": "Research graph initialized",
            **_stage_fields(session),
            "active_parameters": active_parameter_keys(),
            "warnings": list(entry.warnings),
        }


def _decompose_task(session: GraphSession, dimensions: Any = None) -> dict[str, Any]:
    """Create dimension nodes under the root."""
    with session.lock:
        try:
            entry = session.graph.decompose(dimensions)
        except QuestGraphError as e:
            logger.warning("Task decomposition failed: %s", e)
            return _failure(session, e, "Task decomposition failed, graph unchanged")
        except Exception as e:
            logger.exception("Task decomposition failed")
            return _recover(session, e, "Task decomposition failed")
        return {
            "success": True,
            "dimension_nodes": list(entry.node_ids),
            "dimensions": list(entry.labels),
            "message": f"Task decomposed into {len(entry.node_ids)} dimensions",
            **_stage_fields(session),
            "warnings": list(entry.warnings),
        }


def _generate_hypotheses(
    session: GraphSession,
    dimension_node_id: Any,
    hypotheses: Any,
    config: Any = None,
) -> dict[str, Any]:
    """Attach hypotheses to a dimension node.

    Succeeds when at least one hypothesis was created; per-item failures
    are listed in ``errors``.
    """
    with session.lock:
        try:
            entry: StageTransition = session.graph.generate_hypotheses(
                dimension_node_id, hypotheses, config
            )
        except QuestGraphError as e:
            logger.warning("Hypothesis generation failed: %s", e)
            return _failure(session, e, "Hypothesis generation failed, graph unchanged")
        except Exception as e:
            logger.exception("Hypothesis generation failed")
            return _recover(session, e, "Hypothesis generation failed")
        if entry.errors:
            logger.warning("Hypothesis generation had errors: %s", "; ".join(entry.errors))
        return {
            "success": True,
            "hypothesis_nodes": list(entry.node_ids),
            "message": f"Generated {len(entry.node_ids)} hypotheses",
            **_stage_fields(session),
            "errors": list(entry.errors),
            "warnings": list(entry.warnings),
        }


def _get_graph_summary(session: GraphSession) -> dict[str, Any]:
    """Summarize the graph with server health information attached."""
    with session.lock:
        graph = session.graph
        try:
            summary = get_summary(graph)
        except Exception as e:
            logger.exception("Summary generation failed")
            return {
                "success": False,
                "error": str(e),
                "message": "Summary generation failed",
                "fallback_info": {
                    "vertices_count": graph.node_count(),
                    "current_stage": int(graph.stage),
                    "server_operational": True,
                },
            }
        summary["success"] = True
        summary["health_info"] = {
            "server_health": "operational",
            "graph_health": "healthy" if graph.node_count() > 0 else "empty",
            "last_operation": utc_now(),
            "uptime_ms": session.uptime_ms,
        }
        return summary


def _export_graph_data(session: GraphSession, format: Any = None) -> dict[str, Any]:
    """Export the graph as JSON or YAML text.

    Falls back to basic counts when the export cannot be produced.
    """
    if format is None:
        format = session.settings.default_format
    with session.lock:
        graph = session.graph
        try:
            content = export_graph(graph, format)
        except Exception as e:
            if isinstance(e, QuestGraphError):
                logger.warning("Export failed: %s", e)
            else:
                logger.exception("Export failed")
            result: dict[str, Any] = {
                "success": False,
                "error": str(e),
                "message": "Export failed, providing minimal data",
                "fallback_data": {
                    "vertices_count": graph.node_count(),
                    "edges_count": graph.edge_count(),
                    "current_stage": int(graph.stage),
                    "export_timestamp": utc_now(),
                },
            }
            if isinstance(e, InvalidParameterError):
                result["details"] = e.to_dict()
            return result
        return {"success": True, "format": format.lower(), "content": content}


# ─────────────────────────────────────────────────────────────────────────────
# MCP Server Factory
# ─────────────────────────────────────────────────────────────────────────────

MCP_SERVER_INSTRUCTIONS = """\
questgraph MCP Server - Stage-gated research reasoning graph

This server builds a research reasoning graph one stage at a time.
Each tool only works at its stage; calling out of order returns an error
that names the current and expected stage.

## Workflow

1. `initialize_research_quest_graph(task_description)` - Stage 1, creates root node n0
2. `decompose_research_task(dimensions=None)` - Stage 2, creates dimension nodes 2.1, 2.2, ...
3. `generate_hypotheses(dimension_node_id, hypotheses)` - Stage 3, creates 3.<dim>.<k>
4. `get_graph_summary()` - Counts, topology and quality metrics at any time
5. `export_graph_data(format="json")` - Full JSON export or condensed YAML

## Conventions

- Confidence vectors have four numbers in [0, 1]:
  [empirical_support, theoretical_basis, methodological_rigor, consensus_alignment]
- Hypotheses: 3 to 5 per call, as strings or objects with `content` and
  optional `falsification_criteria`, `plan`, `impact_score`,
  `disciplinary_tags`, `attribution`, `confidence`
- Calling initialize again discards the current graph
- Every result has `success`; failures carry `error`
"""


def create_server(
    session: GraphSession | None = None,
    working_dir: Path | None = None,
) -> FastMCP:
    """Create the MCP server with all tools registered.

    Args:
        session: Optional pre-built session (for testing).
        working_dir: Directory to resolve configuration from.

    Returns:
        FastMCP server instance.
    """
    if not MCP_AVAILABLE:
        raise ImportError("MCP dependencies not installed. Install with: pip install questgraph[mcp]")

    if session is None:
        session = GraphSession.from_working_dir(working_dir)

    name = session.config.get("server", {}).get("name", "questgraph")
    mcp = FastMCP(name, instructions=MCP_SERVER_INSTRUCTIONS)

    # ─────────────────────────────────────────────────────────────────────
    # Register Tools
    # ─────────────────────────────────────────────────────────────────────
    # Arguments are typed Any so that bad input reaches the helpers and
    # comes back as a structured failure instead of a ToolError.

    @mcp.tool()
    def initialize_research_quest_graph(
        task_description: Any = None,
        initial_confidence: Any = None,
        config: Any = None,
    ) -> dict[str, Any]:
        """Initialize a research graph with root node n0 (Stage 1).

        Discards any existing graph.

        Args:
            task_description: Research task or question, 10-1000 characters.
            initial_confidence: Root confidence vector, default [0.8, 0.8, 0.8, 0.8].
            config: Optional disciplinary_tags, attribution, enable_multi_layer.

        Returns:
            Root node id, stage and the active parameter listing.
        """
        return _initialize_graph(session, task_description, initial_confidence, config)

    @mcp.tool()
    def decompose_research_task(dimensions: Any = None) -> dict[str, Any]:
        """Decompose the task into dimension nodes 2.1, 2.2, ... (Stage 2).

        Args:
            dimensions: Dimension names. Defaults to Scope, Objectives,
                Constraints, Data Needs, Use Cases, Potential Biases,
                Knowledge Gaps.

        Returns:
            Created dimension node ids and their names.
        """
        return _decompose_task(session, dimensions)

    @mcp.tool()
    def generate_hypotheses(
        dimension_node_id: Any = None,
        hypotheses: Any = None,
        config: Any = None,
    ) -> dict[str, Any]:
        """Generate 3-5 hypotheses under a dimension node (Stage 3).

        Args:
            dimension_node_id: Dimension id such as "2.1".
            hypotheses: Hypothesis strings or objects with content.
            config: Optional max_hypotheses (1-5).

        Returns:
            Created hypothesis ids plus per-item errors and warnings.
        """
        return _generate_hypotheses(session, dimension_node_id, hypotheses, config)

    @mcp.tool()
    def get_graph_summary() -> dict[str, Any]:
        """Get graph counts, stage, topology and quality metrics.

        Returns:
            Summary dict with health_info.
        """
        return _get_graph_summary(session)

    @mcp.tool()
    def export_graph_data(format: Any = None) -> dict[str, Any]:
        """Export the graph.

        Args:
            format: 'json' (full document) or 'yaml' (condensed view).

        Returns:
            Dict with the rendered text under 'content'.
        """
        return _export_graph_data(session, format)

    return mcp


def run_server(
    working_dir: Path | None = None,
    transport: str | None = None,
    config: dict[str, Any] | None = None,
) -> None:
    """Run the MCP server.

    Args:
        working_dir: Directory to resolve configuration from.
        transport: 'stdio', 'sse' or 'streamable-http'; defaults to the
            ``[server] transport`` setting.
        config: Already-resolved configuration, skipping discovery.
    """
    if config is not None:
        session = GraphSession(config=config, working_dir=working_dir)
    else:
        session = GraphSession.from_working_dir(working_dir)
    mcp = create_server(session=session)
    transport = transport or session.config.get("server", {}).get("transport", "stdio")
    logger.info("Starting questgraph MCP server (%s)", transport)
    mcp.run(transport=transport)
