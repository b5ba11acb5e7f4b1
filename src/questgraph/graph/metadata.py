"""Metadata records attached to every node and edge.

This module provides the fixed-shape metadata bundles and their factory:
- ConfidenceDistribution: A 4-vector wrapped as a beta distribution record
- TopologyMetrics / InfoMetrics: Placeholder metric records (all zeros)
- NodeMetadata / EdgeMetadata: Closed field sets plus an explicit ``extra`` map
- build_node_metadata / build_edge_metadata: Factories that never fail
- wrap_confidence: Forgiving conversion of raw means to a distribution
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

UNIFORM_CONFIDENCE = (0.5, 0.5, 0.5, 0.5)
DEFAULT_IMPACT = 0.5


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConfidenceDistribution:
    """Confidence vector represented as a distribution record.

    Components are ``[empirical_support, theoretical_basis,
    methodological_rigor, consensus_alignment]``. Variances follow the
    beta approximation ``m * (1 - m)``. No sampling is ever performed.
    """

    means: list[float]
    variances: list[float]
    distribution_type: str = "beta"
    samples: int = 1000
    confidence_interval: float = 0.95

    @property
    def average(self) -> float:
        """Mean of the four components."""
        if not self.means:
            return 0.0
        return sum(self.means) / len(self.means)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "probability_distribution",
            "means": list(self.means),
            "variances": list(self.variances),
            "distribution_type": self.distribution_type,
            "samples": self.samples,
            "confidence_interval": self.confidence_interval,
        }


def wrap_confidence(means: Any) -> ConfidenceDistribution:
    """Wrap raw confidence means into a ConfidenceDistribution.

    Unlike the validation layer this never rejects input: a non-sequence
    becomes the uniform vector and each invalid entry is clamped to 0.5,
    with a warning in both cases.

    Args:
        means: Candidate sequence of component means.

    Returns:
        The distribution record.
    """
    if not isinstance(means, (list, tuple)):
        logger.warning("Invalid means array %r, using uniform confidence", means)
        means = UNIFORM_CONFIDENCE

    valid: list[float] = []
    for m in means:
        if isinstance(m, bool) or not isinstance(m, (int, float)) or not 0 <= m <= 1:
            logger.warning("Invalid confidence value %r, using 0.5", m)
            valid.append(0.5)
        else:
            valid.append(float(m))
    return ConfidenceDistribution(means=valid, variances=[m * (1 - m) for m in valid])


@dataclass
class TopologyMetrics:
    """Per-node topology placeholders."""

    centrality: float = 0
    clustering_coeff: float = 0
    degree: int = 0
    betweenness_centrality: float = 0
    eigenvector_centrality: float = 0
    pagerank: float = 0
    community_id: str | None = None


@dataclass
class InfoMetrics:
    """Per-node information-theory placeholders."""

    entropy: float = 0
    kl_divergence: float = 0
    mutual_information: float = 0
    mdl_score: float = 0
    information_gain: float = 0
    complexity: float = 0


@dataclass
class NodeMetadata:
    """Complete metadata bundle for a node.

    Attributes:
        node_id: Node identifier (mirrors the node's id).
        provenance: Where the node came from (``user_input``, ...).
        epistemic_status: ``accepted``, ``pending``, ``hypothetical``, ...
        falsification_criteria: Testable refutation condition, if any.
        layer_id: Layer the node belongs to.
        statistical_power: Placeholder, None unless supplied.
        impact_score: Estimated impact in [0, 1].
        extra: Caller keys outside the reserved field set (e.g. ``plan``).
    """

    node_id: str
    created: str
    updated: str
    timestamp: str
    provenance: str = "system_generated"
    confidence: ConfidenceDistribution = field(
        default_factory=lambda: wrap_confidence(UNIFORM_CONFIDENCE)
    )
    epistemic_status: str = "pending"
    disciplinary_tags: list[str] = field(default_factory=list)
    falsification_criteria: str | None = None
    bias_flags: list[str] = field(default_factory=list)
    revision_history: list[Any] = field(default_factory=list)
    layer_id: str = "base"
    topology_metrics: TopologyMetrics = field(default_factory=TopologyMetrics)
    statistical_power: Any = None
    info_metrics: InfoMetrics = field(default_factory=InfoMetrics)
    impact_score: float = DEFAULT_IMPACT
    attribution: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to a JSON-compatible dict, extras last."""
        result: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if isinstance(value, ConfidenceDistribution):
                value = value.to_dict()
            elif isinstance(value, (TopologyMetrics, InfoMetrics)):
                value = asdict(value)
            elif isinstance(value, list):
                value = list(value)
            result[f.name] = value
        result.update(self.extra)
        return result


@dataclass
class EdgeMetadata:
    """Complete metadata bundle for an edge."""

    edge_id: str
    created: str
    edge_type: str = "Other"
    confidence: ConfidenceDistribution = field(
        default_factory=lambda: wrap_confidence([0.7, 0.7, 0.7, 0.7])
    )
    causal_metadata: Any = None
    temporal_metadata: Any = None
    weight: float = 1.0
    bidirectional: bool = False
    layer_connection: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            "edge_id": self.edge_id,
            "created": self.created,
            "edge_type": self.edge_type,
            "confidence": self.confidence.to_dict(),
            "causal_metadata": self.causal_metadata,
            "temporal_metadata": self.temporal_metadata,
            "weight": self.weight,
            "bidirectional": self.bidirectional,
            "layer_connection": self.layer_connection,
        }
        result.update(self.extra)
        return result


RESERVED_NODE_KEYS = frozenset(f.name for f in fields(NodeMetadata)) - {"extra"}
RESERVED_EDGE_KEYS = frozenset(f.name for f in fields(EdgeMetadata)) - {"extra"}


def _as_confidence(value: Any, default: tuple[float, ...]) -> ConfidenceDistribution:
    if isinstance(value, ConfidenceDistribution):
        return value
    if value is None:
        return wrap_confidence(default)
    return wrap_confidence(value)


def _as_list(base: Mapping[str, Any], key: str) -> list[Any]:
    value = base.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning("Metadata field %s has type %s, using empty list", key, type(value).__name__)
        return []
    return list(value)


def _as_str(base: Mapping[str, Any], key: str, default: str) -> str:
    value = base.get(key)
    if isinstance(value, str) and value:
        return value
    if value is not None:
        logger.warning("Metadata field %s has invalid value %r, using %r", key, value, default)
    return default


def validate_impact_score(score: Any) -> float:
    """Return ``score`` as a float in [0, 1], or 0.5 with a warning."""
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 1:
        logger.warning("Invalid impact score %r, using %s", score, DEFAULT_IMPACT)
        return DEFAULT_IMPACT
    return float(score)


def minimal_node_metadata(node_id: str | None = None) -> NodeMetadata:
    """Return the guaranteed-valid fallback bundle."""
    now = utc_now()
    return NodeMetadata(
        node_id=node_id or uuid4().hex,
        created=now,
        updated=now,
        timestamp=now,
        provenance="error_recovery",
    )


def build_node_metadata(base: Mapping[str, Any] | None = None) -> NodeMetadata:
    """Build a complete node metadata bundle from partial input.

    Missing or malformed fields are replaced field by field: unknown types
    become empty containers, an out-of-range impact score becomes 0.5 and a
    missing confidence becomes the uniform distribution. Keys outside the
    reserved set are kept in ``extra``. If anything goes wrong while
    building, the minimal bundle is returned instead; this function never
    raises.

    Args:
        base: Partial metadata, typically from an operation.

    Returns:
        A fully populated NodeMetadata.
    """
    try:
        if base is None:
            logger.warning("Null base metadata, using empty mapping")
            base = {}
        elif not isinstance(base, Mapping):
            logger.warning("Invalid base metadata type %s, using empty mapping", type(base).__name__)
            base = {}

        now = utc_now()
        topology = base.get("topology_metrics")
        info = base.get("info_metrics")
        return NodeMetadata(
            node_id=_as_str(base, "node_id", uuid4().hex),
            created=now,
            updated=now,
            timestamp=now,
            provenance=_as_str(base, "provenance", "system_generated"),
            confidence=_as_confidence(base.get("confidence"), UNIFORM_CONFIDENCE),
            epistemic_status=_as_str(base, "epistemic_status", "pending"),
            disciplinary_tags=_as_list(base, "disciplinary_tags"),
            falsification_criteria=base.get("falsification_criteria"),
            bias_flags=_as_list(base, "bias_flags"),
            revision_history=_as_list(base, "revision_history"),
            layer_id=_as_str(base, "layer_id", "base"),
            topology_metrics=topology if isinstance(topology, TopologyMetrics) else TopologyMetrics(),
            statistical_power=base.get("statistical_power"),
            info_metrics=info if isinstance(info, InfoMetrics) else InfoMetrics(),
            impact_score=validate_impact_score(base.get("impact_score", DEFAULT_IMPACT)),
            attribution=_as_list(base, "attribution"),
            extra={
                k: v
                for k, v in base.items()
                if isinstance(k, str) and k not in RESERVED_NODE_KEYS and v is not None
            },
        )
    except Exception:
        logger.exception("Failed to create node metadata, using minimal bundle")
        return minimal_node_metadata()


def build_edge_metadata(base: Mapping[str, Any] | None = None) -> EdgeMetadata:
    """Build a complete edge metadata bundle from partial input."""
    base = base or {}
    weight = base.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        weight = 1.0
    return EdgeMetadata(
        edge_id=base.get("edge_id") or uuid4().hex,
        created=utc_now(),
        edge_type=base.get("edge_type") or "Other",
        confidence=_as_confidence(base.get("confidence"), (0.7, 0.7, 0.7, 0.7)),
        causal_metadata=base.get("causal_metadata"),
        temporal_metadata=base.get("temporal_metadata"),
        weight=float(weight),
        bidirectional=bool(base.get("bidirectional", False)),
        layer_connection=base.get("layer_connection"),
        extra={k: v for k, v in base.items() if k not in RESERVED_EDGE_KEYS},
    )


__all__ = [
    "ConfidenceDistribution",
    "EdgeMetadata",
    "InfoMetrics",
    "NodeMetadata",
    "TopologyMetrics",
    "build_edge_metadata",
    "build_node_metadata",
    "minimal_node_metadata",
    "utc_now",
    "validate_impact_score",
    "wrap_confidence",
]
