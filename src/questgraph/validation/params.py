"""Parameter validation for research graph operations.

Every externally supplied value passes through one of the checks below
before it reaches the graph. Strict checks raise InvalidParameterError;
lenient field checks return a FieldResult so that a single
``apply_defaults`` step decides what replaces a rejected value.

None of these functions touch graph state.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Any

from questgraph.validation.errors import InvalidParameterError

logger = logging.getLogger(__name__)

CONFIDENCE_SIZE = 4
TASK_MIN_LENGTH = 10
TASK_MAX_LENGTH = 1000
MIN_HYPOTHESES = 3
MAX_HYPOTHESES = 5
EXPORT_FORMATS = ("json", "yaml")

DIMENSION_ID_RE = re.compile(r"^2\.[1-9]\d*$")

_EXAMPLE_TASK = "Analyze the effectiveness of topical treatments for eczema"


# ─────────────────────────────────────────────────────────────────────────────
# Discriminated field results
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FieldResult:
    """Outcome of a lenient field check.

    Exactly one of ``value`` (when ``ok``) or ``reason`` is meaningful.
    ``warnings`` carries notes about entries that were dropped while the
    field as a whole was still accepted.
    """

    ok: bool
    value: Any = None
    reason: str = ""
    warnings: tuple[str, ...] = ()

    @classmethod
    def success(cls, value: Any, warnings: list[str] | None = None) -> FieldResult:
        return cls(ok=True, value=value, warnings=tuple(warnings or ()))

    @classmethod
    def failure(cls, reason: str) -> FieldResult:
        return cls(ok=False, reason=reason)


def apply_defaults(
    results: Mapping[str, FieldResult],
    defaults: Mapping[str, Any],
) -> tuple[dict[str, Any], list[str]]:
    """Resolve field results into concrete values.

    Failed fields take the value from ``defaults``; when no default is
    registered the field is omitted. Every failure and every partial
    drop is logged and returned as a warning.

    Args:
        results: Field name to check outcome.
        defaults: Field name to fallback value.

    Returns:
        Tuple of (resolved values, warnings).
    """
    resolved: dict[str, Any] = {}
    warnings: list[str] = []
    for name, result in results.items():
        for note in result.warnings:
            logger.warning(note)
            warnings.append(note)
        if result.ok:
            resolved[name] = result.value
            continue
        message = f"{name}: {result.reason}, using default"
        logger.warning(message)
        warnings.append(message)
        if name in defaults:
            resolved[name] = defaults[name]
    return resolved, warnings


def check_string_list(value: Any, field_name: str) -> FieldResult:
    """Accept a list of strings, dropping blank or non-string entries."""
    if not isinstance(value, (list, tuple)):
        return FieldResult.failure(f"expected an array of strings, got {type(value).__name__}")
    kept: list[str] = []
    dropped: list[str] = []
    for entry in value:
        if isinstance(entry, str) and entry.strip():
            kept.append(entry.strip())
        else:
            dropped.append(f"Ignoring invalid {field_name} entry: {entry!r}")
    return FieldResult.success(kept, dropped)


def check_flag(value: Any, field_name: str) -> FieldResult:
    """Accept a strict boolean."""
    if isinstance(value, bool):
        return FieldResult.success(value)
    return FieldResult.failure(f"{field_name} must be boolean, got {type(value).__name__}")


# ─────────────────────────────────────────────────────────────────────────────
# Strict checks
# ─────────────────────────────────────────────────────────────────────────────


def coerce_number(value: Any) -> float | None:
    """Coerce a scalar to float, returning None when not numeric.

    Booleans are rejected even though they subclass int.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def validate_confidence(value: Any, field_name: str = "confidence") -> list[float]:
    """Validate a confidence vector.

    Args:
        value: Candidate ``[empirical_support, theoretical_basis,
            methodological_rigor, consensus_alignment]``.
        field_name: Parameter name used in error messages.

    Returns:
        The vector as four floats.

    Raises:
        InvalidParameterError: If the shape is wrong or any entry is
            non-numeric or outside [0, 1].
    """
    if not isinstance(value, (list, tuple)):
        raise InvalidParameterError(
            field_name,
            value,
            "array of 4 numbers between 0 and 1",
            [[0.8, 0.8, 0.8, 0.8], [0.5, 0.7, 0.6, 0.9]],
        )
    if len(value) != CONFIDENCE_SIZE:
        raise InvalidParameterError(
            field_name,
            list(value),
            "array with exactly 4 elements [empirical_support, theoretical_basis, "
            "methodological_rigor, consensus_alignment]",
            [[0.8, 0.8, 0.8, 0.8]],
        )

    validated: list[float] = []
    for index, entry in enumerate(value):
        number = coerce_number(entry)
        if number is None:
            raise InvalidParameterError(
                f"{field_name}[{index}]", entry, "a number between 0 and 1", [0.5, 0.8, 1.0]
            )
        if number < 0 or number > 1:
            raise InvalidParameterError(
                f"{field_name}[{index}]",
                number,
                "a number between 0 and 1 (inclusive)",
                [0.0, 0.5, 1.0],
            )
        validated.append(number)
    return validated


def validate_task_description(value: Any) -> str:
    """Validate and trim the research task description."""
    if value is None:
        raise InvalidParameterError(
            "task_description",
            value,
            "a non-empty string describing the research task",
            [_EXAMPLE_TASK, "Study the relationship between diet and skin health"],
        )
    if not isinstance(value, str):
        raise InvalidParameterError("task_description", value, "a string", [_EXAMPLE_TASK])

    trimmed = value.strip()
    if not trimmed:
        raise InvalidParameterError(
            "task_description", value, "a non-empty string", [_EXAMPLE_TASK]
        )
    if len(trimmed) < TASK_MIN_LENGTH:
        raise InvalidParameterError(
            "task_description",
            trimmed,
            f"a descriptive string with at least {TASK_MIN_LENGTH} characters",
            [_EXAMPLE_TASK],
        )
    if len(trimmed) > TASK_MAX_LENGTH:
        raise InvalidParameterError(
            "task_description",
            f"{trimmed[:50]}...",
            f"a string with maximum {TASK_MAX_LENGTH} characters",
            [_EXAMPLE_TASK],
        )
    return trimmed


def validate_dimension_node_id(
    node_id: Any,
    existing: Collection[str] | None = None,
) -> str:
    """Validate a dimension node id of the form ``2.<n>``.

    Args:
        node_id: Candidate id.
        existing: Optional collection of node ids currently in the graph.

    Raises:
        InvalidParameterError: On bad format, or when ``existing`` is given
            and does not contain the id.
    """
    if not node_id or not isinstance(node_id, str):
        raise InvalidParameterError(
            "dimension_node_id", node_id, 'a non-empty string in format "2.X"', ["2.1", "2.2", "2.3"]
        )
    if not DIMENSION_ID_RE.match(node_id):
        raise InvalidParameterError(
            "dimension_node_id",
            node_id,
            'a string in format "2.X" where X is the dimension number',
            ["2.1", "2.2", "2.3"],
        )
    if existing is not None and node_id not in existing:
        available = [nid for nid in existing if nid.startswith("2.")]
        raise InvalidParameterError(
            "dimension_node_id",
            node_id,
            f"an existing dimension node ID. Available: {', '.join(available)}",
            available,
        )
    return node_id


def validate_hypotheses(value: Any) -> list[Any]:
    """Check the hypothesis collection as a whole (3 to 5 items)."""
    examples = [
        ["Hypothesis 1", "Hypothesis 2", "Hypothesis 3"],
        [{"content": "Hypothesis 1", "falsification_criteria": "Test condition"}],
    ]
    if not isinstance(value, (list, tuple)):
        raise InvalidParameterError(
            "hypotheses", value, "an array of hypothesis objects or strings", examples
        )
    if len(value) < MIN_HYPOTHESES:
        raise InvalidParameterError(
            "hypotheses", list(value), f"an array with at least {MIN_HYPOTHESES} hypotheses", examples[:1]
        )
    if len(value) > MAX_HYPOTHESES:
        raise InvalidParameterError(
            "hypotheses", list(value), f"an array with maximum {MAX_HYPOTHESES} hypotheses", examples[:1]
        )
    return list(value)


def validate_export_format(value: Any) -> str:
    """Normalize an export format name, case-insensitively."""
    if not value or not isinstance(value, str):
        raise InvalidParameterError(
            "format", value, "a string specifying export format", list(EXPORT_FORMATS)
        )
    lowered = value.lower()
    if lowered not in EXPORT_FORMATS:
        raise InvalidParameterError(
            "format", value, f"one of: {', '.join(EXPORT_FORMATS)}", list(EXPORT_FORMATS)
        )
    return lowered


# ─────────────────────────────────────────────────────────────────────────────
# Hypothesis items
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class HypothesisInput:
    """A validated hypothesis item.

    Attributes:
        content: Trimmed hypothesis text.
        confidence: Validated confidence vector, or None for the default.
        falsification_criteria: Trimmed criteria, or None when missing.
        plan: Caller plan object, or None when one must be synthesized.
        impact_score: Caller impact in [0, 1], or None for the default.
        disciplinary_tags: Cleaned tag list, or None when not supplied.
        attribution: Cleaned attribution list, or None when not supplied.
        warnings: Non-fatal notes raised while validating this item.
    """

    content: str
    confidence: list[float] | None = None
    falsification_criteria: str | None = None
    plan: dict[str, Any] | None = None
    impact_score: float | None = None
    disciplinary_tags: list[str] | None = None
    attribution: list[str] | None = None
    warnings: list[str] = field(default_factory=list)

    def warn(self, note: str) -> None:
        logger.warning(note)
        self.warnings.append(note)

    @property
    def needs_plan(self) -> bool:
        return self.plan is None


def validate_hypothesis(item: Any, index: int) -> HypothesisInput:
    """Validate one hypothesis, given as a string or an object.

    Args:
        item: The raw hypothesis.
        index: Zero-based position in the batch, used in field names.

    Raises:
        InvalidParameterError: If content is missing or an optional field
            has an unusable type.
    """
    label = f"hypotheses[{index}]"
    number = index + 1

    if isinstance(item, str):
        if not item.strip():
            raise InvalidParameterError(
                label,
                item,
                "a non-empty string or object with content",
                ["Valid hypothesis text", {"content": "Hypothesis text"}],
            )
        note = (
            f"Hypothesis {number} provided as string; adding default plan "
            "and leaving falsification criteria unset"
        )
        logger.warning(note)
        return HypothesisInput(content=item.strip(), warnings=[note])

    if not isinstance(item, Mapping):
        raise InvalidParameterError(
            label,
            item,
            "a string or object with hypothesis content",
            ["Hypothesis text", {"content": "Hypothesis text"}],
        )

    content = item.get("content")
    if not isinstance(content, str) or not content.strip():
        raise InvalidParameterError(
            f"{label}.content",
            content,
            "a non-empty string describing the hypothesis",
            ["Treatment X is more effective than treatment Y"],
        )
    result = HypothesisInput(content=content.strip())

    if item.get("confidence") is not None:
        try:
            result.confidence = validate_confidence(item["confidence"], f"{label}.confidence")
        except InvalidParameterError as e:
            result.warn(f"Invalid confidence in hypothesis {number}: {e}, using defaults")

    criteria = item.get("falsification_criteria")
    if criteria is not None:
        if not isinstance(criteria, str) or not criteria.strip():
            raise InvalidParameterError(
                f"{label}.falsification_criteria",
                criteria,
                "a non-empty string describing testable criteria",
                ["If treatment shows less than 30% improvement in 4 weeks"],
            )
        result.falsification_criteria = criteria.strip()
    else:
        result.warn(f"Hypothesis {number} missing falsification_criteria")

    plan = item.get("plan")
    if plan is not None:
        if not isinstance(plan, Mapping):
            raise InvalidParameterError(
                f"{label}.plan",
                plan,
                "an object describing the investigation plan",
                [{"type": "literature_search", "description": "Systematic review"}],
            )
        if not isinstance(plan.get("type"), str) or not plan.get("type"):
            raise InvalidParameterError(
                f"{label}.plan.type",
                plan.get("type"),
                "a string describing the plan type",
                ["literature_search", "experimental_study", "data_analysis"],
            )
        result.plan = dict(plan)
    else:
        result.warn(f"Hypothesis {number} missing plan, adding default plan")

    if item.get("impact_score") is not None:
        score = coerce_number(item["impact_score"])
        if score is None or score < 0 or score > 1:
            raise InvalidParameterError(
                f"{label}.impact_score",
                item["impact_score"],
                "a number between 0 and 1 representing expected impact",
                [0.6, 0.8, 1.0],
            )
        result.impact_score = score

    lists: dict[str, FieldResult] = {}
    for key in ("disciplinary_tags", "attribution"):
        if item.get(key) is None:
            continue
        checked = check_string_list(item[key], f"{key} in hypothesis {number}")
        if not checked.ok:
            raise InvalidParameterError(
                f"{label}.{key}", item[key], "an array of strings", [["immunology", "dermatology"]]
            )
        lists[key] = checked
    resolved, notes = apply_defaults(lists, {})
    result.disciplinary_tags = resolved.get("disciplinary_tags")
    result.attribution = resolved.get("attribution")
    result.warnings.extend(notes)

    return result


# ─────────────────────────────────────────────────────────────────────────────
# Operation configs
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class GraphConfig:
    """Validated ``config`` argument of the initialize operation."""

    disciplinary_tags: list[str] | None = None
    attribution: list[str] | None = None
    enable_multi_layer: bool = True
    warnings: list[str] = field(default_factory=list)


def validate_config(config: Any) -> GraphConfig:
    """Validate the initialize-operation config object.

    Recognized keys are ``disciplinary_tags``, ``attribution`` and
    ``enable_multi_layer``; anything else is ignored. ``None`` is treated
    as an empty config.

    Raises:
        InvalidParameterError: If config is not a mapping, or a list key
            holds something other than an array.
    """
    if config is None:
        return GraphConfig()
    if not isinstance(config, Mapping):
        raise InvalidParameterError(
            "config",
            config,
            "an object with configuration properties",
            [{"disciplinary_tags": ["immunology", "dermatology"]}],
        )

    results: dict[str, FieldResult] = {}
    for key in ("disciplinary_tags", "attribution"):
        if config.get(key) is None:
            continue
        checked = check_string_list(config[key], key)
        if not checked.ok:
            raise InvalidParameterError(
                f"config.{key}",
                config[key],
                "an array of strings",
                [["immunology", "dermatology"], ["cardiology", "genetics"]],
            )
        results[key] = checked
    if "enable_multi_layer" in config:
        results["enable_multi_layer"] = check_flag(config["enable_multi_layer"], "enable_multi_layer")

    resolved, warnings = apply_defaults(results, {"enable_multi_layer": True})
    return GraphConfig(
        disciplinary_tags=resolved.get("disciplinary_tags"),
        attribution=resolved.get("attribution"),
        enable_multi_layer=resolved.get("enable_multi_layer", True),
        warnings=warnings,
    )


def validate_hypothesis_config(config: Any, default_max: int = MAX_HYPOTHESES) -> int:
    """Return the effective ``max_hypotheses`` for a generation call.

    Invalid values fall back to ``default_max`` with a warning. A call can
    only lower the limit: the result never exceeds ``default_max`` or
    MAX_HYPOTHESES.
    """
    limit = min(default_max, MAX_HYPOTHESES)
    if config is None:
        return limit
    if not isinstance(config, Mapping):
        logger.warning("Invalid hypothesis config: %r, using default limit %d", config, limit)
        return limit
    if config.get("max_hypotheses") is None:
        return limit
    raw = config["max_hypotheses"]
    number = coerce_number(raw)
    if number is None or number <= 0 or number > MAX_HYPOTHESES:
        logger.warning("Invalid max_hypotheses: %r, using default %d", raw, limit)
        return limit
    return min(limit, max(1, math.floor(number)))


__all__ = [
    "EXPORT_FORMATS",
    "FieldResult",
    "GraphConfig",
    "HypothesisInput",
    "apply_defaults",
    "check_flag",
    "check_string_list",
    "coerce_number",
    "validate_config",
    "validate_confidence",
    "validate_dimension_node_id",
    "validate_export_format",
    "validate_hypotheses",
    "validate_hypothesis",
    "validate_hypothesis_config",
    "validate_task_description",
]
