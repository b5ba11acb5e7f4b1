"""Validation module - Parameter checks and the error taxonomy.

Provides validators for every caller-supplied value and the typed
exceptions raised by graph operations.
"""

from questgraph.validation.errors import (
    HypothesisBatchError,
    InvalidParameterError,
    MissingNodeError,
    QuestGraphError,
    WrongStageError,
)
from questgraph.validation.params import (
    EXPORT_FORMATS,
    FieldResult,
    GraphConfig,
    HypothesisInput,
    apply_defaults,
    validate_config,
    validate_confidence,
    validate_dimension_node_id,
    validate_export_format,
    validate_hypotheses,
    validate_hypothesis,
    validate_hypothesis_config,
    validate_task_description,
)

__all__ = [
    "EXPORT_FORMATS",
    "FieldResult",
    "GraphConfig",
    "HypothesisBatchError",
    "HypothesisInput",
    "InvalidParameterError",
    "MissingNodeError",
    "QuestGraphError",
    "WrongStageError",
    "apply_defaults",
    "validate_config",
    "validate_confidence",
    "validate_dimension_node_id",
    "validate_export_format",
    "validate_hypotheses",
    "validate_hypothesis",
    "validate_hypothesis_config",
    "validate_task_description",
]
