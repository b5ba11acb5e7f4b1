"""Stage controller - The ordered stages a research graph moves through.

The stage cursor is a Stage value. Each operation has exactly one
allowed transition in TRANSITIONS; the guard and every display of stage
names read from this module.
"""

from __future__ import annotations

from enum import IntEnum

from questgraph.validation.errors import WrongStageError


class Stage(IntEnum):
    """Stage cursor values. EMPTY means not yet initialized."""

    EMPTY = 0
    INITIALIZATION = 1
    DECOMPOSITION = 2
    HYPOTHESIS_PLANNING = 3
    EVIDENCE_INTEGRATION = 4
    PRUNING_MERGING = 5
    SUBGRAPH_EXTRACTION = 6
    COMPOSITION = 7
    REFLECTION = 8

    @property
    def stage_name(self) -> str:
        """Display name of the last completed stage."""
        if self is Stage.EMPTY:
            return "pre-initialization"
        return self.name.lower()


# operation -> (required current stage, stage after success)
TRANSITIONS: dict[str, tuple[Stage, Stage]] = {
    "initialize": (Stage.EMPTY, Stage.INITIALIZATION),
    "decompose": (Stage.INITIALIZATION, Stage.DECOMPOSITION),
    "generate hypotheses": (Stage.DECOMPOSITION, Stage.HYPOTHESIS_PLANNING),
    # Named for later stages; no built-in operation drives them yet.
    "integrate evidence": (Stage.HYPOTHESIS_PLANNING, Stage.EVIDENCE_INTEGRATION),
    "prune and merge": (Stage.EVIDENCE_INTEGRATION, Stage.PRUNING_MERGING),
    "extract subgraphs": (Stage.PRUNING_MERGING, Stage.SUBGRAPH_EXTRACTION),
    "compose": (Stage.SUBGRAPH_EXTRACTION, Stage.COMPOSITION),
    "reflect": (Stage.COMPOSITION, Stage.REFLECTION),
}

COMPLETED_STAGES = tuple(s for s in Stage if s is not Stage.EMPTY)


def require_stage(current: Stage, operation: str) -> Stage:
    """Check that ``operation`` may run at ``current``.

    Args:
        current: The graph's stage cursor.
        operation: Key into TRANSITIONS.

    Returns:
        The stage to set once the operation has finished mutating.

    Raises:
        WrongStageError: If the cursor is not the operation's required stage.
        KeyError: If the operation is unknown.
    """
    expected, target = TRANSITIONS[operation]
    if current != expected:
        raise WrongStageError(operation, int(current), int(expected))
    return target


def stage_progression(current: Stage) -> dict[str, str]:
    """Map ``stage_<n>`` to ``completed`` or ``pending``."""
    return {
        f"stage_{int(s)}": "completed" if current >= s else "pending" for s in COMPLETED_STAGES
    }


def completed_stage_names(current: Stage) -> list[str]:
    return [s.stage_name for s in COMPLETED_STAGES if s <= current]


__all__ = [
    "COMPLETED_STAGES",
    "Stage",
    "TRANSITIONS",
    "completed_stage_names",
    "require_stage",
    "stage_progression",
]
