"""Tests for the stage cursor, transition table and stage log."""

import pytest

from questgraph.graph.mutations import StageLog, StageTransition
from questgraph.graph.stages import (
    COMPLETED_STAGES,
    TRANSITIONS,
    Stage,
    completed_stage_names,
    require_stage,
    stage_progression,
)
from questgraph.validation.errors import WrongStageError


class TestStage:
    def test_values_span_empty_to_reflection(self):
        assert [int(s) for s in Stage] == list(range(9))

    def test_empty_stage_name(self):
        assert Stage.EMPTY.stage_name == "pre-initialization"

    def test_completed_stage_names(self):
        assert Stage.HYPOTHESIS_PLANNING.stage_name == "hypothesis_planning"
        assert Stage.REFLECTION.stage_name == "reflection"

    def test_completed_stages_exclude_empty(self):
        assert Stage.EMPTY not in COMPLETED_STAGES
        assert len(COMPLETED_STAGES) == 8


class TestTransitions:
    def test_each_transition_advances_by_one(self):
        for operation, (required, target) in TRANSITIONS.items():
            assert int(target) == int(required) + 1, operation

    @pytest.mark.parametrize(
        "operation, current, target",
        [
            ("initialize", Stage.EMPTY, Stage.INITIALIZATION),
            ("decompose", Stage.INITIALIZATION, Stage.DECOMPOSITION),
            ("generate hypotheses", Stage.DECOMPOSITION, Stage.HYPOTHESIS_PLANNING),
        ],
    )
    def test_require_stage_returns_target(self, operation, current, target):
        assert require_stage(current, operation) is target

    def test_wrong_stage_names_current_and_expected(self):
        with pytest.raises(WrongStageError) as exc_info:
            require_stage(Stage.EMPTY, "decompose")

        assert exc_info.value.current == 0
        assert exc_info.value.expected == 1
        assert "Current stage: 0, expected: 1" in str(exc_info.value)

    def test_unknown_operation(self):
        with pytest.raises(KeyError):
            require_stage(Stage.EMPTY, "teleport")


class TestProgression:
    def test_after_decomposition(self):
        progression = stage_progression(Stage.DECOMPOSITION)

        assert progression["stage_1"] == "completed"
        assert progression["stage_2"] == "completed"
        assert progression["stage_3"] == "pending"
        assert list(progression) == [f"stage_{i}" for i in range(1, 9)]

    def test_empty_is_all_pending(self):
        assert set(stage_progression(Stage.EMPTY).values()) == {"pending"}

    def test_completed_names(self):
        assert completed_stage_names(Stage.DECOMPOSITION) == ["initialization", "decomposition"]
        assert completed_stage_names(Stage.EMPTY) == []


class TestStageLog:
    def test_append_and_iterate(self):
        log = StageLog()
        first = StageTransition(operation="initialize", from_stage=0, to_stage=1)
        second = StageTransition(operation="decompose", from_stage=1, to_stage=2)

        log.append(first)
        log.append(second)

        assert len(log) == 2
        assert list(log.iter_entries()) == [first, second]

    def test_clear(self):
        log = StageLog()
        log.append(StageTransition(operation="initialize", from_stage=0, to_stage=1))

        log.clear()

        assert len(log) == 0
        assert list(log.iter_entries()) == []

    def test_transition_to_dict(self):
        entry = StageTransition(
            operation="generate hypotheses",
            from_stage=2,
            to_stage=3,
            node_ids=["3.1.1"],
            errors=["Hypothesis 2: bad"],
        )

        data = entry.to_dict()

        assert data["operation"] == "generate hypotheses"
        assert data["node_ids"] == ["3.1.1"]
        assert data["errors"] == ["Hypothesis 2: bad"]
        assert data["warnings"] == []
        assert len(data["id"]) == 32
        assert "T" in data["timestamp"]

    def test_str(self):
        entry = StageTransition(operation="decompose", from_stage=1, to_stage=2)

        assert str(entry).endswith("decompose(1->2)")
