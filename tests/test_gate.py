"""Unit tests for the dependency gate."""

from itertools import product

import pytest

from vfpipe.exceptions import DependencyViolationError, ValidationError
from vfpipe.models import PipelineComponent
from vfpipe.services.pipeline.gate import can_run, ensure_can_run, first_blocking_index

from tests.conftest import make_components


def _with_flags(flags: tuple[bool, ...]) -> list[PipelineComponent]:
    return [
        PipelineComponent(title=f"c{i}", path=f"{i:03d}-c", executed=flag)
        for i, flag in enumerate(flags)
    ]


class TestCanRun:
    """Tests for can_run."""

    def test_first_component_always_runs(self):
        assert can_run(make_components(3), 0) is True

    def test_blocked_by_unexecuted_predecessor(self):
        assert can_run(make_components(3), 2) is False

    def test_allowed_after_predecessors_executed(self):
        assert can_run(make_components(3, executed=2), 2) is True

    def test_own_flag_does_not_matter(self):
        """An executed component may be run again."""
        assert can_run(make_components(3, executed=3), 1) is True

    @pytest.mark.parametrize("length", range(5))
    def test_matches_all_predecessors_executed(self, length):
        """can_run(C, i) holds exactly when every C[j < i] is executed."""
        for flags in product([False, True], repeat=length):
            components = _with_flags(flags)
            for index in range(length):
                assert can_run(components, index) == all(flags[:index])


class TestEnsureCanRun:
    """Tests for ensure_can_run."""

    def test_names_first_blocking_component(self):
        components = make_components(4, executed=1)
        with pytest.raises(DependencyViolationError) as exc_info:
            ensure_can_run(components, 3)

        assert exc_info.value.index == 3
        assert exc_info.value.blocking_index == 1
        assert exc_info.value.blocking_path == "002-step"
        assert "Run previous component(s) first" in str(exc_info.value)

    @pytest.mark.parametrize("index", [-1, 3])
    def test_out_of_range_index(self, index):
        with pytest.raises(ValidationError):
            ensure_can_run(make_components(3, executed=3), index)

    def test_first_blocking_index_none_when_clear(self):
        assert first_blocking_index(make_components(2, executed=2), 2) is None
