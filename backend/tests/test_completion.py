"""Test cases for module/course completion arithmetic."""

import pytest

from lms.completion import (
    course_completion, is_module_complete, module_completion, reached_milestones, round_half_up,
)


class TestModuleCompletion:
    """Test cases for module_completion()."""

    def test_zero_units_is_zero(self):
        assert module_completion([], [], set(), set()) == 0

    def test_all_units_complete(self):
        assert module_completion(["r1", "r2"], ["a1"], {"r1", "r2"}, {"a1"}) == 100

    def test_no_units_complete(self):
        assert module_completion(["r1", "r2"], ["a1"], set(), set()) == 0

    def test_two_of_three_units(self):
        """One resource viewed and the assessment submitted: round(200/3) = 67."""
        assert module_completion(["r1", "r2"], ["a1"], {"r1"}, {"a1"}) == 67

    def test_accepts_rows_and_dicts(self):
        class Row:
            def __init__(self, id):
                self.id = id

        resources = [Row("r1"), {"id": "r2"}]
        assert module_completion(resources, [{"id": "a1"}], {"r2"}, set()) == 33

    def test_ids_from_other_modules_ignored(self):
        assert module_completion(["r1"], [], {"r1", "elsewhere"}, {"a9"}) == 100

    def test_assessment_ids_do_not_complete_resources(self):
        assert module_completion(["x"], [], set(), {"x"}) == 0


class TestCourseCompletion:
    """Test cases for course_completion()."""

    def test_mean_of_modules(self):
        assert course_completion([100, 50]) == 75

    def test_zero_unit_modules_pull_average_down(self):
        assert course_completion([100, 0]) == 50

    def test_no_modules(self):
        assert course_completion([]) == 0

    def test_half_rounds_up(self):
        assert course_completion([67, 0]) == 34


class TestMilestones:
    """Test cases for milestone thresholds."""

    @pytest.mark.parametrize("pct,expected", [
        (0, []),
        (49, []),
        (50, [50]),
        (74, [50]),
        (75, [50, 75]),
        (100, [50, 75, 100]),
    ])
    def test_reached_milestones(self, pct, expected):
        assert reached_milestones(pct) == expected

    def test_module_complete_only_at_100(self):
        assert is_module_complete(100) is True
        assert is_module_complete(99) is False


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(66.666) == 67
    assert round_half_up(0.49) == 0
