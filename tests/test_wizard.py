"""Tests for wizard step ordering and progress."""

import pytest

from fce import wizard


class TestAvailability:
    def test_first_step_always_available(self):
        assert wizard.is_step_available(1, []) is True

    def test_step_needs_predecessor(self):
        assert wizard.is_step_available(3, [1]) is False
        assert wizard.is_step_available(3, [1, 2]) is True

    def test_unknown_step(self):
        assert wizard.is_step_available(42, [1, 2, 3]) is False

    def test_next_available(self):
        assert wizard.next_available_step([]) == 1
        assert wizard.next_available_step([1, 2]) == 3
        assert wizard.next_available_step(wizard.STEP_IDS) is None


class TestCompleteStep:
    def test_adds_step(self):
        assert wizard.complete_step(2, [1]) == [1, 2]

    def test_idempotent(self):
        assert wizard.complete_step(2, [1, 2]) == [1, 2]

    def test_unavailable_raises(self):
        with pytest.raises(wizard.StepUnavailableError):
            wizard.complete_step(4, [1])

    def test_unknown_raises(self):
        with pytest.raises(wizard.StepUnavailableError):
            wizard.complete_step(10, list(wizard.STEP_IDS))


class TestProgress:
    def test_percent(self):
        assert wizard.progress_percent([]) == 0
        assert wizard.progress_percent([1, 2, 3]) == 33
        assert wizard.progress_percent([9]) == 100

    def test_normalize_drops_unknown_ids(self):
        assert wizard.normalize_completed([3, 1, 1, 99]) == [1, 3]

    def test_progress_shape(self):
        result = wizard.progress([1])
        assert result["completedSteps"] == [1]
        assert result["nextStep"] == 2
        assert result["percent"] == 11
        assert len(result["steps"]) == 9
        statuses = [s["status"] for s in result["steps"][:3]]
        assert statuses == ["completed", "in_progress", "pending"]
        assert result["steps"][1]["available"] is True
        assert result["steps"][2]["available"] is False

    def test_get_step(self):
        assert wizard.get_step(6).section == "testData"
        assert wizard.get_step(8).section is None
        assert wizard.get_step(0) is None
