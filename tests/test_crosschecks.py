"""Tests for consistency crosschecks."""

from fce.crosschecks import (
    DISTRACTION_QUESTION_KEY,
    Crosscheck,
    check_marks,
    compute_crosschecks,
)


def _grip(name: str, left: float, right: float) -> dict:
    return {
        "testName": name,
        "leftMeasurements": {"trial1": left, "trial2": left, "trial3": left},
        "rightMeasurements": {"trial1": right, "trial2": right, "trial3": right},
    }


def _by_name(checks: list[Crosscheck]) -> dict[str, Crosscheck]:
    return {c.name: c for c in checks}


class TestNoTests:
    def test_all_not_applicable(self):
        checks = compute_crosschecks([])
        assert len(checks) == 8
        assert checks[-1].name == "Coefficient of Variation (CV)"
        assert all(not c.applicable for c in checks)
        assert all(c.passed is None for c in checks)


class TestGripChecks:
    def test_symmetric_grip(self):
        checks = _by_name(compute_crosschecks([_grip("Grip Position 2", 100, 105)]))
        assert checks["Hand grip MVE"].passed is True
        assert checks["Hand grip rapid exchange"].applicable is False
        assert checks["Test/retest trial consistency"].passed is True
        assert checks["Dominant side monitoring"].passed is True
        assert checks["Coefficient of Variation (CV)"].passed is True

    def test_large_bilateral_difference_fails_mve(self):
        checks = _by_name(compute_crosschecks([_grip("Grip Position 2", 50, 100)]))
        assert checks["Hand grip MVE"].passed is False
        assert checks["Dominant side monitoring"].passed is False

    def test_rapid_exchange_below_standard(self):
        checks = _by_name(compute_crosschecks([
            _grip("Grip Position 2", 100, 105),
            _grip("Rapid Exchange Grip", 80, 80),
        ]))
        assert checks["Hand grip rapid exchange"].passed is True
        assert checks["Hand grip rapid exchange"].applicable is True


class TestLiftAndRom:
    def test_dynamic_lift_heart_rate(self):
        lift = {
            "testName": "Dynamic Lift Low",
            "leftMeasurements": {"trial1": 20, "preHeartRate": 80, "postHeartRate": 95},
        }
        checks = _by_name(compute_crosschecks([lift]))
        assert checks["Dynamic lift HR fluctuation"].passed is True

    def test_rom_needs_six_trials(self):
        rom = {
            "testName": "Lumbar Flexion",
            "leftMeasurements": {"trial1": 50, "trial2": 51, "trial3": 52},
        }
        checks = _by_name(compute_crosschecks([rom]))
        assert checks["ROM consistency check"].passed is False

    def test_rom_consistent_window(self):
        rom = {
            "testName": "Lumbar Flexion",
            "leftMeasurements": {"trial1": 50, "trial2": 51, "trial3": 52},
            "rightMeasurements": {"trial1": 20, "trial2": 21, "trial3": 22},
        }
        checks = _by_name(compute_crosschecks([rom]))
        assert checks["ROM consistency check"].passed is True


class TestReferralChecks:
    def test_distraction_answer_adds_check(self):
        referral = {"questions": [{"question": DISTRACTION_QUESTION_KEY, "answer": "PASS|consistent"}]}
        checks = compute_crosschecks([_grip("Grip Position 2", 100, 100)], referral)
        assert len(checks) == 9
        assert _by_name(checks)["Distraction test consistency"].passed is True

    def test_fail_answer(self):
        referral = {"questions": [{"question": DISTRACTION_QUESTION_KEY, "answer": "FAIL|"}]}
        checks = _by_name(compute_crosschecks([], referral))
        assert checks["Distraction test consistency"].passed is False


class TestMarks:
    def test_marks(self):
        assert check_marks(Crosscheck("a", "", None, False)) == ("N/A", "N/A")
        assert check_marks(Crosscheck("a", "", True, True)) == ("✓", "")
        assert check_marks(Crosscheck("a", "", False, True)) == ("", "✓")

    def test_to_dict_uses_pass_key(self):
        data = Crosscheck("a", "b", True, True).to_dict()
        assert data == {"name": "a", "description": "b", "pass": True, "applicable": True}
