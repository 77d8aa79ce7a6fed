"""Tests for trial arithmetic and normative values."""

import pytest

from fce import stats
from fce.norms import infer_norms, rom_norm


class TestCoercion:
    def test_round_half_up(self):
        assert stats.round_half_up(2.5) == 3
        assert stats.round_half_up(-2.5) == -3
        assert stats.round_half_up(0.125, 2) == pytest.approx(0.13)

    def test_to_number(self):
        assert stats.to_number(12) == 12.0
        assert stats.to_number("12 lbs") == 12.0
        assert stats.to_number("abc") is None
        assert stats.to_number("") is None
        assert stats.to_number(True) is None
        assert stats.to_number(float("nan")) is None

    def test_read_trials_mixed_keys(self):
        assert stats.read_trials({"trial1": 10, "t2": "20", "3": 30}) == [10.0, 20.0, 30.0]

    def test_read_trials_list(self):
        assert stats.read_trials([1, "x", 3]) == [1.0, None, 3.0]

    def test_read_trials_empty(self):
        assert stats.read_trials(None) == []
        assert stats.read_trials("junk") == []


class TestTrialStatistics:
    def test_average_ignores_blank_and_zero(self):
        assert stats.average({"trial1": 10, "trial2": 20, "trial3": 0, "trial4": ""}) == 15.0

    def test_average_empty(self):
        assert stats.average({}) == 0
        assert stats.average(None) == 0

    def test_coefficient_of_variation(self):
        # mean 15, population std 5
        assert stats.coefficient_of_variation({"trial1": 10, "trial2": 20}) == pytest.approx(33.33)

    def test_report_cv_needs_two_trials(self):
        assert stats.report_cv({"trial1": 10}) == 0
        assert stats.report_cv({"trial1": 10, "trial2": 20}) == 33

    def test_report_cv_skips_zero_trials(self):
        assert stats.report_cv({"trial1": 10, "trial2": 0}) == 0
        assert stats.report_cv({"trial1": 10, "trial2": 0, "trial3": 20}) == 33

    def test_list_measurements(self):
        assert stats.as_measurements([10, 20]) == {"trial1": 10, "trial2": 20}
        assert stats.as_measurements("oops") == {}
        assert stats.average([10, 20]) == 15.0
        assert stats.report_cv([10, 20]) == 33

    def test_bilateral_deficiency_is_directional(self):
        left = {"trial1": 10}
        right = {"trial1": 20}
        assert stats.bilateral_deficiency(left, right) == 50.0
        assert stats.bilateral_deficiency(right, left) == 0

    def test_report_bilateral_deficiency(self):
        assert stats.report_bilateral_deficiency(80, 100) == 20
        assert stats.report_bilateral_deficiency(100, 80) == 20
        assert stats.report_bilateral_deficiency(0, 100) == 0

    def test_percent_of_norm(self):
        assert stats.percent_of_norm(50, 100) == 50.0
        assert stats.percent_of_norm(50, 0) == 0
        assert stats.percent_of_norm(None, 100) == 0


class TestSummarizeTest:
    def test_grip_summary(self):
        summary = stats.summarize_test({
            "testId": "grip-position-2",
            "testName": "Grip Position 2",
            "leftMeasurements": {"trial1": 80, "trial2": 80, "trial3": 80},
            "rightMeasurements": {"trial1": 100, "trial2": 100, "trial3": 100},
        })
        assert summary["left_average"] == 80
        assert summary["right_average"] == 100
        assert summary["left_report_cv"] == 0
        assert summary["left_deficiency"] == 20.0
        assert summary["right_deficiency"] == 0
        assert summary["bilateral_deficiency"] == 20
        assert summary["unit"] == "lb"
        assert summary["left_norm"] == 110.5
        assert summary["right_norm"] == 120.8

    def test_falls_back_to_target_value(self):
        summary = stats.summarize_test({
            "testName": "Static Lift",
            "valueToBeTestedNumber": "50",
            "leftMeasurements": {"trial1": 25},
        })
        assert summary["left_norm"] == 50.0
        assert summary["left_percent_of_norm"] == 50.0

    def test_list_measurements(self):
        summary = stats.summarize_test({
            "testName": "Grip Position 2",
            "leftMeasurements": [10, 20],
            "rightMeasurements": "n/a",
        })
        assert summary["left_average"] == 15.0
        assert summary["left_report_cv"] == 33
        assert summary["right_average"] == 0


class TestNorms:
    def test_cardio_before_rom(self):
        assert infer_norms("Bruce Treadmill").kind == "cardio"

    def test_pinch_palmar_is_strength(self):
        info = infer_norms("Pinch Strength Palmar")
        assert info.kind == "strength"
        assert info.left == 85.0

    def test_rom_norm(self):
        info = infer_norms("Shoulder Flexion")
        assert info.unit == "deg"
        assert info.left == 180

    def test_unknown_rom_joint(self):
        assert rom_norm("Toe Flexion") is None

    def test_empty_name(self):
        assert infer_norms("").kind == "other"
