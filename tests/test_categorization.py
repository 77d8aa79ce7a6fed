"""Tests for report categories and ROM label inference."""

from fce import categorization as cat
from fce import rom


class TestCategorizeTest:
    def test_missing_test_is_strength(self):
        assert cat.categorize_test(None) == cat.STRENGTH

    def test_explicit_category_wins(self):
        assert cat.categorize_test({"category": cat.CARDIO, "testId": "grip"}) == cat.CARDIO

    def test_cardio(self):
        assert cat.categorize_test({"testId": "bruce-treadmill", "testName": "Bruce Treadmill"}) == cat.CARDIO

    def test_occupational(self):
        assert cat.categorize_test({"testId": "fingering", "testName": "Fingering"}) == cat.OCCUPATIONAL

    def test_hand_foot_rom(self):
        test = {"testId": "wrist-flexion-extension-rom-left", "testName": "Wrist Flexion/Extension"}
        assert cat.categorize_test(test) == cat.ROM_HAND_FOOT

    def test_extremity_rom(self):
        test = {"testId": "shoulder-rom-flexion-left", "testName": "Shoulder Flexion"}
        assert cat.categorize_test(test) == cat.ROM_SPINE_EXTREMITY

    def test_wrist_muscle_test_is_strength(self):
        test = {"testId": "wrist-muscle-flexion", "testName": "Wrist Flexion Strength"}
        assert cat.categorize_test(test) == cat.STRENGTH

    def test_cervical_muscle_test_is_strength(self):
        assert cat.categorize_test({"testId": "cervical-flexion", "testName": "Cervical Flexion"}) == cat.STRENGTH

    def test_grip(self):
        assert cat.categorize_test({"testId": "grip-position-2", "testName": "Grip Position 2"}) == cat.STRENGTH


class TestGrouping:
    def test_all_sections_present(self):
        grouped = cat.group_tests_by_category([{"testId": "fingering"}])
        assert list(grouped) == cat.categories_in_order()
        assert len(grouped[cat.OCCUPATIONAL]) == 1

    def test_non_list_input(self):
        grouped = cat.group_tests_by_category(None)
        assert all(v == [] for v in grouped.values())


class TestFadCategory:
    def test_by_name(self):
        assert cat.fad_category({"testName": "Step Test"}) == cat.CARDIO
        assert cat.fad_category({"testName": "Hand Flexion"}) == cat.ROM_HAND_FOOT
        assert cat.fad_category({"testName": "Cervical Extension"}) == cat.ROM_SPINE_EXTREMITY
        assert cat.fad_category({"testName": "Kneel"}) == cat.OCCUPATIONAL
        assert cat.fad_category({"testName": "Grip"}) == cat.STRENGTH


class TestRomPairing:
    def test_paired_ids(self):
        assert rom.is_paired_rom_test("shoulder-rom-left") is True
        assert rom.is_paired_rom_test("grip") is False
        assert rom.is_paired_rom_test(None) is False

    def test_side_helpers(self):
        assert rom.base_rom_test_id("shoulder-rom-left") == "shoulder-rom"
        assert rom.side_from_test_id("hip-rom-Right") == "right"
        assert rom.side_from_test_id("grip") is None

    def test_movements(self):
        assert rom.movements_from_rom_test("wrist-flexion-extension-rom") == ["flexion", "extension"]

    def test_format_with_side_replaces_prefix(self):
        assert rom.format_rom_test_with_side("Left Side - Shoulder Flexion", "right") == \
            "Right Side - Shoulder Flexion"

    def test_motion_labels(self):
        assert rom.full_motion_labels("wrist-flexion-extension-rom-left") == ("Flexion", "Extension")
        assert rom.paired_motion_labels("wrist-flexion-extension-rom-left") == ("F", "E")
        assert rom.motion_labels(None, "Grip") is None


class TestAreaLabels:
    def test_body_part(self):
        assert rom.extract_body_part("Lumbar - Flexion/Extension") == "Lumbar"

    def test_sided_labels(self):
        labels = rom.full_area_evaluated_labels(
            "Shoulder Flexion/Extension", "shoulder-flexion-extension-rom-left",
        )
        assert labels == ("Shoulder Flexion", "Shoulder Extension")

    def test_cervical_rotation(self):
        assert rom.full_area_evaluated_labels("Cervical Rotation", "cervical-spine-rotation") == (
            "Left Side Cervical Rotation", "Right Side Cervical Rotation",
        )

    def test_no_pair(self):
        assert rom.full_area_evaluated_labels("Grip", "grip") is None


class TestLumbarRows:
    def test_rows(self):
        rows = rom.lumbar_motion_rows([{
            "testId": "lumbar-spine-flexion-extension",
            "testName": "Lumbar Flexion/Extension",
            "leftMeasurements": {"trial1": 60, "trial2": 60, "trial3": 60},
            "rightMeasurements": {},
        }])
        assert len(rows) == 4
        assert rows[0] == {"area": "Lumbar Flexion", "data": "60°", "valid": "Pass", "norm": "60°", "percent": "100%"}
        assert rows[1]["data"] == "N/A"
        assert rows[2]["norm"] == "25°"

    def test_spread_trials_fail(self):
        # mean 60, population std about 32.7
        rows = rom.lumbar_motion_rows([{
            "testId": "lumbar-spine-flexion-extension",
            "testName": "Lumbar Flexion/Extension",
            "leftMeasurements": {"trial1": 20, "trial2": 60, "trial3": 100},
            "rightMeasurements": {"trial1": 20, "trial2": 21, "trial3": 22},
        }])
        assert rows[0]["data"] == "60°"
        assert rows[0]["valid"] == "Fail"
        assert rows[1] == {"area": "Lumbar Extension", "data": "21°", "valid": "Pass", "norm": "25°", "percent": "84%"}

    def test_lateral_flexion(self):
        rows = rom.lumbar_motion_rows([{
            "testId": "lumbar-spine-lateral-flexion",
            "testName": "Lumbar Lateral Flexion",
            "leftMeasurements": {"trial1": 20, "trial2": 20, "trial3": 20},
            "rightMeasurements": [25, 25, 25],
        }])
        assert rows[0]["data"] == "N/A"
        assert rows[2] == {"area": "Lateral Flexion - Left", "data": "20°", "valid": "Pass", "norm": "25°", "percent": "80%"}
        assert rows[3] == {"area": "Lateral Flexion - Right", "data": "25°", "valid": "Pass", "norm": "25°", "percent": "100%"}
