"""Tests for the protocol test catalog and its registry."""

from test_types import registry
from test_types.base import ProtocolTest, make_group, side_groups
from test_types.occupational import OccupationalHandler


class TestRegistry:
    def test_registration_order(self):
        ids = [meta["test_type_id"] for meta in registry.list_types()]
        assert ids == ["strength", "rom-spine", "rom-hand", "occupational", "cardio"]

    def test_metadata_counts(self):
        for meta in registry.list_types():
            assert meta["test_count"] > 0
            assert meta["category"]

    def test_resolve_by_id(self):
        type_id, handler = registry.resolve("cardio")
        assert type_id == "cardio"
        assert handler is registry.get("cardio")

    def test_resolve_by_keyword(self):
        type_id, _ = registry.resolve("Methods-Time Measurement")
        assert type_id == "occupational"

    def test_resolve_unknown(self):
        assert registry.resolve("zzzz") == (None, None)

    def test_find_test(self):
        test, handler = registry.find_test("fingering")
        assert test.name == "Fingering"
        assert isinstance(handler, OccupationalHandler)
        assert registry.find_test("nope") == (None, None)

    def test_test_ids_unique(self):
        ids = [t.id for t in registry.all_tests()]
        assert len(ids) == len(set(ids))


class TestCleanProtocolSelection:
    def test_drops_legacy_unknown_and_duplicates(self):
        cleaned = registry.clean_protocol_selection([
            "fingering",
            "cervical-anterior-obliques",
            "dynamic-lift-frequent",
            "mcafi-step",
            "not-a-test",
            "fingering",
            "walk",
            7,
        ])
        assert cleaned == ["fingering", "walk"]

    def test_none(self):
        assert registry.clean_protocol_selection(None) == []


class TestHandlers:
    def test_mtm_config(self):
        handler = registry.get("occupational")
        config = handler.mtm_config("fingering")
        assert config.number_of_trials == 3
        assert config.number_of_reps == 10
        assert config.position == "Standing"
        assert handler.mtm_config("grip") is None

    def test_mtm_config_dict_drops_none(self):
        data = registry.get("occupational").describe_test("push-pull-cart")["mtmConfig"]
        assert data["weight_options"] == [40, 50, 60]
        assert "plane" not in data

    def test_cardio_describe(self):
        detail = registry.get("cardio").describe_test("mcaft-step-test")
        assert detail == {"cardioKind": "mcaft", "scoringInputs": ["lastCompletedStage"]}
        assert registry.get("cardio").describe_test("nope") == {}

    def test_rom_side_ids(self):
        test, handler = registry.find_test("shoulder-rom-flexion-extension-left")
        assert handler.test_type_id == "rom-spine"
        assert test.side == "left"
        detail = handler.describe_test(test.id)
        assert detail["baseId"] == "shoulder-rom-flexion-extension"


class TestBase:
    def test_protocol_test_to_dict(self):
        test = ProtocolTest("walk", "Walk", "mtm", "MTM")
        assert test.to_dict() == {
            "id": "walk", "name": "Walk", "groupId": "mtm", "groupName": "MTM", "side": None,
        }

    def test_make_group(self):
        group = make_group("g", "Group", [("a", "A"), ("b", "B")])
        assert [t.id for t in group.tests] == ["a", "b"]
        assert group.tests[0].group_name == "Group"

    def test_side_groups(self):
        left, right = side_groups("knee", "Knee", [("knee-flex", "Flexion")])
        assert left.name == "Left Side - Knee"
        assert right.tests[0].id == "knee-flex-right"
        assert right.tests[0].side == "right"
