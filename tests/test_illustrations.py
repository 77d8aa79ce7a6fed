"""Tests for the sample illustration lookup."""

from fce.illustrations import ILLUSTRATION_DIR, normalize_key, sample_illustrations
from test_types import registry


def _labels(key):
    return [ill.label for ill in sample_illustrations(key)]


class TestNormalizeKey:
    def test_free_text(self):
        assert normalize_key("  Grip (Position 2) ") == "grip-position-2"
        assert normalize_key("Push/Pull  Cart") == "push-pull-cart"
        assert normalize_key(None) == ""


class TestSampleIllustrations:
    def test_catalog_id(self):
        ills = sample_illustrations("walk")
        assert len(ills) == 1
        assert ills[0].to_dict() == {"src": f"{ILLUSTRATION_DIR}/MTM_Test_Battery_Walk.jpg", "label": "Walk"}

    def test_side_suffix_ignored(self):
        assert _labels("shoulder-rom-flexion-extension-left") == ["Shoulder Flex/Ext"]
        assert _labels("index-dip-flexion-extension-right") == ["Index DIP Flex/Ext"]

    def test_shared_images(self):
        assert _labels("hip-muscle-abduction") == ["Hip Muscle (1)", "Hip Muscle (2)", "Hip Muscle (3)"]
        assert _labels("hip-rom-abduction-adduction") == ["Hip ROM (1)", "Hip ROM (2)"]

    def test_cardio(self):
        assert _labels("ymca-submaximal-treadmill-test") == ["YMCA Submaximal Treadmill Test"]
        assert _labels("kasch-step-test") == ["Kasch Step"]

    def test_name_fallbacks(self):
        assert _labels("Grip Standard") == ["Standard Grip"]
        assert _labels("Grip Rapid") == ["Rapid Exchange Grip"]
        assert _labels("Pinch Palmer") == ["Palmar Pinch"]
        assert _labels("Dynamic Infrequent Lift (Overhead, occasional)") == ["Dynamic Infrequent Lift Overhead"]
        assert _labels("Cervical ROM") == ["Cervical Flex/Ext"]
        assert _labels("MTM Reach Overhead") == ["Reach Overhead"]
        assert _labels("Step Test") == ["mCAFT Step"]

    def test_unknown(self):
        assert sample_illustrations("typing speed") == []
        assert sample_illustrations(None) == []

    def test_every_catalog_test_illustrated(self):
        missing = [t.id for t in registry.all_tests() if not sample_illustrations(t.id)]
        assert missing == []


class TestDescribe:
    def test_illustrations_merged_with_detail(self):
        detail = registry.get("occupational").describe("fingering")
        assert detail["illustrations"][0]["label"] == "Fingering"
        assert detail["mtmConfig"]["number_of_reps"] == 10
