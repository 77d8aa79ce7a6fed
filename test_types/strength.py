from __future__ import annotations

from fce import categorization
from fce.norms import infer_norms
from test_types.base import BaseTestType, TestGroup, make_group

_LIFT_LEVELS = [("low", "Low"), ("mid", "Mid"), ("high", "High"), ("overhead", "Overhead")]


class StrengthHandler(BaseTestType):

    @property
    def test_type_id(self) -> str:
        return "strength"

    @property
    def display_name(self) -> str:
        return "Strength"

    @property
    def keywords(self) -> list[str]:
        return [
            "strength", "grip", "pinch", "hand strength", "muscle test",
            "static lift", "dynamic lift", "lift", "dynamometer",
        ]

    @property
    def category(self) -> str:
        return categorization.STRENGTH

    def groups(self) -> list[TestGroup]:
        return [
            make_group("hand-strength", "Hand Strength", [
                ("hand-strength-standard", "Standard"),
                ("hand-strength-rapid-exchange", "Rapid Exchange"),
                ("hand-strength-mve", "MVE"),
                ("hand-strength-mmve", "MMVE"),
            ]),
            make_group("pinch-strength", "Pinch Strength", [
                ("pinch-strength-key", "Key"),
                ("pinch-strength-tip", "Tip"),
                ("pinch-strength-palmar", "Palmar"),
                ("pinch-strength-grasp", "Grasp"),
            ]),
            make_group("muscle-test-cervical", "Cervical (Muscle Test)", [
                ("cervical-flexion-extension", "Flexion/Extension"),
                ("cervical-lateral-flexion", "Lateral Flexion"),
                ("cervical-30-rotation", "30° Rotation"),
                ("cervical-60-rotation", "60° Rotation"),
            ]),
            make_group("hip-muscle-test", "Hip (Muscle Test)", [
                ("hip-muscle-flexion", "Flexion"),
                ("hip-muscle-extension", "Extension"),
                ("hip-muscle-abduction", "Abduction"),
                ("hip-muscle-adduction", "Adduction"),
                ("hip-muscle-external-rotation", "External Rotation"),
                ("hip-muscle-internal-rotation", "Internal Rotation"),
            ]),
            make_group("shoulder-muscle-test", "Shoulder (Muscle Test)", [
                ("shoulder-muscle-flexion", "Flexion"),
                ("shoulder-muscle-extension", "Extension"),
                ("shoulder-muscle-abduction", "Abduction"),
                ("shoulder-muscle-adduction", "Adduction"),
                ("shoulder-muscle-internal-rotation", "Internal Rotation"),
                ("shoulder-muscle-external-rotation", "External Rotation"),
            ]),
            make_group("wrist-muscle-test", "Wrist (Muscle Test)", [
                ("wrist-muscle-flexion", "Palmar Flexion"),
                ("wrist-muscle-extension", "Dorsiflexion"),
                ("wrist-muscle-radial-deviation", "Radial Deviation"),
                ("wrist-muscle-ulnar-deviation", "Ulnar Deviation"),
            ]),
            make_group("ankle-muscle-test", "Ankle (Muscle Test)", [
                ("ankle-muscle-dorsiflexion", "Dorsiflexion"),
                ("ankle-muscle-plantar-flexion", "Plantar Flexion"),
                ("ankle-muscle-eversion", "Eversion"),
                ("ankle-muscle-inversion", "Inversion"),
            ]),
            make_group("knee-muscle-test", "Knee (Muscle Test)", [
                ("knee-muscle-flexion", "Flexion"),
                ("knee-muscle-extension", "Extension"),
            ]),
            make_group("elbow-muscle-test", "Elbow (Muscle Test)", [
                ("elbow-muscle-flexion", "Flexion"),
                ("elbow-muscle-extension", "Extension"),
            ]),
            make_group("static-lift", "Static Lift", [
                ("static-lift-low", "Low"),
                ("static-lift-mid", "Mid"),
                ("static-lift-high", "High"),
            ]),
            make_group("dynamic-lift", "Dynamic Frequent Lift", [
                (f"dynamic-lift-{lvl}", name) for lvl, name in _LIFT_LEVELS
            ]),
            make_group("dynamic-infrequent-lift", "Dynamic Infrequent Lift (Occasional)", [
                (f"dynamic-infrequent-lift-{lvl}", name) for lvl, name in _LIFT_LEVELS
            ]),
        ]

    def describe_test(self, test_id: str) -> dict:
        test = self.get_test(test_id)
        if test is None:
            return {}
        norms = infer_norms(f"{test.id} {test.group_name} {test.name}")
        return {"norms": {"unit": norms.unit, "left": norms.left, "right": norms.right}}
