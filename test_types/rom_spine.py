from __future__ import annotations

from fce import categorization
from fce.norms import rom_norm
from fce.rom import base_rom_test_id, motion_labels
from test_types.base import BaseTestType, TestGroup, make_group, side_groups

_EXTREMITIES: list[tuple[str, str, list[tuple[str, str]]]] = [
    ("extremity-elbow", "Extremity Elbow (ROM)", [
        ("elbow-rom-flexion-extension", "Extremity Elbow Flexion/Extension"),
        ("elbow-rom-supination-pronation", "Extremity Elbow Supination/Pronation"),
    ]),
    ("extremity-wrist", "Extremity Wrist (ROM)", [
        ("wrist-rom-flexion-extension", "Extremity Wrist Flexion/Extension"),
        ("wrist-rom-radial-ulnar-deviation", "Extremity Wrist Radial/Ulnar Deviation"),
    ]),
    ("extremity-knee", "Extremity Knee (ROM)", [
        ("knee-rom-flexion-extension", "Extremity Knee Flexion/Extension"),
    ]),
    ("extremity-shoulder", "Extremity Shoulder (ROM)", [
        ("shoulder-rom-flexion-extension", "Extremity Shoulder Flexion/Extension"),
        ("shoulder-rom-internal-external-rotation", "Extremity Shoulder Internal/External Rotation"),
        ("shoulder-rom-abduction-adduction", "Extremity Shoulder Abduction/Adduction"),
    ]),
    ("extremity-hip", "Extremity Hip (ROM)", [
        ("hip-rom-flexion-extension", "Extremity Hip Flexion/Extension"),
        ("hip-rom-internal-external-rotation", "Extremity Hip Internal/External Rotation"),
        ("hip-rom-abduction-adduction", "Extremity Hip Abduction/Adduction"),
    ]),
    ("extremity-ankle", "Extremity Ankle (ROM)", [
        ("ankle-rom-dorsi-plantar-flexion", "Extremity Ankle Dorsi/Plantar Flexion"),
        ("ankle-rom-inversion-eversion", "Extremity Ankle Inversion/Eversion"),
    ]),
]


class RomSpineExtremityHandler(BaseTestType):

    @property
    def test_type_id(self) -> str:
        return "rom-spine"

    @property
    def display_name(self) -> str:
        return "Range Of Motion Total Spine/Extremity"

    @property
    def keywords(self) -> list[str]:
        return [
            "range of motion", "rom", "total spine", "spine", "extremity",
            "cervical", "lumbar", "thoracic", "inclinometer",
        ]

    @property
    def category(self) -> str:
        return categorization.ROM_SPINE_EXTREMITY

    def groups(self) -> list[TestGroup]:
        groups = [
            make_group("cervical-total-spine", "Cervical (Total Spine ROM)", [
                ("cervical-spine-flexion-extension", "Flexion/Extension"),
                ("cervical-spine-lateral-flexion", "Lateral Flexion"),
                ("cervical-spine-rotation", "Rotation"),
            ]),
            make_group("lumbar-total-spine", "Lumbar (Total Spine ROM)", [
                ("lumbar-spine-flexion-extension", "Flexion/Extension"),
                ("lumbar-spine-lateral-flexion", "Lateral Flexion"),
                ("lumbar-spine-straight-leg-raise", "Straight Leg Raise"),
            ]),
            make_group("thoracic-total-spine", "Thoracic (Total Spine ROM)", [
                ("thoracic-spine-flexion", "Flexion"),
                ("thoracic-spine-rotation", "Rotation"),
            ]),
        ]
        for group_id, label, tests in _EXTREMITIES:
            groups.extend(side_groups(group_id, label, tests))
        return groups

    def describe_test(self, test_id: str) -> dict:
        test = self.get_test(test_id)
        if test is None:
            return {}
        labels = motion_labels(test.id, test.name)
        name = f"{test.group_name} {test.name}"
        return {
            "baseId": base_rom_test_id(test.id),
            "norm": rom_norm(name),
            "motionLabels": {k: list(v) for k, v in labels.items()} if labels else None,
        }
