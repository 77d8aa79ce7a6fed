from __future__ import annotations

from fce import categorization
from fce.rom import base_rom_test_id, motion_labels
from test_types.base import BaseTestType, TestGroup, side_groups

_FINGERS = ("Index", "Middle", "Ring", "Little")
_LESSER_TOES = ("2nd", "3rd", "4th", "5th")


def _finger_tests(finger: str) -> list[tuple[str, str]]:
    key = finger.lower()
    return [
        (f"{key}-{joint.lower()}-flexion-extension", f"{finger} Finger {joint} Flexion/Extension")
        for joint in ("DIP", "PIP", "MP")
    ]


class RomHandFootHandler(BaseTestType):

    @property
    def test_type_id(self) -> str:
        return "rom-hand"

    @property
    def display_name(self) -> str:
        return "Range Of Motion Hand/Foot"

    @property
    def keywords(self) -> list[str]:
        return ["hand", "foot", "finger", "thumb", "toe", "goniometer", "hand/foot"]

    @property
    def category(self) -> str:
        return categorization.ROM_HAND_FOOT

    def groups(self) -> list[TestGroup]:
        groups = side_groups("thumb-rom", "Thumb (ROM)", [
            ("thumb-ip-flexion-extension", "Thumb IP Flexion/Extension"),
            ("thumb-mp-flexion-extension", "Thumb MP Flexion/Extension"),
            ("thumb-abduction", "Thumb Abduction"),
        ])
        for finger in _FINGERS:
            groups.extend(side_groups(f"{finger.lower()}-finger-rom", f"{finger} Finger (ROM)", _finger_tests(finger)))
        groups.extend(side_groups("extremity-great-toe", "Extremity Great Toe (ROM)", [
            ("great-toe-ip-flexion", "Extremity Great Toe IP Flexion"),
            ("great-toe-mp-dorsi-plantar-flexion", "Extremity Great Toe MP Dorsi/Plantar Flexion"),
        ]))
        for toe in _LESSER_TOES:
            groups.extend(side_groups(f"extremity-{toe}-toe", f"Extremity {toe} Toe (ROM)", [
                (f"{toe}-toe-mp-dorsi-plantar-flexion", f"Extremity {toe} Toe MP Dorsi/Plantar Flexion"),
            ]))
        return groups

    def describe_test(self, test_id: str) -> dict:
        test = self.get_test(test_id)
        if test is None:
            return {}
        labels = motion_labels(test.id, test.name)
        return {
            "baseId": base_rom_test_id(test.id),
            "motionLabels": {k: list(v) for k, v in labels.items()} if labels else None,
        }
