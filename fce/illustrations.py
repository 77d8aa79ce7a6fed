"""
Sample illustrations shown beside each test in the protocol picker and on
the report data pages.

Images are served from ``/sample_illustration``. Lookup tries the catalog id
first (side suffix removed), then keyword fallbacks so renamed or free-text
tests still get a picture.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from fce.rom import base_rom_test_id

ILLUSTRATION_DIR = "/sample_illustration"


@dataclass(frozen=True)
class Illustration:
    file: str
    label: str

    @property
    def src(self) -> str:
        return f"{ILLUSTRATION_DIR}/{self.file}"

    def to_dict(self) -> dict:
        return {"src": self.src, "label": self.label}


def _one(file: str, label: str) -> tuple[Illustration, ...]:
    return (Illustration(file, label),)


_HIP_MUSCLE = tuple(
    Illustration(
        f"Hip_Muscle Test_Flexion_Extension_Abduction_Adduction_External_RotationInternal_Rotation_{n}.jpg",
        f"Hip Muscle ({n})",
    )
    for n in (1, 2, 3)
)
_HIP_ROM = tuple(
    Illustration(f"Extremity_Hip_Flexion_Extension_Internal_External_Rotation_Abduction_Adduction_{n}.jpg", f"Hip ROM ({n})")
    for n in (1, 2)
)
_LITTLE_FINGER = _one("Little_Finger_DIP_Flexion_Extension_PIP_Flexion_Extension_MP_Flexion_Extension.jpg", "Little Finger ROM")

_ILLUSTRATIONS: dict[str, tuple[Illustration, ...]] = {
    # Strength: hand and pinch
    "hand-strength-standard": _one("Hand_Strength_Standard.jpg", "Standard Grip"),
    "hand-strength-rapid-exchange": _one("Hand_Strength_Rapid_Exchange.jpg", "Rapid Exchange Grip"),
    "hand-strength-mve": _one("Hand_Strength_MVE.jpg", "Hand Strength MVE"),
    "hand-strength-mmve": _one("Hand_Strength_MMVE.jpg", "Hand Strength MMVE"),
    "pinch-strength-key": _one("Pinch_Strength_Key.jpg", "Key Pinch"),
    "pinch-strength-tip": _one("Pinch_Strength_Tip.jpg", "Tip Pinch"),
    "pinch-strength-palmar": _one("Pinch_Strength_Palmar.jpg", "Palmar Pinch"),
    "pinch-strength-grasp": _one("Pinch_Strength_Grasp.jpg", "Grasp"),
    # Strength: muscle tests
    "cervical-flexion-extension": _one("Muscle_Test_Cervical_Flexion_Extension.jpg", "Cervical Flex/Ext"),
    "cervical-lateral-flexion": _one("Muscle_Test_Cervical_Lateral_Flexion.jpg", "Cervical Lateral Flexion"),
    "cervical-30-rotation": _one("Muscle_Test_Cervical_30_Degree_Rotation.jpg", "Cervical 30° Rotation"),
    "cervical-60-rotation": _one("Muscle_Test_Cervical_60_Degree_Rotation.jpg", "Cervical 60° Rotation"),
    "hip-muscle-flexion": _HIP_MUSCLE,
    "hip-muscle-extension": _HIP_MUSCLE,
    "hip-muscle-abduction": _HIP_MUSCLE,
    "hip-muscle-adduction": _HIP_MUSCLE,
    "hip-muscle-external-rotation": _HIP_MUSCLE,
    "hip-muscle-internal-rotation": _HIP_MUSCLE,
    "shoulder-muscle-flexion": _one("Shoulder_Muscle Test_Flexion.jpg", "Shoulder Flexion"),
    "shoulder-muscle-extension": _one("Shoulder_Muscle Test_Extension.jpg", "Shoulder Extension"),
    "shoulder-muscle-abduction": _one("Shoulder_Muscle Test_Abduction.jpg", "Shoulder Abduction"),
    "shoulder-muscle-adduction": _one("Shoulder_Muscle Test_Adduction.jpg", "Shoulder Adduction"),
    "shoulder-muscle-external-rotation": _one(
        "Shoulder_Muscle Test_External_Rotation.jpg", "Shoulder External Rotation",
    ),
    "shoulder-muscle-internal-rotation": _one(
        "Shoulder_Muscle Test_Internal_Rotation.jpg", "Shoulder Internal Rotation",
    ),
    "wrist-muscle-flexion": _one("Wrist_Muscle_Test_Palmar_Flexion.jpg", "Wrist Palmar Flexion"),
    "wrist-muscle-extension": _one("Wrist_Muscle_Test_Dorsiflexion.jpg", "Wrist Dorsiflexion"),
    "wrist-muscle-radial-deviation": _one("Wrist_Muscle Test_Radial_Deviation.jpg", "Wrist Radial Deviation"),
    "wrist-muscle-ulnar-deviation": _one("Wrist_Muscle_Test_Ulnar_Deviation.jpg", "Wrist Ulnar Deviation"),
    "ankle-muscle-dorsiflexion": _one("Ankle_Muscle_Test_Dorsiflexion.jpg", "Ankle Dorsiflexion"),
    "ankle-muscle-plantar-flexion": _one("Ankle_Muscle_Test_Plantar_Flexion.jpg", "Ankle Plantar Flexion"),
    "ankle-muscle-eversion": _one("Ankle_Muscle_Test_Eversion.jpg", "Ankle Eversion"),
    "ankle-muscle-inversion": _one("Ankle_Muscle_Test_Inversion.jpg", "Ankle Inversion"),
    "knee-muscle-flexion": _one("Knee_Muscle_Test_Flexion.jpg", "Knee Flexion"),
    "knee-muscle-extension": _one("Knee_Muscle_Test_Extension.jpg", "Knee Extension"),
    "elbow-muscle-flexion": _one("Elbow_Muscle_Test_Flexion.jpg", "Elbow Flexion"),
    "elbow-muscle-extension": _one("Elbow_Muscle_Test_Extension.jpg", "Elbow Extension"),
    # Strength: lifts
    "static-lift-low": _one("Static_Lift_Low.jpg", "Static Lift Low"),
    "static-lift-mid": _one("Static_Lift_Mid.jpg", "Static Lift Mid"),
    "static-lift-high": _one("Static_Lift_High.jpg", "Static Lift High"),
    "dynamic-lift-low": _one("Dynamic_Lift_Low.jpg", "Dynamic Lift Low"),
    "dynamic-lift-mid": _one("Dynamic_Lift_Mid.jpg", "Dynamic Lift Mid"),
    "dynamic-lift-high": _one("Dynamic_Lift_High.jpg", "Dynamic Lift High"),
    "dynamic-lift-overhead": _one("Dynamic_Lift_Overhead.jpg", "Dynamic Lift Overhead"),
    "dynamic-lift-frequent": _one("Dynamic_Lift_Mid.jpg", "Dynamic Frequent Lifts"),
    "dynamic-infrequent-lift-low": _one("Dynamic_Lift_Low.jpg", "Dynamic Infrequent Lift Low"),
    "dynamic-infrequent-lift-mid": _one("Dynamic_Lift_Mid.jpg", "Dynamic Infrequent Lift Mid"),
    "dynamic-infrequent-lift-high": _one("Dynamic_Lift_High.jpg", "Dynamic Infrequent Lift High"),
    "dynamic-infrequent-lift-overhead": _one("Dynamic_Lift_Overhead.jpg", "Dynamic Infrequent Lift Overhead"),
    # ROM: spine
    "cervical-spine-flexion-extension": _one("Cervical_Total_Spine_Flexion_Extension.jpg", "Cervical Flex/Ext"),
    "cervical-spine-lateral-flexion": _one("Cervical_Total_Spine_Lateral_Flexion.jpg", "Cervical Lateral Flexion"),
    "cervical-spine-rotation": _one("Cervical_Total_Spine_Rotation.jpg", "Cervical Rotation"),
    "lumbar-spine-flexion-extension": _one("Lumbar_Total_Spine_Flexion_Extension.jpg", "Lumbar Flex/Ext"),
    "lumbar-spine-lateral-flexion": _one("Lumbar_Total_Spine_Lateral_Flexion.jpg", "Lumbar Lateral Flexion"),
    "lumbar-spine-straight-leg-raise": _one("Lumbar_Total_Spine_Straight_Leg_Raise.jpg", "Straight Leg Raise"),
    "thoracic-spine-flexion": _one("Thoracic_Total_Spine_Flexion.jpg", "Thoracic Flexion"),
    "thoracic-spine-rotation": _one("Thoracic_Total_Spine_Rotation.jpg", "Thoracic Rotation"),
    # ROM: extremities
    "elbow-rom-flexion-extension": _one("Extremity_Elbow_Flexion_Extension.jpg", "Elbow Flex/Ext"),
    "elbow-rom-supination-pronation": _one(
        "Extremity_Elbow_Supination_Pronation.jpg", "Elbow Supination/Pronation",
    ),
    "wrist-rom-flexion-extension": _one("Extremity_Wrist_Flexion_Extension.jpg", "Wrist Flex/Ext"),
    "wrist-rom-radial-ulnar-deviation": _one(
        "Extremity_Wrist_Radial_Ulunar_Deviation.jpg", "Wrist Radial/Ulnar Deviation",
    ),
    "knee-rom-flexion-extension": _one("Extremity_ Knee_Flexion_Extension.jpg", "Knee Flex/Ext"),
    "shoulder-rom-flexion-extension": _one("Extremity_Shoulder_Flexion_Extension.jpg", "Shoulder Flex/Ext"),
    "shoulder-rom-internal-external-rotation": _one(
        "Extremity_Shoulder_Internal_External_Rotation.jpg", "Shoulder Int/Ext Rotation",
    ),
    "shoulder-rom-abduction-adduction": _one("Extremity_Shoulder_Abduction_Adduction.jpg", "Shoulder Abd/Add"),
    "hip-rom-flexion-extension": _HIP_ROM,
    "hip-rom-internal-external-rotation": _HIP_ROM,
    "hip-rom-abduction-adduction": _HIP_ROM,
    "ankle-rom-dorsi-plantar-flexion": _one("Extremity_Ankle_Dorsi_Plantar_Flexion.jpg", "Ankle Dorsi/Plantar"),
    "ankle-rom-inversion-eversion": _one("Extremity_Ankle_Inversion_Eversion.jpg", "Ankle Inversion/Eversion"),
    # ROM: hand and foot
    "thumb-ip-flexion-extension": _one("Thumb_IP_Flexion_Extension.jpg", "Thumb IP Flex/Ext"),
    "thumb-mp-flexion-extension": _one("Thumb_MP_Flexion_Extension.jpg", "Thumb MP Flex/Ext"),
    "thumb-abduction": _one("Thumb_Thumb_Abduction.jpg", "Thumb Abduction"),
    **{
        f"{finger}-{joint}-flexion-extension": _one(
            f"{finger.title()}_Finger_{joint.upper()}_Flexion_Extension.jpg",
            f"{finger.title()} {joint.upper()} Flex/Ext",
        )
        for finger in ("index", "middle", "ring")
        for joint in ("dip", "pip", "mp")
    },
    "little-dip-flexion-extension": _LITTLE_FINGER,
    "little-pip-flexion-extension": _LITTLE_FINGER,
    "little-mp-flexion-extension": _LITTLE_FINGER,
    "great-toe-ip-flexion": _one(
        "Extremity_Great_Toe_IP_Flexion_MP_Dorsi_Plantar_Flexion.jpg", "Great Toe IP Flexion",
    ),
    "great-toe-mp-dorsi-plantar-flexion": _one(
        "Extremity_Great_Toe_IP_Flexion_MP_Dorsi_Plantar_Flexion.jpg", "Great Toe MP Dorsi/Plantar",
    ),
    **{
        f"{toe}-toe-mp-dorsi-plantar-flexion": _one(
            f"Extremity_{toe}_Toe_MP_Dorsi_Plantar_Flexion.jpg", f"{toe} Toe MP Dorsi/Plantar",
        )
        for toe in ("2nd", "3rd", "4th", "5th")
    },
    # Occupational (MTM battery)
    "fingering": _one("MTM_Test_Battery_Fingering.jpg", "Fingering"),
    "bi-manual-fingering": _one("MTM_Test_Battery_Bi_Manual_Fingering.jpg", "Bi-manual Fingering"),
    "handling": _one("MTM_Test_Battery_Handling.jpg", "Handling"),
    "bi-manual-handling": _one("MTM_Test_Battery_Bi_Manual_Handling.jpg", "Bi-manual Handling"),
    "reach-immediate": _one("MTM_Test_Battery_Reach_Immediate.jpg", "Reach Immediate"),
    "reach-overhead": _one("MTM_Test_Battery_Reach_Overhead.jpg", "Reach Overhead"),
    "reach-with-weight": _one("MTM_Test_Battery_Reach_With_Weight.jpg", "Reach With Weight"),
    "stoop": _one("MTM_Test_Battery_Stoop.jpg", "Stoop"),
    "walk": _one("MTM_Test_Battery_Walk.jpg", "Walk"),
    "push-pull-cart": _one("MTM_Test_Battery_Push_Pull_Cart.jpg", "Push/Pull Cart"),
    "crouch": _one("MTM_Test_Battery_Crouch.jpg", "Crouch"),
    "carry": _one("MTM_Test_Battery_Carry.jpg", "Carry"),
    "crawl": _one("MTM_Test_Battery_Crawl.jpg", "Crawl"),
    "climb-stairs": _one("MTM_Test_Battery_Climb_Stairs.jpg", "Climb Stairs"),
    "balance": _one("MTM_Test_Battery_Balance.jpg", "Balance"),
    "kneel": _one("MTM_Test_Battery_Kneel.jpg", "Kneel"),
    "climb-ladder": _one("MTM_Test_Battery_Climb_Ladder.jpg", "Climb Ladder"),
    # Cardio
    "mcaft-step-test": _one("mCAFT.png", "mCAFT Step"),
    "kasch-step-test": _one("Kasch.png", "Kasch Step"),
    "bruce-treadmill-test": _one("Bruce.png", "Bruce Treadmill"),
    "ymca-step-test": _one("YMCA_Step_Test.png", "YMCA 3-Minute Step Test"),
    "ymca-submaximal-treadmill-test": _one("YMCA_Treadmill_Test.png", "YMCA Submaximal Treadmill Test"),
}

# First matching keyword wins; each rule is (required keywords, map key)
_PINCH_RULES = (
    (("key",), "pinch-strength-key"),
    (("tip",), "pinch-strength-tip"),
    (("palmar",), "pinch-strength-palmar"),
    (("palmer",), "pinch-strength-palmar"),
    (("grasp",), "pinch-strength-grasp"),
)
# Checked in order: "dynamic-infrequent-lift" before "dynamic-lift"
_LIFT_LEVELS = {
    "static-lift": ("high", "mid", "low"),
    "dynamic-infrequent-lift": ("overhead", "high", "mid", "low"),
    "dynamic-lift": ("overhead", "high", "mid", "frequent", "low"),
}
_ROM_BODY_PARTS = (
    ("cervical", "cervical-spine-flexion-extension"),
    ("lumbar", "lumbar-spine-flexion-extension"),
    ("thoracic", "thoracic-spine-flexion"),
    ("shoulder", "shoulder-rom-flexion-extension"),
    ("elbow", "elbow-rom-flexion-extension"),
    ("wrist", "wrist-rom-flexion-extension"),
    ("hip", "hip-rom-flexion-extension"),
    ("knee", "knee-rom-flexion-extension"),
    ("ankle", "ankle-rom-dorsi-plantar-flexion"),
)
_MTM_RULES = (
    (("fingering", "bi"), "bi-manual-fingering"),
    (("fingering",), "fingering"),
    (("handling", "bi"), "bi-manual-handling"),
    (("handling",), "handling"),
    (("reach", "overhead"), "reach-overhead"),
    (("reach", "weight"), "reach-with-weight"),
    (("reach",), "reach-immediate"),
    (("walk",), "walk"),
    (("stoop",), "stoop"),
    (("push",), "push-pull-cart"),
    (("pull",), "push-pull-cart"),
    (("carry",), "carry"),
    (("crouch",), "crouch"),
    (("crawl",), "crawl"),
    (("climb", "stairs"), "climb-stairs"),
    (("climb", "ladder"), "climb-ladder"),
    (("kneel",), "kneel"),
    (("balance",), "balance"),
)

_WHITESPACE_RE = re.compile(r"\s+")
_KEY_INVALID_RE = re.compile(r"[^a-z0-9-]")
_DASHES_RE = re.compile(r"-+")


def normalize_key(raw: str | None) -> str:
    """Lower-case, dash-separated key: ``"Grip (Position 2)"`` -> ``grip-position-2``."""
    key = _WHITESPACE_RE.sub("-", (raw or "").strip().lower())
    key = key.replace("(", "").replace(")", "")
    key = _DASHES_RE.sub("-", _KEY_INVALID_RE.sub("-", key))
    return key.strip("-")


def _first_rule(key: str, rules) -> str | None:
    for words, target in rules:
        if all(w in key for w in words):
            return target
    return None


def _fallback_key(key: str) -> str | None:
    if "grip" in key or "hand-strength" in key:
        if "rapid" in key:
            return "hand-strength-rapid-exchange"
        if "standard" in key or "p2" in key:
            return "hand-strength-standard"
        return "hand-strength-mve"
    if "pinch" in key:
        target = _first_rule(key, _PINCH_RULES)
        if target:
            return target
    for family, levels in _LIFT_LEVELS.items():
        if family in key:
            for level in levels:
                if level in key:
                    return f"{family}-{level}"
    for part, target in _ROM_BODY_PARTS:
        if part in key:
            return target
    if "strength" in key or "muscle" in key or "lift" in key:
        return "hand-strength-mve"
    if "bruce" in key or "treadmill" in key:
        return "bruce-treadmill-test"
    if "mcaft" in key:
        return "mcaft-step-test"
    if "kasch" in key:
        return "kasch-step-test"
    if "step" in key or "cardio" in key:
        return "mcaft-step-test"
    if "mtm" in key or "occupational" in key:
        return _first_rule(key, _MTM_RULES)
    return None


def sample_illustrations(test_id_or_name: str | None) -> list[Illustration]:
    """Illustrations for a catalog id or free-text test name; empty when nothing fits."""
    key = base_rom_test_id(normalize_key(test_id_or_name))
    if key in _ILLUSTRATIONS:
        return list(_ILLUSTRATIONS[key])
    fallback = _fallback_key(key)
    return list(_ILLUSTRATIONS.get(fallback, ())) if fallback else []
