"""
Literature references printed under each test on the report data pages.

References are grouped by measurement method; each catalog test id maps to
one method group. Side-specific ROM ids (``...-left`` / ``...-right``) share
the references of their base id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fce.rom import base_rom_test_id


@dataclass(frozen=True)
class Reference:
    author: str
    title: str
    year: int
    journal: Optional[str] = None
    volume: Optional[str] = None
    pages: Optional[str] = None
    publisher: Optional[str] = None
    full_text: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "author": self.author,
            "title": self.title,
            "year": self.year,
        }
        for key, value in (
            ("journal", self.journal),
            ("volume", self.volume),
            ("pages", self.pages),
            ("publisher", self.publisher),
            ("fullText", self.full_text),
        ):
            if value:
                data[key] = value
        return data


_MATHIOWETZ = Reference(
    "V. Mathiowetz et al.", "Grip and Pinch Strength: Normative Data for Adults", 1985,
    journal="Arch Pys Med Rehab", volume="Vol. 66", pages="pp. 69 (Feb 1985)",
)
_STOKES = Reference(
    "H. Stokes", "The Seriously Uninjured Hand-Weakness of Grip", 1983,
    journal="Journal of Occupational Medicine", pages="pp. 683-684 (Sep 1983)",
)
_MATHESON = Reference(
    "L. Matheson, et al.", "Grip Strength in a Disabled Sample: Reliability and Normative Standards", 1988,
    journal="Industrial Rehabilitation Quarterly", volume="Vol. 1, no. 3", pages="Fall 1988",
)
_HILDRETH = Reference(
    "Hildreth et al.", "Detection of Submaximal effort by use of the rapid exchange grip", 1989,
    journal="Journal of Hand Surgery", pages="pp. 742 (Jul 1989)",
)
_AMA_GUIDES = "Guides to the Evaluation of Permanent Impairment"

REFERENCES: dict[str, list[Reference]] = {
    "static-lift": [
        Reference(
            "William M. Keyserling", "Isometric Strength Testing in Selecting Workers for Strenuous Jobs", 1979,
            journal="University of Michigan",
        ),
        Reference(
            "Don B. Chaffin, PhD.", "Pre-employment Strength Testing: An Updated Position", 1978,
            journal="Journal of Occupational Medicine", volume="Vol. 20 No. 6", pages="June 1978",
        ),
        Reference("Donald Badges PhD.", "Work Practices Guide to Manual Lifting", 1981, publisher="NIOSH"),
        Reference(
            "Don Chaffin, PhD.", "Ergonomics Guide for the Assessment of Human Static Strength", 1975,
            journal="American Industrial Hygiene Association Journal", pages="July 1975",
        ),
        Reference(
            "Harber & SooHoo", "Static Ergonomic Strength Testing in Evaluating Occupational Back Pain", 1984,
            journal="Journal of Occupational Medicine", volume="Vol. 26 No. 12", pages="Dec 1984",
        ),
    ],
    "dynamic-lift": [
        Reference(
            "Mayer et al.",
            "Progressive Iso-inertial Lifting Evaluation: A Standardized Protocol and Normative Database",
            1988, journal="Spine", volume="Volume 13 Num. 9", pages="pp. 993",
        ),
    ],
    "hand-strength": [_MATHIOWETZ, _STOKES, _MATHESON, _HILDRETH],
    "pinch-strength": [_MATHIOWETZ, _STOKES, _MATHESON, _HILDRETH],
    "range-of-motion": [
        Reference("American Medical Association", _AMA_GUIDES, 1993, publisher="4th ed.", pages="pp. 112-135"),
        Reference("American Medical Association", _AMA_GUIDES, 1990, publisher="3rd ed.", pages="pp. 81-102"),
    ],
    "goniometers": [
        Reference("American Medical Association", _AMA_GUIDES, 1993, publisher="4th ed.", pages="pp. 90-92"),
        Reference("American Medical Association", _AMA_GUIDES, 1990, publisher="3rd ed.", pages="pp. 20-38, 101"),
    ],
    "muscle-test": [
        Reference(
            "A.W. Andrews", "Hand-held Dynamometry for Measuring Muscle Strength", 1991,
            journal="Journal of Human Muscle Performance", pages="pp. 35 (Jun 1991)",
        ),
    ],
    "horizontal-validity": [
        Reference(
            "Berryhill et al",
            "Horizontal Strength Changes: An Ergometric Measure for Determining Validity of Effort in "
            "Impairment Evaluations-A Preliminary Report",
            1993, journal="Journal of Disability", volume="Vol. 3, Num. 14", pages="pp. 143, (Jul 1993)",
        ),
        Reference(
            "L. A. Owens", "Assessing Reliability of Performance in the Functional Capacity Assessment", 1993,
            journal="Journal of Disability", volume="Vol. 3, Num. 14", pages="pp. 149, (Jul 1993)",
        ),
    ],
    "mtm": [
        Reference(
            "Anderson, D.S. and Edstrom D.P.",
            "MTM Personnel Selection Tests; Validation at a Northwestern National Life Insurance Company",
            1975, journal="Journal of Methods-Time Measurement", volume="15, (3)",
        ),
        Reference(
            "Birdsong, J.H. and Chyatte, S.B.", "Further medical applications of methods-time measurement", 1970,
            journal="Journal of Methods-Time Measurement", volume="15", pages="19-27",
        ),
        Reference(
            "Brickey", "MTM in a Sheltered Workshop", 1975,
            journal="Journal of Methods-Time Measurement", volume="8, (3)", pages="2-7",
        ),
        Reference(
            "Chyatte, S.B. and Birdsong, J.H.", "Methods time measurement in assessment of motor performance", 1972,
            journal="Archives of Physical Medicine and Rehabilitation", volume="53", pages="38-44",
        ),
        Reference(
            "Foulke, J.A.", "Estimating Individual Operator Performance", 1975,
            journal="Journal of Methods-Time Measurement", volume="15, (1)", pages="18-23",
        ),
        Reference(
            "Grant, G.W.B., Moores, B. and Whelan, E.",
            "Applications of Methods-time measurement in training centers for the mentally handicapped",
            1975, journal="Journal of Methods-Time Measurement", volume="11", pages="23-30",
        ),
    ],
    "bruce-treadmill": [
        Reference(
            "Bruce, R. A., et al.",
            "Maximal oxygen intake and nomographic assessment of functional aerobic impairment in "
            "cardiovascular disease",
            1973, journal="Am Heart J",
            full_text='Bruce, R. A., et al. "Maximal oxygen intake and nomographic assessment of functional '
            'aerobic impairment in cardiovascular disease." Am Heart J (1973).',
        ),
        Reference(
            "Acampa, W., Assante, R., Zampella, E.", "The role of treadmill exercise testing", 2016,
            journal="J Nucl Cardiol", volume="23(5)", pages="991-996",
            full_text="Acampa W, Assante R, Zampella E. The role of treadmill exercise testing. "
            "J Nucl Cardiol. 2016 Oct;23(5):991-996. [PubMed]",
        ),
        Reference(
            "Qureshi, W.T., Alirhayim, Z., Blaha, M.J., Juraschek, S.P., Keteyian, S.J., Brawner, C.A., "
            "Al-Mallah, M.H.",
            "Cardiorespiratory Fitness and Risk of Incident Atrial Fibrillation: Results From the Henry Ford "
            "Exercise Testing (FIT) Project",
            2015, journal="Circulation", volume="131(21)", pages="1827-34",
            full_text="Qureshi WT, Alirhayim Z, Blaha MJ, Juraschek SP, Keteyian SJ, Brawner CA, Al-Mallah MH. "
            "Cardiorespiratory Fitness and Risk of Incident Atrial Fibrillation: Results From the Henry Ford "
            "Exercise Testing (FIT) Project. Circulation. 2015 May 26;131(21):1827-34. [PubMed]",
        ),
        Reference(
            "Gorman, M.W., Feigl, E.O.", "Control of coronary blood flow during exercise", 2012,
            journal="Exerc Sport Sci Rev", volume="40(1)", pages="37-42",
            full_text="Gorman MW, Feigl EO. Control of coronary blood flow during exercise. "
            "Exerc Sport Sci Rev. 2012 Jan;40(1):37-42. [PubMed]",
        ),
    ],
    "mcaft": [
        Reference(
            "Emily Wolfe Phillips, Deepa P. Rao, Leonard A. Kaminsky, Grant R. Tomkinson, Robert Ross, "
            "and Justin J. Lang",
            "Criterion-referenced mCAFT cut-points to identify metabolically healthy cardiorespiratory fitness "
            "among adults aged 18–69 years: an analysis of the Canadian Health Measures Survey",
            2020, journal="Applied Physiology, Nutrition, and Metabolism",
            full_text="Criterion-referenced mCAFT cut-points to identify metabolically healthy cardiorespiratory "
            "fitness among adults aged 18–69 years: an analysis of the Canadian Health Measures Survey: Emily "
            "Wolfe Phillips, Deepa P. Rao, Leonard A. Kaminsky, Grant R. Tomkinson, Robert Ross, and Justin J. "
            "Lang : Applied Physiology, Nutrition, and Metabolism 26 March 2020",
        ),
        Reference(
            "Statistics Canada", "Normative-referenced percentile values for physical fitness", 2019,
            journal="Health Reports",
            full_text="Health Reports, Vol. 30, no. 10, pp. 14-22, October 2019 • Statistics Canada, "
            "Catalogue no. 82-003-X: Normative-referenced percentile values for physical fitness",
        ),
    ],
    "kasch": [
        Reference(
            "Kasch, F. W., Phillips, W. H., Ross, W. D., Carter, J. E., & Boyer, J. L.",
            "A comparison of maximal oxygen uptake by treadmill and step-test procedures",
            1966, journal="Journal of Applied Physiology", volume="21(4)", pages="1387–1389",
            full_text="Kasch, F. W., Phillips, W. H., Ross, W. D., Carter, J. E., & Boyer, J. L. (1966). "
            "A comparison of maximal oxygen uptake by treadmill and step-test procedures. Journal of Applied "
            "Physiology, 21(4), 1387–1389.",
        ),
        Reference(
            "Kasch, F. W., & Boyer, J. L.", "Adult fitness: Principles and practices", 1968, publisher="KASCH",
            full_text="Kasch, F. W., & Boyer, J. L. (1968). Adult fitness: Principles and practices. KASCH.",
        ),
    ],
}


def _ids(group: str, *test_ids: str) -> dict[str, str]:
    return {test_id: group for test_id in test_ids}


_LIFT_LEVELS = ("low", "mid", "high", "overhead")
_FINGER_JOINTS = tuple(
    f"{finger}-{joint}-flexion-extension"
    for finger in ("index", "middle", "ring", "little")
    for joint in ("dip", "pip", "mp")
)

TEST_REFERENCE_GROUPS: dict[str, str] = {
    **_ids("static-lift", "static-lift-low", "static-lift-mid", "static-lift-high"),
    **_ids(
        "dynamic-lift",
        *(f"dynamic-lift-{lvl}" for lvl in _LIFT_LEVELS),
        *(f"dynamic-infrequent-lift-{lvl}" for lvl in _LIFT_LEVELS),
    ),
    **_ids(
        "hand-strength",
        "hand-strength-standard", "hand-strength-rapid-exchange", "hand-strength-mve",
        "hand-strength-mmve", "grip-strength",
    ),
    **_ids(
        "pinch-strength",
        "pinch-strength-key", "pinch-strength-tip", "pinch-strength-palmar", "pinch-strength-grasp",
        "key-pinch", "tip-pinch", "palmar-pinch",
    ),
    **_ids(
        "range-of-motion",
        "cervical-spine-flexion-extension", "cervical-spine-lateral-flexion", "cervical-spine-rotation",
        "lumbar-spine-flexion-extension", "lumbar-spine-lateral-flexion", "lumbar-spine-straight-leg-raise",
        "thoracic-spine-flexion", "thoracic-spine-rotation",
        "shoulder-rom-flexion-extension", "shoulder-rom-internal-external-rotation",
        "shoulder-rom-abduction-adduction",
        "hip-rom-flexion-extension", "hip-rom-internal-external-rotation", "hip-rom-abduction-adduction",
        "knee-rom-flexion-extension",
        "ankle-rom-dorsi-plantar-flexion", "ankle-rom-inversion-eversion",
        "elbow-rom-flexion-extension", "elbow-rom-supination-pronation",
        "wrist-rom-flexion-extension", "wrist-rom-radial-ulnar-deviation",
    ),
    **_ids(
        "goniometers",
        "thumb-ip-flexion-extension", "thumb-mp-flexion-extension", "thumb-abduction",
        *_FINGER_JOINTS,
        "great-toe-ip-flexion", "great-toe-mp-dorsi-plantar-flexion",
        *(f"{toe}-toe-mp-dorsi-plantar-flexion" for toe in ("2nd", "3rd", "4th", "5th")),
    ),
    **_ids(
        "muscle-test",
        # cervical muscle tests share the dynamometry references
        "cervical-flexion-extension", "cervical-lateral-flexion", "cervical-30-rotation", "cervical-60-rotation",
        *(f"hip-muscle-{m}" for m in (
            "flexion", "extension", "abduction", "adduction", "external-rotation", "internal-rotation",
        )),
        *(f"shoulder-muscle-{m}" for m in (
            "flexion", "extension", "abduction", "adduction", "internal-rotation", "external-rotation",
        )),
        *(f"wrist-muscle-{m}" for m in ("flexion", "extension", "radial-deviation", "ulnar-deviation")),
        *(f"ankle-muscle-{m}" for m in ("dorsiflexion", "plantar-flexion", "eversion", "inversion")),
        "knee-muscle-flexion", "knee-muscle-extension", "elbow-muscle-flexion", "elbow-muscle-extension",
    ),
    **_ids(
        "mtm",
        "fingering", "bi-manual-fingering", "handling", "bi-manual-handling",
        "reach-immediate", "reach-overhead", "reach-with-weight",
        "stoop", "walk", "push-pull-cart", "crouch", "carry", "crawl",
        "climb-stairs", "balance", "kneel", "climb-ladder",
    ),
    **_ids(
        "bruce-treadmill",
        "bruce-treadmill", "bruce-treadmill-test", "treadmill-test", "bruce-test",
        "ymca-submaximal-treadmill-test",
    ),
    **_ids("mcaft", "mcaft", "mcaft-test", "mcaft-step-test", "step-test"),
    **_ids("kasch", "kasch", "kasch-test", "kasch-step", "kasch-step-test", "ymca-step-test"),
}


def references_for_test(test_id: str | None) -> list[Reference]:
    if not test_id:
        return []
    group = TEST_REFERENCE_GROUPS.get(test_id) or TEST_REFERENCE_GROUPS.get(base_rom_test_id(test_id))
    return list(REFERENCES.get(group, [])) if group else []


def format_reference(ref: Reference) -> str:
    """One-line citation: title, author, journal, volume, pages or year, publisher."""
    if ref.full_text:
        return ref.full_text
    text = f"{ref.title}, {ref.author}"
    if ref.journal:
        text += f", {ref.journal}"
    if ref.volume:
        text += f", {ref.volume}"
    if ref.pages:
        text += f", {ref.pages}"
    elif ref.year:
        text += f" ({ref.year})"
    if ref.publisher and not ref.journal:
        text += f", {ref.publisher}"
    return text + "."
