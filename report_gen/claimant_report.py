"""
Full claimant report (DOCX): the executive summary followed by the client
perceived activity ratings, one data page per test, the MTM block tables,
cardio results and the digital library.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from docx.shared import Pt

from fce import categorization, rom
from fce.cardio import BRUCE_STAGES, MCAFT_STAGES, score_cardio_test
from fce.references import format_reference, references_for_test
from fce.stats import read_trials, report_cv, summarize_test, to_number
from report_gen import body as rb
from report_gen.docx_common import (
    CATEGORY_FILL,
    GRID_HEADER_FILL,
    HEADER_FILL,
    add_image_grid,
    add_spanning_row,
    add_table,
    add_text,
    add_title,
    new_document,
    page_break,
    set_cell_shading,
    set_cell_text,
    to_bytes,
)
from report_gen.executive_summary import build_executive_summary
from test_types import registry

logger = logging.getLogger(__name__)

MTM_HEADERS = [
    "Trial", "Side", "Weight/Plane", "Distance/Posture", "Reps", "Time (sec)", "%IS", "Time Set Completed",
]

CATEGORY_DESCRIPTIONS = {
    categorization.STRENGTH: (
        "Strength was measured with calibrated dynamometry. Each side was tested over repeated trials; "
        "the coefficient of variation between trials indicates the consistency of effort."
    ),
    categorization.ROM_SPINE_EXTREMITY: (
        "Range of motion was measured with a goniometer or dual inclinometer and compared with "
        "published normal values."
    ),
    categorization.ROM_HAND_FOOT: (
        "Hand and foot range of motion was measured with a finger goniometer and compared with "
        "published normal values."
    ),
    categorization.OCCUPATIONAL: (
        "Occupational tasks were timed using Methods-Time Measurement and expressed as a percentage "
        "of the industrial standard (%IS)."
    ),
    categorization.CARDIO: (
        "The client was tested in our facility using standardized cardiovascular assessment protocols."
    ),
}

_CARDIO_DESCRIPTIONS = {
    "bruce": (
        "The Bruce treadmill protocol increases speed and incline every three minutes. Total exercise "
        "time is used to estimate maximal oxygen uptake (VO2max)."
    ),
    "mcaft": (
        "The modified Canadian Aerobic Fitness Test (mCAFT) uses stepping at prescribed cadences. The "
        "last completed stage gives the O2 cost used to estimate VO2max."
    ),
    "kasch": (
        "The Kasch Pulse Recovery Test is a three-minute step test. Heart rate in the first minute of "
        "recovery is rated against age and sex norms."
    ),
    "ymca-step": (
        "The YMCA 3-Minute Step Test rates the one-minute recovery heart rate against age and sex norms."
    ),
    "ymca-treadmill": (
        "The YMCA single-stage submaximal treadmill test estimates VO2max from walking speed and "
        "steady-state heart rate."
    ),
}


def _fmt(value: Any, digits: int = 1) -> str:
    number = to_number(value)
    return f"{number:.{digits}f}" if number is not None else ""


# --- Activity rating ---


def add_activity_rating(doc, body: dict):
    ratings = rb.activity_ratings(body)
    page_break(doc)
    add_title(doc, "Client Perceived Activity Rating Chart")
    add_text(
        doc,
        "The Activity Rating Chart is a measure of the client's perceived ability level at the time of "
        "testing and is a representation of their subjective responses.",
        italic=True,
    )
    if not ratings:
        add_text(doc, "No activity ratings recorded.")
        return
    add_table(doc, ["Activity", "Rating"], [(name, "" if r is None else r) for name, r in ratings])


# --- Test data pages ---


def _unit(test: dict, summary: dict) -> str:
    if summary.get("unit") == "deg":
        return "°"
    raw = str(test.get("unitMeasure") or "").lower()
    return "lbs" if not raw or raw == "weight" else raw


def add_trial_table(doc, test: dict, summary: dict):
    left = read_trials(test.get("leftMeasurements"))
    right = read_trials(test.get("rightMeasurements"))
    single = read_trials(test.get("measurements"))
    unit = _unit(test, summary)
    is_rom = unit == "°"
    trials = max(len(left), len(right), len(single), 1)

    headers = ["Side"] + [f"Trial {i + 1}" for i in range(trials)] + [
        "Average (range of motion)" if is_rom else "Average (weight)", "CV",
    ]

    def cells(values: list[Optional[float]]) -> list[str]:
        return [_fmt(values[i]) if i < len(values) and values[i] is not None else "" for i in range(trials)]

    rows = []
    if left or right:
        labels = rom.full_area_evaluated_labels(test.get("testName"), test.get("testId")) or ("Left", "Right")
        rows.append([labels[0], *cells(left), f"{summary['left_average']:.1f} {unit}",
                     f"{summary['left_report_cv'] or 0}%"])
        rows.append([labels[1], *cells(right), f"{summary['right_average']:.1f} {unit}",
                     f"{summary['right_report_cv'] or 0}%"])
    else:
        values = [v for v in single if v is not None and v > 0]
        avg = sum(values) / len(values) if values else 0
        cv = report_cv({f"trial{i + 1}": v for i, v in enumerate(single)})
        rows.append(["Result", *cells(single), f"{avg:.1f} {unit}", f"{cv or 0}%"])
    add_table(doc, headers, rows)


def add_test_page(doc, test: dict):
    category = categorization.categorize_test(test)
    summary = summarize_test(test)
    add_title(doc, str(test.get("testName") or "Test"), size=Pt(10))
    add_text(doc, category, italic=True)
    add_trial_table(doc, test, summary)

    if rom.should_display_separate_side_rows(test.get("testId")) or category == categorization.STRENGTH:
        add_text(doc, f"Bilateral Deficiency: {summary['bilateral_deficiency']}%")
    if summary["left_norm"] or summary["right_norm"]:
        add_text(
            doc,
            f"% of Norm: {summary['left_percent_of_norm']:.0f}% / {summary['right_percent_of_norm']:.0f}%",
        )

    add_text(doc, CATEGORY_DESCRIPTIONS.get(category, ""))
    if test.get("comments"):
        add_text(doc, f"Comments: {test['comments']}")

    refs = references_for_test(test.get("testId"))
    if refs:
        add_text(doc, "References:", bold=True)
        for ref in refs:
            add_text(doc, format_reference(ref), space_after=2)

    images = test.get("serializedImages") or test.get("clientImages") or []
    if isinstance(images, list) and images:
        add_text(doc, "Client Images:", bold=True)
        add_image_grid(doc, images, per_row=4, width=1.5)


def add_test_data(doc, body: dict) -> int:
    """One page per non-occupational, non-cardio test; returns the page count."""
    tests = [
        t for t in rb.main_tests(body)
        if categorization.categorize_test(t) not in (categorization.OCCUPATIONAL, categorization.CARDIO)
    ]
    page_break(doc)
    add_title(doc, "Test Data", size=Pt(10))
    if not tests:
        add_text(doc, "No individual test data available.")
        return 0
    for index, test in enumerate(tests):
        if index:
            page_break(doc)
        add_test_page(doc, test)
    return len(tests)


# --- MTM ---


def _mtm_time(trial: dict) -> float:
    if isinstance(trial.get("testTime"), (int, float)):
        return float(trial["testTime"])
    time = trial.get("time")
    if isinstance(time, dict):
        return to_number(time.get("value")) or 0.0
    return 0.0


def _nested_value(trial: dict, key: str, fallback: str) -> Any:
    value = trial.get(key)
    if isinstance(value, dict) and value.get("value") is not None:
        return value["value"]
    return trial.get(fallback) or ""


def _completed_at(data: dict) -> str:
    raw = data.get("completedAt")
    if not raw:
        return ""
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00")).strftime("%m/%d/%Y %I:%M %p")
    except ValueError:
        return str(raw)


def mtm_rows(trials: list[dict]) -> tuple[list[list[Any]], dict[str, float]]:
    """Trial rows for an MTM block plus the averages of reps, time and %IS."""
    rows = []
    times, percents, reps_values = [], [], []
    for i, trial in enumerate(t for t in trials if isinstance(t, dict)):
        time = _mtm_time(trial)
        percent = to_number(trial.get("percentIS")) or 0.0
        reps = to_number(trial.get("reps")) or 0.0
        times.append(time)
        percents.append(percent)
        reps_values.append(reps)
        rows.append([
            trial.get("trial") or i + 1,
            trial.get("side") or "Both",
            _nested_value(trial, "weight", "plane"),
            _nested_value(trial, "distance", "position"),
            _fmt(reps, 0) if reps else "",
            f"{time:.1f}",
            f"{percent:.1f}",
            "",
        ])

    def mean(values: list[float]) -> float:
        return sum(values) / len(values) if values else 0.0

    return rows, {"reps": mean(reps_values), "time": mean(times), "percent": mean(percents)}


def add_mtm_block(doc, test_type: str, data: dict):
    name = data.get("testName") or test_type.replace("-", " ").title()
    trials = data.get("trials") if isinstance(data.get("trials"), list) else []
    rows, averages = mtm_rows(trials)

    table = doc.add_table(rows=0, cols=len(MTM_HEADERS))
    table.style = "Table Grid"
    when = _completed_at(data)
    add_spanning_row(table, f"{name} - {when}" if when else name, HEADER_FILL)
    cells = table.add_row().cells
    for idx, header in enumerate(MTM_HEADERS):
        set_cell_text(cells[idx], header, bold=True)
        set_cell_shading(cells[idx], GRID_HEADER_FILL)
    for values in rows:
        cells = table.add_row().cells
        for idx, value in enumerate(values):
            set_cell_text(cells[idx], value)
    cells = table.add_row().cells
    summary = ["Avg.", "", "", "", f"{averages['reps']:.1f}", f"{averages['time']:.2f}",
               f"{averages['percent']:.1f}", ""]
    for idx, value in enumerate(summary):
        set_cell_text(cells[idx], value, bold=idx == 0)
    add_spanning_row(table, f"Total %IS: {averages['percent']:.1f}", CATEGORY_FILL)

    test, handler = registry.find_test(test_type)
    config = handler.mtm_config(test.id) if test is not None and hasattr(handler, "mtm_config") else None
    if config is not None:
        add_text(
            doc,
            f"Protocol: {config.number_of_trials} trial(s) of {config.number_of_reps} rep(s), "
            f"{config.position}",
            italic=True,
        )

    hr = data.get("heartRate") if isinstance(data.get("heartRate"), dict) else {}
    pre = to_number(data.get("heartRatePre") if data.get("heartRatePre") is not None else hr.get("pre"))
    post = to_number(data.get("heartRatePost") if data.get("heartRatePost") is not None else hr.get("post"))
    if pre is not None or post is not None:
        add_text(doc, f"Heart Rate: Pre {_fmt(pre, 0) or '-'} bpm / Post {_fmt(post, 0) or '-'} bpm")
    doc.add_paragraph()


def add_mtm_content(doc, body: dict) -> int:
    entries = rb.mtm_entries(body)
    if not entries:
        return 0
    page_break(doc)
    add_title(doc, "Occupational Tasks Methods Time Measurement Analysis", size=Pt(10))
    for test_type, data in entries:
        add_mtm_block(doc, test_type, data)
    return len(entries)


# --- Cardio ---


def cardio_tests(body: dict) -> list[dict]:
    """Cardio tests from ``cardioTestData`` merged over matching test data entries."""
    main = {
        str(t.get("testId")): t for t in rb.main_tests(body)
        if categorization.categorize_test(t) == categorization.CARDIO
    }
    data = body.get("cardioTestData")
    merged: list[dict] = []
    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, dict):
                merged.append({**main.pop(key, {}), "testId": key, **value})
    merged.extend(main.values())
    return merged


def _cardio_rows(score: dict) -> list[tuple[str, str]]:
    labels = [
        ("age", "Age"),
        ("sex", "Sex"),
        ("startStage", "Start Stage"),
        ("stage", "Last Completed Stage"),
        ("minutes", "Total Time (min)"),
        ("heartRate", "Heart Rate (bpm)"),
        ("o2Cost", "O2 Cost (ml/kg/min)"),
        ("vo2Max", "VO2max (ml/kg/min)"),
        ("classification", "Classification"),
    ]
    rows = []
    for key, label in labels:
        value = score.get(key)
        if value is None or value == "":
            continue
        rows.append((label, str(value).title() if key == "sex" else str(value)))
    return rows


def add_cardio_content(doc, body: dict) -> int:
    tests = cardio_tests(body)
    if not tests:
        return 0
    claimant = rb.section(body, "claimantData")
    page_break(doc)
    add_title(doc, "Cardio Test Results", size=Pt(10))
    for test in tests:
        score = score_cardio_test(test, claimant)
        add_title(doc, str(test.get("testName") or test.get("testId") or "Cardio Test"))
        add_text(doc, _CARDIO_DESCRIPTIONS.get(score["kind"], CATEGORY_DESCRIPTIONS[categorization.CARDIO]))
        add_table(doc, ["Measure", "Result"], _cardio_rows(score))
        if score["kind"] == "bruce":
            doc.add_paragraph()
            add_table(doc, ["Stage", "Speed (mph)", "Incline (%)"], [
                (s.stage, s.speed_mph, s.incline_pct) for s in BRUCE_STAGES
            ])
        elif score["kind"] == "mcaft":
            doc.add_paragraph()
            add_table(doc, ["Stage", "Cadence (steps/min)", "O2 Cost Female", "O2 Cost Male"], [
                (stage, *values) for stage, values in MCAFT_STAGES.items()
            ])
        refs = references_for_test(test.get("testId"))
        if refs:
            add_text(doc, "References:", bold=True)
            for ref in refs:
                add_text(doc, format_reference(ref), space_after=2)
        doc.add_paragraph()
    return len(tests)


# --- Digital library ---


def add_digital_library(doc, body: dict) -> int:
    files = rb.library_files(body)
    page_break(doc)
    add_title(doc, "Digital Library", size=Pt(10))
    placed = add_image_grid(doc, files, per_row=3, width=2.0) if files else 0
    if not placed:
        add_text(doc, "No images found.", italic=True)
    return placed


def render_claimant_report(body: dict, today: Optional[date] = None) -> bytes:
    body = body or {}
    doc = new_document()
    build_executive_summary(doc, body, today)
    add_activity_rating(doc, body)
    pages = add_test_data(doc, body)
    mtm = add_mtm_content(doc, body)
    cardio = add_cardio_content(doc, body)
    add_digital_library(doc, body)
    logger.info(
        "Claimant report built for claimant %s (%d test pages, %d MTM blocks, %d cardio tests)",
        rb.section(body, "claimantData").get("claimantId") or "-",
        pages, mtm, cardio,
    )
    return to_bytes(doc)
