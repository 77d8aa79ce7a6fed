"""
FCE Executive Summary (DOCX).

Section order: cover page, client information, return to work status,
referral questions, conclusions, and the functional abilities determination
with its consistency overview. The cover page carries the clinic footer;
every later page has a "Page N" header instead.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from fce import referral, rom
from fce.crosschecks import check_marks
from fce.job_match import LEGEND, FadTable, build_fad_table
from report_gen import body as rb
from report_gen.docx_common import (
    BRAND_COLOR,
    CATEGORY_FILL,
    HEADER_FILL,
    add_banner,
    add_image,
    add_image_grid,
    add_spanning_row,
    add_table,
    add_text,
    add_title,
    clean_text,
    new_document,
    page_break,
    set_cell_shading,
    set_cell_text,
    start_numbered_section,
    to_bytes,
)

logger = logging.getLogger(__name__)

FAD_HEADERS = [
    "Activity Tested",
    "Sit Time",
    "Stand Time",
    "Test Results",
    "Job Description",
    "Job Requirements",
    "Job Match (Yes/No)",
]
PDC_HEADERS = ["Physical Demand Level", "Occasional (0–33%)", "Frequent (34–66%)", "Constant (67–100%)"]
LUMBAR_HEADERS = ["Area", "Data", "Valid?", "Norm", "% of Norm"]
CROSSCHECK_HEADERS = ["Consistent Crosschecks", "Description", "Pass", "Fail"]

_RPDR_TITLE = "Observed Symptom Behavior / Reliability of Pain and Disability Reports (RPDR)"
_RPDR_TEXT = (
    "Observable demonstrations of the patient that were consistent or inconsistent "
    "with the medical diagnosis and reported pain level."
)
_CTP_TITLE = "Observable Signs of Effort / Competitive Testing Performance (CTP)"
_CTP_TEXT = "Observable behaviors in which a person attempts to gain an advantage to improve scores."


# --- Cover page ---


def add_cover_page(doc, body: dict, today: Optional[date] = None):
    clinic = rb.clinic_details(body)

    add_image(doc, rb.logo_source(body), width=1.5)
    add_text(doc, clinic["name"], bold=True, size=Pt(14), color=BRAND_COLOR,
             align=WD_ALIGN_PARAGRAPH.CENTER)
    add_text(doc, "Functional Capacity Evaluation", bold=True, size=Pt(18),
             align=WD_ALIGN_PARAGRAPH.CENTER)
    add_text(doc, "Executive Summary", bold=True, size=Pt(12), color=BRAND_COLOR,
             align=WD_ALIGN_PARAGRAPH.CENTER, space_after=24)

    for label, value in (
        ("Claimant Name", rb.claimant_name(body)),
        ("Claimant #", rb.claim_number(body)),
        ("Date of Evaluation(s)", rb.evaluation_date(body, today)),
    ):
        paragraph = doc.add_paragraph()
        paragraph.paragraph_format.left_indent = Inches(2.75)
        head = paragraph.add_run(f"{label}:  ")
        head.font.bold = True
        head.font.size = Pt(8)
        paragraph.add_run(clean_text(value)).font.size = Pt(8)

    footer = doc.sections[0].footer
    lines = [
        ("CONFIDENTIAL INFORMATION ENCLOSED", True, "808080"),
        (clinic["name"], True, None),
        (clinic["address"], False, None),
        (clinic["phone_fax"], False, None),
    ]
    first = True
    for text, bold, color in lines:
        if not text:
            continue
        paragraph = footer.paragraphs[0] if first else footer.add_paragraph()
        first = False
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = paragraph.add_run(clean_text(text))
        run.font.size = Pt(10)
        run.font.bold = bold
        if color:
            run.font.color.rgb = RGBColor.from_string(color)


# --- Client information ---


def add_client_information(doc, body: dict, today: Optional[date] = None):
    clinic = rb.clinic_details(body)
    add_image(doc, rb.logo_source(body), width=0.8)
    for idx, line in enumerate(("FCE Executive Summary", clinic["name"], clinic["address"], clinic["phone_fax"])):
        if line:
            add_text(doc, line, bold=True, size=Pt(12 if idx == 0 else 9),
                     color=BRAND_COLOR if idx == 0 else None,
                     align=WD_ALIGN_PARAGRAPH.CENTER, space_after=2)
    doc.add_paragraph()

    add_banner(doc, "Client Information")
    table = add_table(doc, None, rb.client_info_rows(body, today), widths=[1.2, 2.4, 1.2, 2.4])
    for row in table.rows:
        for idx in (0, 2):
            set_cell_text(row.cells[idx], row.cells[idx].text, bold=True)
            set_cell_shading(row.cells[idx], HEADER_FILL)

    history = rb.section(body, "claimantData").get("history") or body.get("history")
    if history:
        doc.add_paragraph()
        add_title(doc, "History")
        for line in str(history).split("\n"):
            add_text(doc, line)

    images = rb.pain_images(body)
    if images:
        doc.add_paragraph()
        add_title(doc, "Pain & Symptom Illustration")
        add_image_grid(doc, images, per_row=3, width=2.0)


# --- Return to work ---


def add_return_to_work_status(doc, body: dict):
    status = rb.return_to_work_status(body)
    if not status.get("status"):
        return
    page_break(doc)
    add_banner(doc, "Return to Work Status")
    paragraph = doc.add_paragraph()
    head = paragraph.add_run("Selected Status: ")
    head.font.bold = True
    head.font.size = Pt(8)
    value = paragraph.add_run(clean_text(status["status"]))
    value.font.size = Pt(8)
    value.font.color.rgb = RGBColor.from_string(BRAND_COLOR)

    description = referral.RETURN_TO_WORK_OPTIONS.get(status["status"])
    if description:
        add_text(doc, description)
    if status.get("comments"):
        add_text(doc, "Comments:", bold=True)
        for line in str(status["comments"]).split("\n"):
            add_text(doc, line)


# --- Referral questions ---


def _add_pdc_block(doc, level: str, comments: str):
    info = referral.PDC_BY_NAME.get(level)
    if info is None:
        add_text(doc, f"PDC: {level}")
    else:
        add_text(doc, f"*{level} which is in line with full return to duties.")
        add_title(doc, info.title)
        add_text(doc, info.description)

        table = doc.add_table(rows=0, cols=4)
        table.style = "Table Grid"
        add_spanning_row(table, "Physical Demand Characteristics of Work", HEADER_FILL)
        add_spanning_row(table, "(Dictionary of Occupational Titles - Volume II, Fourth Edition, Revised 1991)",
                         HEADER_FILL, bold=False)
        cells = table.add_row().cells
        for idx, text in enumerate(PDC_HEADERS):
            set_cell_text(cells[idx], text, bold=True, align=WD_ALIGN_PARAGRAPH.CENTER)
            set_cell_shading(cells[idx], HEADER_FILL)
        for pdc in referral.PDC_LEVELS:
            cells = table.add_row().cells
            selected = pdc.name == level
            for idx, text in enumerate((pdc.name, pdc.occasional, pdc.frequent, pdc.constant)):
                set_cell_text(cells[idx], text, bold=selected, align=WD_ALIGN_PARAGRAPH.CENTER)
                if selected:
                    set_cell_shading(cells[idx], CATEGORY_FILL)
        doc.add_paragraph()
    if comments:
        add_text(doc, f"Additional Comments: {comments}")


def add_lumbar_table(doc, tests: list[dict]):
    rows = rom.lumbar_motion_rows(tests)
    add_table(doc, LUMBAR_HEADERS, [
        (r["area"], r["data"], r["valid"], r["norm"], r["percent"]) for r in rows
    ])
    doc.add_paragraph()


def add_referral_questions(doc, body: dict):
    page_break(doc)
    add_banner(doc, "Referral Questions")
    tests = rb.main_tests(body)

    for index, q in enumerate(referral.migrate_questions(rb.referral_questions(body))):
        question = referral.clean_question(q.get("question") or f"Question {index + 1}")
        if referral.is_conclusion_question(question):
            continue
        answer = str(q.get("answer") or "No answer provided.")
        add_title(doc, question)

        pdc = referral.parse_pdc_answer(answer) if referral.is_pdc_question(question) else None
        if pdc is not None:
            _add_pdc_block(doc, *pdc)
        else:
            if "lumbar range of motion" in question.lower():
                add_lumbar_table(doc, tests)
            add_text(doc, answer)

        images = q.get("savedImageData") or []
        if isinstance(images, list) and images:
            add_image_grid(doc, images, per_row=3, width=2.0)


# --- Conclusions ---


def _add_behaviours(doc, title: str, text: str, behaviours: list[str]):
    if not behaviours:
        return
    add_title(doc, title)
    add_text(doc, text, italic=True)
    for behaviour in behaviours:
        add_text(doc, f"• {behaviour}", space_after=2)
    doc.add_paragraph()


def add_signature_block(doc, body: dict, today: Optional[date] = None):
    ev = rb.section(body, "evaluatorData")
    add_title(doc, "Signature of Evaluator")
    if not add_image(doc, body.get("signatureImage"), width=2.0, align=WD_ALIGN_PARAGRAPH.LEFT):
        add_text(doc, "__________________________________________")
    add_text(doc, f"Date: {(today or date.today()).strftime('%m/%d/%Y')}")
    if ev.get("name"):
        add_text(doc, ev["name"], bold=True)
    if ev.get("licenseNo"):
        add_text(doc, f"License: {ev['licenseNo']}")


def add_conclusions(doc, body: dict, today: Optional[date] = None):
    doc.add_paragraph()
    add_banner(doc, "Conclusions")
    conclusion = rb.conclusion_data(body)

    status = rb.return_to_work_status(body)
    if status.get("status"):
        add_title(doc, "Return to Work Status")
        add_text(doc, f"Status: {status['status']}")
        if status.get("comments"):
            add_text(doc, "Comments:", bold=True)
            for line in str(status["comments"]).split("\n"):
                add_text(doc, line)
        doc.add_paragraph()

    _add_behaviours(doc, _RPDR_TITLE, _RPDR_TEXT,
                    referral.checked_behaviors(conclusion.get("rpdrBehaviors"), referral.RPDR_BEHAVIORS))
    _add_behaviours(doc, _CTP_TITLE, _CTP_TEXT,
                    referral.checked_behaviors(conclusion.get("ctpBehaviors"), referral.CTP_BEHAVIORS))

    for q in rb.referral_questions(body):
        if referral.is_conclusion_question(q.get("question")) and q.get("answer"):
            add_title(doc, "Conclusion")
            for line in str(q["answer"]).split("\n"):
                add_text(doc, line)
            break

    doc.add_paragraph()
    add_signature_block(doc, body, today)


# --- Functional abilities determination ---


def add_fad_table(doc, fad: FadTable):
    table = add_table(doc, FAD_HEADERS, [row.cells() for row in fad.static_rows])
    for category, rows in fad.sections.items():
        add_spanning_row(table, category, CATEGORY_FILL)
        for fad_row in rows:
            cells = table.add_row().cells
            for idx, value in enumerate(fad_row.cells()):
                set_cell_text(cells[idx], value, align=WD_ALIGN_PARAGRAPH.CENTER)
    cells = table.add_row().cells
    totals = ["Total Sit / Stand Time", f"{fad.total_sit_minutes} min", f"{fad.total_stand_minutes} min"]
    for idx, value in enumerate(totals + [""] * (len(FAD_HEADERS) - len(totals))):
        set_cell_text(cells[idx], value, bold=idx == 0, align=WD_ALIGN_PARAGRAPH.CENTER)
        set_cell_shading(cells[idx], HEADER_FILL)
    return table


def add_functional_abilities(doc, body: dict):
    page_break(doc)
    add_title(doc, "Functional Abilities Determination and Job Match Results", size=Pt(10))
    fad = build_fad_table(body)
    add_fad_table(doc, fad)

    paragraph = doc.add_paragraph()
    head = paragraph.add_run("Legend: ")
    head.font.bold = True
    head.font.size = Pt(8)
    paragraph.add_run(LEGEND).font.size = Pt(8)

    doc.add_paragraph()
    add_title(doc, "Consistency Overview")
    add_table(doc, ["Observed Effort During Testing", "Total Noted for all Tested Activities"], fad.effort_rows())
    doc.add_paragraph()
    add_table(doc, CROSSCHECK_HEADERS, [
        (check.name, check.description, *check_marks(check)) for check in fad.crosschecks
    ])
    return fad


def build_executive_summary(doc, body: dict, today: Optional[date] = None):
    """Add every executive summary section to *doc*."""
    add_cover_page(doc, body, today)
    start_numbered_section(doc)
    add_client_information(doc, body, today)
    add_return_to_work_status(doc, body)
    add_referral_questions(doc, body)
    add_conclusions(doc, body, today)
    return add_functional_abilities(doc, body)


def render_executive_summary(body: dict, today: Optional[date] = None) -> bytes:
    body = body or {}
    doc = new_document()
    fad = build_executive_summary(doc, body, today)
    logger.info(
        "Executive summary built for claimant %s (%d FAD sections, %d tests)",
        rb.section(body, "claimantData").get("claimantId") or "-",
        len(fad.sections),
        fad.total_tests,
    )
    return to_bytes(doc)
