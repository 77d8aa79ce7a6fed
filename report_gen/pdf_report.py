"""
Executive summary as a PDF, for clients that cannot open DOCX.

Same sections and tables as the DOCX executive summary, laid out with
reportlab platypus. Images are not embedded.
"""
from __future__ import annotations

import io
import logging
from datetime import date
from typing import Any, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from fce import referral, rom
from fce.job_match import LEGEND, build_fad_table
from report_gen import body as rb
from report_gen.docx_common import clean_text
from report_gen.executive_summary import CROSSCHECK_HEADERS, FAD_HEADERS, LUMBAR_HEADERS, PDC_HEADERS

logger = logging.getLogger(__name__)

BRAND = colors.HexColor("#1E3A8A")
HEADER_BG = colors.HexColor("#2C3E50")
GRID = colors.HexColor("#BDC3C7")
STRIPE = colors.HexColor("#F8F9FA")
CATEGORY_BG = colors.HexColor("#DBEAFE")


class _Styles:
    def __init__(self):
        base = getSampleStyleSheet()
        self.title = ParagraphStyle("FceTitle", parent=base["Title"], fontSize=18, textColor=HEADER_BG)
        self.subtitle = ParagraphStyle("FceSubtitle", parent=base["Title"], fontSize=12, textColor=BRAND)
        self.heading = ParagraphStyle("FceHeading", parent=base["Heading2"], textColor=BRAND)
        self.question = ParagraphStyle("FceQuestion", parent=base["Normal"], fontSize=9, textColor=BRAND,
                                       fontName="Helvetica-Bold", spaceBefore=6)
        self.normal = ParagraphStyle("FceNormal", parent=base["Normal"], fontSize=9, leading=11)
        self.header_cell = ParagraphStyle("FceHeaderCell", parent=base["Normal"], fontSize=8,
                                          textColor=colors.white, fontName="Helvetica-Bold")
        self.cell = ParagraphStyle("FceCell", parent=base["Normal"], fontSize=8, leading=10)
        self.footer = ParagraphStyle("FceFooter", parent=base["Normal"], fontSize=8,
                                     textColor=colors.HexColor("#7F8C8D"), leading=10)


def _p(text: Any, style) -> Paragraph:
    return Paragraph(escape(clean_text(text)).replace("\n", "<br/>"), style)


def _table(headers: list[str], rows: list[list[Any]], styles: _Styles,
           col_widths: Optional[list[float]] = None, extra: Optional[list[tuple]] = None) -> Table:
    data = [[_p(h, styles.header_cell) for h in headers]]
    data += [[_p(value, styles.cell) for value in row] for row in rows]
    table = Table(data, colWidths=[w * inch for w in col_widths] if col_widths else None, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("GRID", (0, 0), (-1, -1), 0.5, GRID),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE]),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        *(extra or []),
    ]))
    return table


def _cover(story: list, body: dict, styles: _Styles, today: Optional[date]):
    clinic = rb.clinic_details(body)
    story.append(_p(clinic["name"], styles.subtitle))
    story.append(_p("Functional Capacity Evaluation", styles.title))
    story.append(_p("Executive Summary", styles.subtitle))
    story.append(Spacer(1, 24))
    story.append(_table(["", ""], [
        ["Claimant Name", rb.claimant_name(body)],
        ["Claim Number", rb.claim_number(body)],
        ["Evaluation Date", rb.evaluation_date(body, today)],
    ], styles, col_widths=[2.0, 4.5]))
    story.append(Spacer(1, 36))
    story.append(_p("CONFIDENTIAL INFORMATION ENCLOSED", styles.footer))
    for line in (clinic["name"], clinic["address"], clinic["phone_fax"]):
        if line:
            story.append(_p(line, styles.footer))


def _client_information(story: list, body: dict, styles: _Styles, today: Optional[date]):
    story.append(PageBreak())
    story.append(_p("Client Information", styles.heading))
    rows = [list(r) for r in rb.client_info_rows(body, today)]
    story.append(_table(["", "", "", ""], rows, styles, col_widths=[1.2, 2.2, 1.2, 2.2], extra=[
        ("BACKGROUND", (0, 1), (0, -1), CATEGORY_BG),
        ("BACKGROUND", (2, 1), (2, -1), CATEGORY_BG),
    ]))
    history = rb.section(body, "claimantData").get("history")
    if history:
        story.append(Spacer(1, 8))
        story.append(_p("History", styles.question))
        story.append(_p(history, styles.normal))


def _return_to_work(story: list, body: dict, styles: _Styles):
    status = rb.return_to_work_status(body)
    if not status.get("status"):
        return
    story.append(Spacer(1, 12))
    story.append(_p("Return to Work Status", styles.heading))
    story.append(_p(f"Selected Status: {status['status']}", styles.question))
    description = referral.RETURN_TO_WORK_OPTIONS.get(status["status"])
    if description:
        story.append(_p(description, styles.normal))
    if status.get("comments"):
        story.append(_p(f"Comments: {status['comments']}", styles.normal))


def _pdc_table(level: str, styles: _Styles) -> Table:
    rows = [[p.name, p.occasional, p.frequent, p.constant] for p in referral.PDC_LEVELS]
    extra = []
    for idx, pdc in enumerate(referral.PDC_LEVELS, start=1):
        if pdc.name == level:
            extra.append(("BACKGROUND", (0, idx), (-1, idx), CATEGORY_BG))
    return _table(PDC_HEADERS, rows, styles, col_widths=[1.6, 1.7, 1.6, 1.6], extra=extra)


def _referral_questions(story: list, body: dict, styles: _Styles):
    story.append(PageBreak())
    story.append(_p("Referral Questions", styles.heading))
    tests = rb.main_tests(body)
    for index, q in enumerate(referral.migrate_questions(rb.referral_questions(body))):
        question = referral.clean_question(q.get("question") or f"Question {index + 1}")
        if referral.is_conclusion_question(question):
            continue
        answer = str(q.get("answer") or "No answer provided.")
        story.append(_p(question, styles.question))
        pdc = referral.parse_pdc_answer(answer) if referral.is_pdc_question(question) else None
        if pdc is not None:
            level, comments = pdc
            story.append(_p(f"Physical Demand Level: {level}", styles.normal))
            story.append(Spacer(1, 4))
            story.append(_pdc_table(level, styles))
            if comments:
                story.append(_p(f"Additional Comments: {comments}", styles.normal))
            continue
        if "lumbar range of motion" in question.lower():
            rows = [[r["area"], r["data"], r["valid"], r["norm"], r["percent"]]
                    for r in rom.lumbar_motion_rows(tests)]
            story.append(_table(LUMBAR_HEADERS, rows, styles))
            story.append(Spacer(1, 4))
        story.append(_p(answer, styles.normal))


def _conclusions(story: list, body: dict, styles: _Styles, today: Optional[date]):
    story.append(Spacer(1, 12))
    story.append(_p("Conclusions", styles.heading))
    conclusion = rb.conclusion_data(body)
    for title, flags, vocabulary in (
        ("Observed Symptom Behavior (RPDR)", conclusion.get("rpdrBehaviors"), referral.RPDR_BEHAVIORS),
        ("Observable Signs of Effort (CTP)", conclusion.get("ctpBehaviors"), referral.CTP_BEHAVIORS),
    ):
        checked = referral.checked_behaviors(flags, vocabulary)
        if checked:
            story.append(_p(title, styles.question))
            for behaviour in checked:
                story.append(_p(f"- {behaviour}", styles.normal))
    for q in rb.referral_questions(body):
        if referral.is_conclusion_question(q.get("question")) and q.get("answer"):
            story.append(_p("Conclusion", styles.question))
            story.append(_p(q["answer"], styles.normal))
            break

    ev = rb.section(body, "evaluatorData")
    story.append(Spacer(1, 18))
    story.append(_p("__________________________________________", styles.normal))
    story.append(_p(f"Date: {(today or date.today()).strftime('%m/%d/%Y')}", styles.normal))
    if ev.get("name"):
        story.append(_p(ev["name"], styles.normal))
    if ev.get("licenseNo"):
        story.append(_p(f"License: {ev['licenseNo']}", styles.normal))


def _functional_abilities(story: list, body: dict, styles: _Styles):
    fad = build_fad_table(body)
    story.append(PageBreak())
    story.append(_p("Functional Abilities Determination and Job Match Results", styles.heading))

    rows = [row.cells() for row in fad.static_rows]
    extra = []
    for category, members in fad.sections.items():
        extra.append(("SPAN", (0, len(rows) + 1), (-1, len(rows) + 1)))
        extra.append(("BACKGROUND", (0, len(rows) + 1), (-1, len(rows) + 1), CATEGORY_BG))
        rows.append([category] + [""] * (len(FAD_HEADERS) - 1))
        rows.extend(row.cells() for row in members)
    rows.append(["Total Sit / Stand Time", f"{fad.total_sit_minutes} min", f"{fad.total_stand_minutes} min",
                 "", "", "", ""])
    story.append(_table(FAD_HEADERS, rows, styles,
                        col_widths=[1.3, 0.6, 0.6, 1.2, 1.1, 1.3, 0.7], extra=extra))
    story.append(Spacer(1, 4))
    story.append(_p(f"Legend: {LEGEND}", styles.footer))

    story.append(Spacer(1, 12))
    story.append(_p("Consistency Overview", styles.question))
    story.append(_table(["Observed Effort During Testing", "Total Noted for all Tested Activities"],
                        [list(r) for r in fad.effort_rows()], styles, col_widths=[3.0, 3.5]))
    story.append(Spacer(1, 8))
    check_rows = []
    for check in fad.crosschecks:
        if not check.applicable or check.passed is None:
            marks = ["N/A", "N/A"]
        else:
            marks = ["X", ""] if check.passed else ["", "X"]
        check_rows.append([check.name, check.description, *marks])
    story.append(_table(CROSSCHECK_HEADERS, check_rows, styles, col_widths=[1.8, 3.5, 0.6, 0.6]))
    return fad


def render_executive_summary_pdf(body: dict, today: Optional[date] = None) -> bytes:
    body = body or {}
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=LETTER,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title="Functional Capacity Evaluation",
    )
    styles = _Styles()
    story: list = []

    _cover(story, body, styles, today)
    _client_information(story, body, styles, today)
    _return_to_work(story, body, styles)
    _referral_questions(story, body, styles)
    _conclusions(story, body, styles, today)
    fad = _functional_abilities(story, body, styles)

    doc.build(story)
    logger.info(
        "Executive summary PDF built for claimant %s (%d FAD sections)",
        rb.section(body, "claimantData").get("claimantId") or "-",
        len(fad.sections),
    )
    return buf.getvalue()
