"""DOCX and PDF report generation for FCE evaluations."""

from report_gen.body import report_filename
from report_gen.claimant_report import render_claimant_report
from report_gen.executive_summary import render_executive_summary
from report_gen.pdf_report import render_executive_summary_pdf

__all__ = [
    "render_claimant_report",
    "render_executive_summary",
    "render_executive_summary_pdf",
    "report_filename",
]
