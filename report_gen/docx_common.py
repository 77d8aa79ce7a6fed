"""
Shared python-docx building blocks for the FCE reports.

Tables use the "Table Grid" style with yellow header cells; section titles
are single-cell yellow banners. Images arrive as data URLs or base64 strings
and are normalised through Pillow before insertion.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from typing import Any, Iterable, Optional

from docx import Document as DocxDocument
from docx.enum.section import WD_SECTION
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from lxml import etree
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

BRAND_COLOR = "1E3A8A"
HEADER_FILL = "FFFF99"
CATEGORY_FILL = "DBEAFE"
GRID_HEADER_FILL = "F3F4F6"
DEFAULT_FONT = "Arial"
NARROW_FONT = "Arial Narrow"
BODY_SIZE = Pt(8)

# Formats python-docx can embed directly
_DOCX_IMAGE_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "TIFF"}

# Control characters Word XML cannot hold (tab, newline and CR are allowed)
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color)


def clean_text(text: Any) -> str:
    """Text safe for a DOCX run; text pasted from Word can carry vertical tabs."""
    if text is None:
        return ""
    return _XML_INVALID_RE.sub("", str(text))


def new_document():
    doc = DocxDocument()
    for sec in doc.sections:
        sec.left_margin = Inches(0.5)
        sec.right_margin = Inches(0.5)
        sec.top_margin = Inches(1.0)
        sec.bottom_margin = Inches(0.5)
    normal = doc.styles["Normal"]
    normal.font.name = DEFAULT_FONT
    normal.font.size = Pt(10)
    return doc


def set_cell_shading(cell, hex_color: str):
    """Set background shading on a DOCX table cell."""
    shading = etree.SubElement(cell._element.get_or_add_tcPr(), qn("w:shd"))
    shading.set(qn("w:fill"), hex_color)
    shading.set(qn("w:val"), "clear")


def set_cell_text(cell, text: Any, bold: bool = False, size=BODY_SIZE,
                  align=None, color: Optional[str] = None, italic: bool = False):
    cell.text = ""
    paragraph = cell.paragraphs[0]
    run = paragraph.add_run(clean_text(text))
    run.font.size = size
    run.font.bold = bold
    run.font.italic = italic
    if color:
        run.font.color.rgb = _rgb(color)
    if align is not None:
        paragraph.alignment = align
    return run


def add_text(doc, text: str, bold: bool = False, size=BODY_SIZE, color: Optional[str] = None,
             italic: bool = False, align=None, space_after: int = 4):
    paragraph = doc.add_paragraph()
    run = paragraph.add_run(clean_text(text))
    run.font.size = size
    run.font.bold = bold
    run.font.italic = italic
    if color:
        run.font.color.rgb = _rgb(color)
    if align is not None:
        paragraph.alignment = align
    paragraph.paragraph_format.space_after = Pt(space_after)
    return paragraph


def add_title(doc, text: str, size=Pt(8)):
    """Brand-coloured bold heading line used above questions and tables."""
    return add_text(doc, text, bold=True, size=size, color=BRAND_COLOR, space_after=6)


def add_banner(doc, text: str):
    """Full-width single-cell yellow section header."""
    table = doc.add_table(rows=1, cols=1)
    table.style = "Table Grid"
    cell = table.cell(0, 0)
    set_cell_text(cell, text, bold=True)
    set_cell_shading(cell, HEADER_FILL)
    doc.add_paragraph()
    return table


def add_table(doc, headers: list[str] | None, rows: Iterable[Iterable[Any]],
              header_fill: str = HEADER_FILL, widths: list[float] | None = None,
              align=WD_ALIGN_PARAGRAPH.CENTER):
    """Grid table with an optional shaded header row; cells are stringified."""
    rows = [list(r) for r in rows]
    cols = len(headers) if headers else max((len(r) for r in rows), default=1)
    table = doc.add_table(rows=0, cols=cols)
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    if headers:
        cells = table.add_row().cells
        for idx, text in enumerate(headers):
            set_cell_text(cells[idx], text, bold=True, align=align)
            set_cell_shading(cells[idx], header_fill)
    for values in rows:
        cells = table.add_row().cells
        for idx in range(cols):
            value = values[idx] if idx < len(values) else ""
            set_cell_text(cells[idx], value, align=align)
    if widths:
        for row in table.rows:
            for idx, width in enumerate(widths[:cols]):
                row.cells[idx].width = Inches(width)
    return table


def add_spanning_row(table, text: str, fill: str, bold: bool = True):
    """Append a row whose cells are merged into one shaded cell."""
    cells = table.add_row().cells
    merged = cells[0].merge(cells[-1]) if len(cells) > 1 else cells[0]
    set_cell_text(merged, text, bold=bold)
    set_cell_shading(merged, fill)
    return merged


def page_break(doc):
    doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)


def _decode(source: Any) -> Optional[bytes]:
    if isinstance(source, dict):
        source = source.get("dataUrl") or source.get("data") or source.get("url") or source.get("src")
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if not isinstance(source, str) or not source:
        return None
    if source.startswith("data:"):
        _, _, payload = source.partition(",")
        return base64.b64decode(payload)
    if source.startswith(("http://", "https://", "/")):
        # Remote and storage paths are resolved by the client before posting
        logger.info("Skipping non-inline image source")
        return None
    return base64.b64decode(source)


def image_stream(source: Any) -> Optional[io.BytesIO]:
    """PNG/JPEG stream for an inline image, or None if it cannot be read."""
    try:
        raw = _decode(source)
        if not raw:
            return None
        with Image.open(io.BytesIO(raw)) as img:
            if img.format in _DOCX_IMAGE_FORMATS:
                return io.BytesIO(raw)
            out = io.BytesIO()
            img.convert("RGBA").save(out, format="PNG")
            out.seek(0)
            return out
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError) as exc:
        logger.warning("Unreadable image skipped: %s", exc)
        return None


def add_image(doc, source: Any, width: float = 1.5, align=WD_ALIGN_PARAGRAPH.CENTER) -> bool:
    stream = image_stream(source)
    if stream is None:
        return False
    paragraph = doc.add_paragraph()
    paragraph.alignment = align
    paragraph.add_run().add_picture(stream, width=Inches(width))
    return True


def add_image_grid(doc, sources: list[Any], per_row: int = 3, width: float = 2.0) -> int:
    """Lay images out in a borderless table; returns how many were placed."""
    streams = [s for s in (image_stream(src) for src in sources) if s is not None]
    if not streams:
        return 0
    rows = (len(streams) + per_row - 1) // per_row
    table = doc.add_table(rows=rows, cols=per_row)
    table.alignment = WD_TABLE_ALIGNMENT.CENTER
    for idx, stream in enumerate(streams):
        cell = table.cell(idx // per_row, idx % per_row)
        paragraph = cell.paragraphs[0]
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        paragraph.add_run().add_picture(stream, width=Inches(width))
    return len(streams)


def _add_field(run, instruction: str):
    begin = etree.SubElement(run._r, qn("w:fldChar"))
    begin.set(qn("w:fldCharType"), "begin")
    instr = etree.SubElement(run._r, qn("w:instrText"))
    instr.set("{http://www.w3.org/XML/1998/namespace}space", "preserve")
    instr.text = instruction
    end = etree.SubElement(run._r, qn("w:fldChar"))
    end.set(qn("w:fldCharType"), "end")


def start_numbered_section(doc, first_page_number: int = 2):
    """New page section with a right-aligned "Page N" header and no footer.

    The cover section before it keeps its own footer.
    """
    sec = doc.add_section(WD_SECTION.NEW_PAGE)
    sec.footer.is_linked_to_previous = False
    sec.header.is_linked_to_previous = False
    paragraph = sec.header.paragraphs[0]
    paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    label = paragraph.add_run("Page ")
    label.font.name = NARROW_FONT
    label.font.size = BODY_SIZE
    number = paragraph.add_run()
    number.font.name = NARROW_FONT
    number.font.size = BODY_SIZE
    _add_field(number, "PAGE")

    pg_num = OxmlElement("w:pgNumType")
    pg_num.set(qn("w:start"), str(first_page_number))
    # sectPr children are ordered; pgNumType precedes cols
    cols = sec._sectPr.find(qn("w:cols"))
    if cols is not None:
        cols.addprevious(pg_num)
    else:
        sec._sectPr.append(pg_num)
    return sec


def to_bytes(doc) -> bytes:
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()
