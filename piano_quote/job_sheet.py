"""
Job Sheet PDF Generator
=======================
One-page A4 job sheet for the crew and the customer's sign-off.

Layout flows top-down from a cursor measured from the top edge of the page:
every section drawer takes the cursor and returns the advanced one. Fixed
sections (header, customer, pickup, delivery, notes, signatures, footer)
always take the same height; the special-requirements box is sized from
the wrapped text and clamped so the sheet never spills onto a second page.
The footer sits directly under the signatures rather than at the bottom
edge, so short submissions give a compact sheet.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import Any, Callable

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from .business import BUSINESS, address_line
from .errors import RenderError
from .models import QuoteRequest

log = logging.getLogger("piano-quote.job-sheet")

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 25
LEFT = 35
INNER_LEFT = 45
CONTENT_WIDTH = PAGE_WIDTH - 2 * LEFT
VALUE_X = 100

HEADER_HEIGHT = 60
HEADER_GAP = 15
HEADING_GAP = 15
LINE_HEIGHT = 14
LOCATION_BOX_HEIGHT = 45
SECTION_GAP = 15
NOTES_BOX_HEIGHT = 45
SIGNATURE_BLOCK_HEIGHT = 40
FOOTER_HEIGHT = 24

SPECIAL_FONT = "Helvetica"
SPECIAL_FONT_SIZE = 12
SPECIAL_LINE_GAP = 1
SPECIAL_PADDING = 15
SPECIAL_GAP = 12
SPECIAL_MIN_HEIGHT = 25
SPECIAL_MAX_HEIGHT = 40
SPECIAL_TEXT_WIDTH = PAGE_WIDTH - 90

BLACK = HexColor("#000000")
GRAY = HexColor("#666666")
LABEL_GRAY = HexColor("#999999")
RULE = HexColor("#cccccc")
TINT = HexColor("#FFFEF0")

NOT_SPECIFIED = "Not specified"
NOTES_HINT = "Space for notes, quote amount, and additional information..."
INTEGER_RE = re.compile(r"-?\d+")


@dataclass(frozen=True)
class Section:
    name: str
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class JobSheet:
    pdf: bytes
    sections: list[Section] = field(default_factory=list)

    def section(self, name: str) -> Section | None:
        for s in self.sections:
            if s.name == name:
                return s
        return None


# ─── Measuring ────────────────────────────────────────────────────────────────

def format_steps(value: Any) -> str:
    """Step counts print as plain integers; anything that is not a whole number fails."""
    if isinstance(value, bool):
        raise RenderError(f"Step count must be a whole number, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str) and INTEGER_RE.fullmatch(value.strip()):
        return value.strip()
    raise RenderError(f"Step count must be a whole number, got {value!r}")


def wrap_lines(text: str, font: str, size: float, width: float) -> list[str]:
    """Wrap to ``width`` keeping the author's own line breaks."""
    lines: list[str] = []
    for paragraph in text.splitlines():
        lines.extend(simpleSplit(paragraph, font, size, width) or [""])
    return lines


def special_leading(size: float = SPECIAL_FONT_SIZE) -> float:
    return size * 1.2 + SPECIAL_LINE_GAP


def measure_special_requirements(
    text: str,
    width: float = SPECIAL_TEXT_WIDTH,
    minimum: float = SPECIAL_MIN_HEIGHT,
    maximum: float = SPECIAL_MAX_HEIGHT,
) -> float:
    """Box height for the special-requirements text, clamped to [minimum, maximum]."""
    lines = wrap_lines(text, SPECIAL_FONT, SPECIAL_FONT_SIZE, width)
    height = len(lines) * special_leading() + SPECIAL_PADDING
    return max(minimum, min(maximum, height))


# ─── Drawing primitives (top-down coordinates) ────────────────────────────────

def _baseline(y: float, size: float) -> float:
    return PAGE_HEIGHT - y - size * 0.8


def _text(c, x, y, text, font="Helvetica", size=10, color=BLACK):
    c.setFont(font, size)
    c.setFillColor(color)
    c.drawString(x, _baseline(y, size), text)


def _text_right(c, x_right, y, text, font="Helvetica", size=10, color=BLACK):
    c.setFont(font, size)
    c.setFillColor(color)
    c.drawRightString(x_right, _baseline(y, size), text)


def _text_centred(c, y, text, font="Helvetica", size=10, color=BLACK):
    c.setFont(font, size)
    c.setFillColor(color)
    c.drawCentredString(PAGE_WIDTH / 2, _baseline(y, size), text)


def _box(c, x, y, w, h, line_width=1.0, stroke=BLACK, fill=None):
    c.setLineWidth(line_width)
    c.setStrokeColor(stroke)
    if fill is not None:
        c.setFillColor(fill)
    c.rect(x, PAGE_HEIGHT - y - h, w, h, stroke=1, fill=1 if fill is not None else 0)


def _rule(c, x1, x2, y, line_width=1.0, color=BLACK):
    c.setLineWidth(line_width)
    c.setStrokeColor(color)
    c.line(x1, PAGE_HEIGHT - y, x2, PAGE_HEIGHT - y)


def _fit(text: str, font: str, size: float, width: float) -> str:
    lines = simpleSplit(text, font, size, width)
    return lines[0] if lines else ""


def _heading(c, y, title) -> float:
    _text(c, LEFT, y, title, "Helvetica-Bold", 12)
    return y + HEADING_GAP


# ─── Sections ─────────────────────────────────────────────────────────────────

def _draw_header(c, y, job_reference: str, generated_on: date) -> float:
    _box(c, MARGIN, y, PAGE_WIDTH - 2 * MARGIN, HEADER_HEIGHT, line_width=2)
    _text(c, LEFT, y + 10, "JOB SHEET", "Helvetica-Bold", 25)
    _text(c, LEFT, y + 40, BUSINESS["name"], "Helvetica", 10, GRAY)
    right = PAGE_WIDTH - 30
    _text_right(c, right, y + 10, f"REF: {job_reference}", "Helvetica-Bold", 11)
    _text_right(c, right, y + 30, f"Date: {generated_on.strftime('%d/%m/%Y')}", "Helvetica", 9, GRAY)
    return y + HEADER_HEIGHT + HEADER_GAP


def _draw_customer(c, y, quote: QuoteRequest) -> float:
    y = _heading(c, y, "CUSTOMER DETAILS")
    rows = [
        ("Name:", quote.full_name),
        ("Phone:", quote.phone),
        ("Email:", quote.email),
        ("Piano Type:", quote.piano_type or NOT_SPECIFIED),
    ]
    value_width = PAGE_WIDTH - LEFT - VALUE_X
    for i, (label, value) in enumerate(rows):
        _text(c, LEFT, y, label, "Helvetica-Bold", 10)
        _text(c, VALUE_X, y, _fit(value, "Helvetica", 10, value_width), "Helvetica", 10)
        y += LINE_HEIGHT if i < len(rows) - 1 else LINE_HEIGHT + 4
    _rule(c, LEFT, PAGE_WIDTH - LEFT, y, line_width=0.5, color=RULE)
    return y + SECTION_GAP


def _draw_location(c, y, title: str, address: str, steps: str) -> float:
    y = _heading(c, y, title)
    _box(c, LEFT, y, CONTENT_WIDTH, LOCATION_BOX_HEIGHT, line_width=1.5)
    _text(c, INNER_LEFT, y + 10, "ADDRESS:", "Helvetica-Bold", 11, LABEL_GRAY)
    for i, line in enumerate(simpleSplit(address, "Helvetica-Bold", 11, 260)[:2]):
        _text(c, INNER_LEFT, y + 22 + i * 12, line, "Helvetica-Bold", 11)
    steps_x = PAGE_WIDTH - 110
    _text(c, steps_x, y + 10, "STEPS:", "Helvetica-Bold", 11, LABEL_GRAY)
    _text(c, steps_x, y + 20, steps, "Helvetica-Bold", 22)
    return y + LOCATION_BOX_HEIGHT + SECTION_GAP


def _draw_special_requirements(c, y, text: str) -> float:
    y = _heading(c, y, "SPECIAL REQUIREMENTS")
    height = measure_special_requirements(text)
    _box(c, LEFT, y, CONTENT_WIDTH, height, line_width=1, fill=TINT)

    # Text past the box edge is clipped, not dropped from the record.
    c.saveState()
    clip = c.beginPath()
    clip.rect(LEFT, PAGE_HEIGHT - y - height, CONTENT_WIDTH, height)
    c.clipPath(clip, stroke=0, fill=0)
    line_y = y + 10
    for line in wrap_lines(text, SPECIAL_FONT, SPECIAL_FONT_SIZE, SPECIAL_TEXT_WIDTH):
        _text(c, INNER_LEFT, line_y, line, SPECIAL_FONT, SPECIAL_FONT_SIZE)
        line_y += special_leading()
    c.restoreState()
    return y + height + SPECIAL_GAP


def _draw_notes(c, y) -> float:
    y = _heading(c, y, "NOTES / QUOTE")
    _box(c, LEFT, y, CONTENT_WIDTH, NOTES_BOX_HEIGHT, line_width=1)
    _text(c, INNER_LEFT, y + 15, NOTES_HINT, "Helvetica", 11, LABEL_GRAY)
    return y + NOTES_BOX_HEIGHT + SECTION_GAP


def _draw_signatures(c, y) -> float:
    sig_width = (PAGE_WIDTH - 90) / 2
    right_x = PAGE_WIDTH / 2 + 5
    _text(c, LEFT, y, "CREW SIGNATURE:", "Helvetica-Bold", 12)
    _rule(c, LEFT, LEFT + sig_width, y + 20)
    _text(c, right_x, y, "CUSTOMER SIGNATURE:", "Helvetica-Bold", 12)
    _rule(c, right_x, PAGE_WIDTH - LEFT, y + 20)
    return y + SIGNATURE_BLOCK_HEIGHT


def _draw_footer(c, y) -> float:
    _text_centred(c, y, f"{BUSINESS['name']} • {address_line()}", "Helvetica-Bold", 10)
    _text_centred(
        c,
        y + 12,
        f"Tel: {BUSINESS['phone']} • Mobile: {BUSINESS['mobile']} • Email: {BUSINESS['email']}",
        "Helvetica-Bold",
        8,
    )
    return y + FOOTER_HEIGHT


# ─── Entry points ─────────────────────────────────────────────────────────────

def layout_job_sheet(
    quote: QuoteRequest,
    job_reference: str,
    generated_on: date | None = None,
) -> JobSheet:
    """Draw the job sheet and return the PDF together with each section's geometry."""
    pickup_steps = format_steps(quote.pickup_steps)
    delivery_steps = format_steps(quote.delivery_steps)
    generated_on = generated_on or date.today()

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Job Sheet {job_reference}")
    c.setAuthor(BUSINESS["name"])
    c.setSubject(f"Piano Move - {quote.full_name}")

    steps: list[tuple[str, Callable[..., float]]] = [
        ("header", partial(_draw_header, job_reference=job_reference, generated_on=generated_on)),
        ("customer", partial(_draw_customer, quote=quote)),
        ("pickup", partial(_draw_location, title="PICKUP LOCATION",
                           address=quote.pickup_address, steps=pickup_steps)),
        ("delivery", partial(_draw_location, title="DELIVERY LOCATION",
                             address=quote.delivery_address, steps=delivery_steps)),
    ]
    if quote.has_special_requirements:
        steps.append(("special_requirements",
                      partial(_draw_special_requirements, text=quote.special_requirements)))
    steps += [
        ("notes", _draw_notes),
        ("signatures", _draw_signatures),
        ("footer", _draw_footer),
    ]

    sections: list[Section] = []
    y = float(MARGIN)
    for name, draw in steps:
        end = draw(c, y)
        sections.append(Section(name=name, top=y, height=end - y))
        y = end

    c.showPage()
    c.save()
    log.info("Job sheet %s drawn, %d sections, content ends at %.0fpt", job_reference, len(sections), y)
    return JobSheet(pdf=buf.getvalue(), sections=sections)


def render_job_sheet(quote: QuoteRequest, job_reference: str, generated_on: date | None = None) -> bytes:
    return layout_job_sheet(quote, job_reference, generated_on).pdf
