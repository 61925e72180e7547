"""
Export component - saved calculations as a PDF report.

One block per calculation: calculator name, save date, unit system, each
input with its unit, the result (or an em dash when there is none), notes,
and whether the result sits in the optimal range.
"""

from __future__ import annotations

import io
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from cgwise.components.calculator import (
    CalculatorDefinition,
    CatalogPort,
    get_calculator_by_id,
    is_optimal,
)
from cgwise.components.history import SavedCalculation, SavedCalculationRepoPort

from .models import ExportOutput, ExportPdfInput

NO_VALUE = "—"
_MARGIN = 0.8 * inch
_LINE = 0.2 * inch


def format_value(value: float | None) -> str:
    if value is None:
        return NO_VALUE
    return f"{value:.6g}"


def _pdf_text(text: str) -> str:
    # Base-14 fonts lack Greek; micro sign renders the same
    return text.replace("\u03bc", "\u00b5")


def input_rows(
    calc: SavedCalculation, definition: CalculatorDefinition | None
) -> list[tuple[str, str]]:
    """(label, "value unit") for each stored input; bare keys when the field is unknown."""
    rows: list[tuple[str, str]] = []
    for key, value in calc.inputs.items():
        field = definition.get_field(key) if definition else None
        label = field.label if field else key
        unit = field.unit.for_system(calc.unit_system) if field else ""
        rows.append((label, f"{format_value(value)} {unit}".rstrip()))
    return rows


def _verdict(calc: SavedCalculation) -> str:
    optimal = is_optimal(calc.result)
    if optimal is None:
        return "No optimal range available"
    return "Within optimal range" if optimal else "Outside optimal range"


class _DefinitionLookup:
    """Definitions by id: the live catalog first, then the built-in set."""

    def __init__(self, catalog: CatalogPort | None) -> None:
        self._catalog = catalog
        self._cache: dict[str, CalculatorDefinition | None] = {}

    def get(self, calculator_id: str) -> CalculatorDefinition | None:
        if calculator_id not in self._cache:
            found = self._catalog.get(calculator_id) if self._catalog else None
            self._cache[calculator_id] = found or get_calculator_by_id(calculator_id)
        return self._cache[calculator_id]


@dataclass
class _Page:
    c: canvas.Canvas
    y: float
    width: float
    height: float

    def _font(self, bold: bool) -> str:
        return "Helvetica-Bold" if bold else "Helvetica"

    def line(self, text: str, *, size: int = 10, bold: bool = False, indent: float = 0.0) -> None:
        if self.y < _MARGIN + _LINE:
            self.c.showPage()
            self.y = self.height - _MARGIN
        self.c.setFont(self._font(bold), size)
        self.c.drawString(_MARGIN + indent, self.y, _pdf_text(text))
        self.y -= _LINE * (size / 10)

    def paragraph(
        self, text: str, *, size: int = 10, bold: bool = False, indent: float = 0.0
    ) -> None:
        """Wrapped to the printable width; explicit newlines start new lines."""
        max_width = self.width - 2 * _MARGIN - indent
        for raw in _pdf_text(text).splitlines() or [""]:
            for part in simpleSplit(raw, self._font(bold), size, max_width) or [""]:
                self.line(part, size=size, bold=bold, indent=indent)

    def gap(self, lines: float = 0.5) -> None:
        self.y -= _LINE * lines


def render_calculations_pdf(
    calculations: Sequence[SavedCalculation],
    title: str,
    generated_at: datetime,
    catalog: CatalogPort | None = None,
) -> bytes:
    definitions = _DefinitionLookup(catalog)
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(title)
    width, height = A4

    page = _Page(c=c, y=height - _MARGIN, width=width, height=height)
    page.line(title, size=16, bold=True)
    page.line(f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M')} UTC", size=9)
    page.line(f"Calculations: {len(calculations)}", size=9)
    page.gap()

    if not calculations:
        page.line("No saved calculations.")

    for calc in calculations:
        page.line(f"{calc.calculator_name} ({calc.calculator_short_name})", size=12, bold=True)
        page.line(
            f"Saved {calc.saved_at.strftime('%Y-%m-%d %H:%M')}  |  "
            f"Units: {calc.unit_system.capitalize()}",
            size=9,
        )
        for label, value in input_rows(calc, definitions.get(calc.calculator_id)):
            page.line(f"{label}: {value}", indent=0.2 * inch)

        unit = calc.result.unit.for_system(calc.unit_system)
        result_text = format_value(calc.result.value)
        if calc.result.value is not None:
            result_text = f"{result_text} {unit}"
        page.line(f"{calc.result.label}: {result_text}", bold=True, indent=0.2 * inch)
        page.line(_verdict(calc), size=9, indent=0.2 * inch)
        if calc.notes:
            page.paragraph(f"Notes: {calc.notes}", size=9, indent=0.2 * inch)
        page.gap()

    c.showPage()
    c.save()
    return buf.getvalue()


# --- Component Entry Points ---


def run_export_pdf(
    inp: ExportPdfInput,
    *,
    repo: SavedCalculationRepoPort,
    catalog: CatalogPort,
    generated_at: datetime,
) -> ExportOutput:
    calculations = repo.list_by_user(inp.actor.id, start=inp.start, end=inp.end)
    content = render_calculations_pdf(
        calculations,
        title=f"CGWise Calculations - {inp.actor.name}",
        generated_at=generated_at,
        catalog=catalog,
    )
    filename = f"cgwise-calculations-{generated_at.strftime('%Y%m%d')}.pdf"
    return ExportOutput(content=content, filename=filename, count=len(calculations))
