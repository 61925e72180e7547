"""
Export component - PDF report of saved calculations.
"""

from .component import (
    NO_VALUE,
    format_value,
    input_rows,
    render_calculations_pdf,
    run_export_pdf,
)
from .models import ExportOutput, ExportPdfInput

__all__ = [
    "run_export_pdf",
    "render_calculations_pdf",
    "format_value",
    "input_rows",
    "NO_VALUE",
    "ExportPdfInput",
    "ExportOutput",
]
