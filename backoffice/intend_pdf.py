from __future__ import annotations
from typing import Iterable

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import Intend, IntendItem


def _text(value) -> str:
    # Core fonts are latin-1 only.
    return str(value).encode("latin-1", "replace").decode("latin-1")


def generate_intend_pdf(intend: Intend, items: Iterable[IntendItem]) -> bytes:
    """Render a requisition sheet for an intend.

    Parameters
    ----------
    intend: Intend instance
    items: Iterable of IntendItem instances with ``ingredient`` loaded

    Returns
    -------
    bytes: PDF content
    """
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", style="B", size=14)
    pdf.cell(
        0, 10, _text(f"Intend {intend.intend_number}"),
        new_x=XPos.LMARGIN, new_y=YPos.NEXT,
    )
    pdf.set_font("Helvetica", size=11)
    created = intend.created_at.date().isoformat() if intend.created_at else ""
    pdf.cell(0, 7, f"Date: {created}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.cell(0, 7, f"Status: {intend.status}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if intend.vendor_id:
        pdf.cell(
            0, 7, _text(f"Vendor: {intend.vendor.name}"),
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
    if intend.notes:
        pdf.multi_cell(0, 7, _text(f"Notes: {intend.notes}"))
    pdf.ln(4)

    pdf.set_font("Helvetica", style="B", size=10)
    pdf.cell(12, 8, "#", border=1)
    pdf.cell(100, 8, "Ingredient", border=1)
    pdf.cell(40, 8, "Quantity", border=1)
    pdf.cell(30, 8, "Unit", border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", size=10)
    count = 0
    for count, line in enumerate(items, start=1):
        pdf.cell(12, 8, str(count), border=1)
        pdf.cell(100, 8, _text(line.ingredient.name), border=1)
        pdf.cell(40, 8, str(line.quantity_requested), border=1)
        pdf.cell(
            30, 8, _text(line.ingredient.unit), border=1,
            new_x=XPos.LMARGIN, new_y=YPos.NEXT,
        )
    pdf.ln(4)
    pdf.cell(0, 7, f"Total items: {count}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())
