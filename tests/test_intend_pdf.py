from datetime import datetime
from types import SimpleNamespace

from backoffice.intend_pdf import generate_intend_pdf


def test_generate_intend_pdf_basic():
    intend = SimpleNamespace(
        intend_number="INT-20240501-001",
        created_at=datetime(2024, 5, 1, 9, 30),
        status="pending",
        vendor_id=None,
        notes="Weekend prep, cap ₹500",
    )
    item = SimpleNamespace(
        ingredient=SimpleNamespace(name="Jaggery", unit="kg"), quantity_requested=5
    )
    pdf = generate_intend_pdf(intend, [item])
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 100
