"""Invoice PDF rendering: determinism, empty invoices, signatures, pagination."""
import base64
from datetime import date
from decimal import Decimal
from io import BytesIO

from PIL import Image
from pypdf import PdfReader

from pharmabill.schemas.catalog import Customer, Product
from pharmabill.schemas.settings import AppSettings
from pharmabill.services.invoice_service import build_invoice, snapshot_item
from pharmabill.services.pdf_service import (
    RenderMode,
    generate_invoice_pdf,
    load_signature_image,
)


def _signature_png() -> str:
    buffer = BytesIO()
    Image.new("RGB", (120, 60), "white").save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def _invoice(lines=1, number="INV-001"):
    products = [
        Product(name=f"Medicine {n} & Co <strip>", batch_number=f"B{n:04d}", hsn_code="3004",
                expiry_date=date(2027, 1, 31), rate=Decimal("12.75"), gst_rate=Decimal("12"))
        for n in range(lines)
    ]
    return build_invoice(
        number,
        Customer(name="Rohit Verma", gstin="27AAPFU0939F1ZV"),
        [snapshot_item(p, 2) for p in products],
        invoice_date=date(2026, 10, 19),
    )


def test_renders_single_page_pdf():
    rendered = generate_invoice_pdf(_invoice(), AppSettings.defaults())
    assert rendered.content.startswith(b"%PDF"), "output must be a PDF byte stream"
    assert rendered.filename == "INV-001.pdf"
    assert rendered.page_count == 1
    assert rendered.mode == RenderMode.PRINT
    assert rendered.disposition == 'attachment; filename="INV-001.pdf"'


def test_render_is_deterministic():
    invoice = _invoice(lines=5)
    settings = AppSettings.defaults().model_copy(update={"signature_image": _signature_png()})
    first = generate_invoice_pdf(invoice, settings)
    second = generate_invoice_pdf(invoice, settings)
    assert first.content == second.content, "same invoice and settings must give identical bytes"


def test_print_and_preview_render_identical_content():
    invoice = _invoice(lines=3)
    printed = generate_invoice_pdf(invoice, AppSettings.defaults(), RenderMode.PRINT)
    preview = generate_invoice_pdf(invoice, AppSettings.defaults(), RenderMode.PREVIEW)
    assert printed.content == preview.content
    assert preview.disposition.startswith("inline")
    assert preview.stream().read() == preview.content


def test_zero_items_still_renders_document_shell():
    rendered = generate_invoice_pdf(_invoice(lines=0), AppSettings.defaults())
    assert rendered.content.startswith(b"%PDF")
    assert rendered.page_count == 1


def _page_texts(content: bytes) -> list:
    return [page.extract_text() for page in PdfReader(BytesIO(content)).pages]


def test_long_item_list_paginates():
    rendered = generate_invoice_pdf(_invoice(lines=80), AppSettings.defaults())
    assert rendered.page_count >= 2, f"80 lines should not fit one page, got {rendered.page_count}"

    pages = _page_texts(rendered.content)
    assert len(pages) == rendered.page_count
    continuation = pages[1]
    assert "Medicine" in continuation, "page 2 should carry item rows"
    for header in ("HSN", "Qty", "Amount"):
        assert header in continuation, f"table header {header!r} not repeated on page 2"


def test_very_long_terms_flow_onto_following_pages():
    terms = "Goods once sold will not be taken back. " * 150
    settings = AppSettings.defaults().model_copy(update={"terms": terms})
    rendered = generate_invoice_pdf(_invoice(), settings)
    assert rendered.content.startswith(b"%PDF")
    assert rendered.page_count >= 2, "terms longer than a page must continue on the next one"

    text = "".join(_page_texts(rendered.content))
    assert "Grand Total" in text
    assert "Authorized Signatory" in text
    assert "IFSC: HDFC0001234" in text, "bank details follow the terms on the last page"


def test_undecodable_signature_degrades_to_text_only():
    invoice = _invoice(lines=2)
    plain = generate_invoice_pdf(invoice, AppSettings.defaults().model_copy(update={"signature_image": ""}))
    for bad in ("not base64 at all!!", base64.b64encode(b"definitely not an image").decode(),
                "data:image/png;base64,AAAA"):
        settings = AppSettings.defaults().model_copy(update={"signature_image": bad})
        rendered = generate_invoice_pdf(invoice, settings)
        assert rendered.content == plain.content, f"bad signature {bad!r} should be skipped"


def test_valid_signature_is_embedded():
    invoice = _invoice()
    plain = generate_invoice_pdf(invoice, AppSettings.defaults())
    signed = generate_invoice_pdf(
        invoice,
        AppSettings.defaults().model_copy(update={"signature_image": f"data:image/png;base64,{_signature_png()}"}),
    )
    assert signed.content != plain.content
    assert b"/Subtype /Image" in signed.content


def test_load_signature_image():
    assert load_signature_image(None) is None
    assert load_signature_image("") is None
    assert load_signature_image("%%%") is None
    reader = load_signature_image(_signature_png())
    assert reader is not None
    assert reader.getSize() == (120, 60)


def test_optional_fields_missing_still_render():
    settings = AppSettings(pharmacy_name="Corner Chemist", address="", gstin="")
    invoice = build_invoice("INV-002", Customer(name="Walk-in"), [
        snapshot_item(Product(name="ORS Sachet", rate=Decimal("20"), gst_rate=Decimal("0")), 5)
    ])
    rendered = generate_invoice_pdf(invoice, settings)
    assert rendered.content.startswith(b"%PDF")
    assert rendered.filename == "INV-002.pdf"


def test_save_writes_named_file(tmp_path):
    rendered = generate_invoice_pdf(_invoice(number="INV-042"), AppSettings.defaults())
    path = rendered.save(tmp_path / "out")
    assert path.name == "INV-042.pdf"
    assert path.read_bytes() == rendered.content
