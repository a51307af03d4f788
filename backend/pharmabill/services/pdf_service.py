"""
PDF Invoice Generation Service
Lays out an invoice and the pharmacy's settings on A4 pages.

Output is deterministic: the same invoice and settings always produce the
same bytes (no creation timestamp or random document id is embedded).
"""
import base64
import logging
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Flowable, HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from pharmabill.schemas.invoice import Invoice
from pharmabill.schemas.settings import AppSettings
from pharmabill.services.pdf_layout import (
    BOLD_FONT,
    ITEM_COLUMNS,
    MARGIN_BOTTOM,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    MARGIN_TOP,
    FooterLayout,
    compute_footer_layout,
    format_quantity,
    split_footer_layout,
)

logger = logging.getLogger(__name__)

HEADER_FILL = colors.HexColor("#0ea5e9")
SUMMARY_FILL = colors.HexColor("#f8fafc")
DARK_TEXT = colors.HexColor("#282828")
MUTED_TEXT = colors.HexColor("#505050")
FOOTER_TEXT = colors.HexColor("#646464")
RULE_COLOR = colors.HexColor("#c8c8c8")


class RenderMode(str, Enum):
    PRINT = "print"  # download as <invoice number>.pdf
    PREVIEW = "preview"  # inline viewing


@dataclass(frozen=True)
class RenderedInvoice:
    filename: str
    content: bytes
    page_count: int
    mode: RenderMode = RenderMode.PRINT

    media_type = "application/pdf"

    @property
    def disposition(self) -> str:
        kind = "attachment" if self.mode == RenderMode.PRINT else "inline"
        return f'{kind}; filename="{self.filename}"'

    def stream(self) -> BytesIO:
        """In-memory handle for viewers, positioned at the start."""
        return BytesIO(self.content)

    def save(self, directory) -> Path:
        path = Path(directory) / self.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
        logger.info(f"[PDF] Saved {path}")
        return path


def load_signature_image(data: Optional[str]) -> Optional[ImageReader]:
    """Decode a base64 (or data: URL) signature. Returns None when it can't be used."""
    if not data:
        return None
    try:
        payload = data.split(",", 1)[1] if data.startswith("data:") else data
        reader = ImageReader(BytesIO(base64.b64decode(payload, validate=True)))
        reader.getSize()
        return reader
    except Exception as e:
        logger.warning(f"[PDF] Skipping signature image: {type(e).__name__}: {e}")
        return None


class InvoiceFooter(Flowable):
    """Totals box, terms, bank details and signature, drawn from a precomputed layout.

    Splits across pages when the terms run long; see split_footer_layout.
    """

    def __init__(self, layout: FooterLayout, signature: Optional[ImageReader] = None):
        super().__init__()
        self.layout = layout
        self.signature = signature

    def wrap(self, availWidth, availHeight):
        self.width = availWidth
        self.height = self.layout.height * mm
        return self.width, self.height

    def split(self, availWidth, availHeight):
        parts = split_footer_layout(self.layout, availHeight / mm)
        if parts is None:
            return []
        head, tail = parts
        return [InvoiceFooter(head, self.signature), InvoiceFooter(tail)]

    def _y(self, offset_mm: float) -> float:
        return self.height - offset_mm * mm

    def draw(self):
        canv = self.canv
        summary = self.layout.block("summary")
        if summary is not None:
            canv.setFillColor(SUMMARY_FILL)
            canv.rect(summary.x * mm, self._y(summary.bottom), summary.width * mm, summary.height * mm,
                      fill=1, stroke=0)

        for block in self.layout.blocks.values():
            canv.setFillColor(DARK_TEXT if block.name == "summary" else FOOTER_TEXT)
            for line in block.lines:
                canv.setFont(line.font, line.size)
                if line.align == "right":
                    canv.drawRightString(line.x * mm, self._y(line.baseline), line.text)
                else:
                    canv.drawString(line.x * mm, self._y(line.baseline), line.text)

        box = self.layout.signature_image
        if self.signature is not None and box is not None:
            try:
                canv.drawImage(self.signature, box.x * mm, self._y(box.bottom), box.width * mm,
                               box.height * mm, mask="auto", preserveAspectRatio=True)
            except Exception as e:
                logger.warning(f"[PDF] Signature image could not be drawn: {type(e).__name__}: {e}")


def _styles() -> dict:
    styles = getSampleStyleSheet()
    return {
        "pharmacy": ParagraphStyle(
            "PharmacyName",
            parent=styles["Heading1"],
            fontSize=20,
            leading=24,
            textColor=DARK_TEXT,
            spaceAfter=2,
        ),
        "header": ParagraphStyle(
            "HeaderLine",
            parent=styles["Normal"],
            fontSize=10,
            leading=14,
            textColor=MUTED_TEXT,
        ),
        "title": ParagraphStyle(
            "InvoiceTitle",
            parent=styles["Normal"],
            fontName=BOLD_FONT,
            fontSize=12,
            leading=16,
            textColor=DARK_TEXT,
        ),
        "info": ParagraphStyle(
            "InvoiceInfo",
            parent=styles["Normal"],
            fontSize=10,
            leading=14,
            textColor=DARK_TEXT,
        ),
        "cell": ParagraphStyle(
            "ItemCell",
            parent=styles["Normal"],
            fontSize=9,
            leading=11,
        ),
    }


def _header(settings: AppSettings, styles: dict) -> list:
    elements = [Paragraph(escape(settings.pharmacy_name), styles["pharmacy"])]
    if settings.address:
        elements.append(Paragraph(escape(settings.address), styles["header"]))

    contact = []
    if settings.phone:
        contact.append(f"Phone: {settings.phone}")
    if settings.gstin:
        contact.append(f"GSTIN: {settings.gstin}")
    if settings.dl_number:
        contact.append(f"D.L. No: {settings.dl_number}")
    if contact:
        elements.append(Paragraph(escape(" | ".join(contact)), styles["header"]))

    elements.append(Spacer(1, 2 * mm))
    elements.append(HRFlowable(width="100%", thickness=0.7, color=RULE_COLOR, spaceAfter=4 * mm))
    return elements


def _info_band(invoice: Invoice, styles: dict) -> Table:
    left = [
        Paragraph("TAX INVOICE", styles["title"]),
        Paragraph(f"Invoice No: {escape(invoice.invoice_number)}", styles["info"]),
        Paragraph(f"Date: {invoice.invoice_date.isoformat()}", styles["info"]),
    ]
    right = [
        Spacer(1, 16),
        Paragraph(f"Customer: {escape(invoice.customer_name)}", styles["info"]),
    ]
    if invoice.customer_gst:
        right.append(Paragraph(f"GSTIN: {escape(invoice.customer_gst)}", styles["info"]))

    band = Table([[left, right]], colWidths=[106 * mm, 76 * mm])
    band.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4 * mm),
    ]))
    return band


def _item_table(invoice: Invoice, styles: dict) -> Table:
    rows = [[header for header, _, _ in ITEM_COLUMNS]]
    for index, item in enumerate(invoice.items, start=1):
        description = f"<b>{escape(item.name)}</b>"
        if item.batch_number:
            description += f"<br/>Batch: {escape(item.batch_number)}"
        rows.append([
            str(index),
            Paragraph(description, styles["cell"]),
            item.hsn_code,
            item.expiry_date.isoformat() if item.expiry_date else "",
            format_quantity(item.quantity),
            f"{item.rate:.2f}",
            f"{format_quantity(item.gst_rate)}%",
            f"{item.total_amount:.2f}",
        ])

    table = Table(rows, colWidths=[width * mm for _, width, _ in ITEM_COLUMNS], repeatRows=1)
    style = [
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), BOLD_FONT),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for column, (_, _, align) in enumerate(ITEM_COLUMNS):
        style.append(("ALIGN", (column, 0), (column, -1), align))
    table.setStyle(TableStyle(style))
    return table


def generate_invoice_pdf(
    invoice: Invoice,
    settings: AppSettings,
    mode: RenderMode = RenderMode.PRINT,
) -> RenderedInvoice:
    """
    Generate the PDF for an invoice

    Args:
        invoice: Fully computed invoice; a deep copy is rendered, later edits don't show
        settings: Issuer details, terms, bank details and signature
        mode: PRINT for a download, PREVIEW for inline viewing; content is identical

    Returns:
        RenderedInvoice holding the PDF bytes and its filename
    """
    invoice = invoice.model_copy(deep=True)
    styles = _styles()

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN_LEFT,
        rightMargin=MARGIN_RIGHT,
        topMargin=MARGIN_TOP,
        bottomMargin=MARGIN_BOTTOM,
        title=f"Invoice {invoice.invoice_number}",
        author=settings.pharmacy_name,
        creator="pharmabill",
        invariant=1,
    )

    signature = load_signature_image(settings.signature_image)
    layout = compute_footer_layout(invoice, settings, has_signature=signature is not None)

    elements = _header(settings, styles)
    elements.append(_info_band(invoice, styles))
    elements.append(_item_table(invoice, styles))
    elements.append(InvoiceFooter(layout, signature))

    doc.build(elements)

    rendered = RenderedInvoice(
        filename=f"{invoice.invoice_number}.pdf",
        content=buffer.getvalue(),
        page_count=doc.page,
        mode=RenderMode(mode),
    )
    logger.info(
        f"[PDF] Rendered {rendered.filename}: {len(invoice.items)} lines, "
        f"{rendered.page_count} page(s), mode={rendered.mode.value}"
    )
    return rendered
