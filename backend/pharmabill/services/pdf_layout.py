"""
Page geometry and footer layout for the invoice PDF.

Everything here is plain arithmetic in millimetres so the layout can be
checked without rendering. Footer coordinates are local to the footer band:
x from the left margin, y growing downward from the top of the band.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_LEFT = 14 * mm
MARGIN_RIGHT = 14 * mm
MARGIN_TOP = 12 * mm
MARGIN_BOTTOM = 15 * mm
CONTENT_WIDTH_MM = 182

# (header, width in mm, alignment)
ITEM_COLUMNS = [
    ("Sr", 10, "CENTER"),
    ("Item", 62, "LEFT"),
    ("HSN", 20, "CENTER"),
    ("Exp", 22, "CENTER"),
    ("Qty", 14, "CENTER"),
    ("Rate", 20, "RIGHT"),
    ("GST", 14, "CENTER"),
    ("Amount", 20, "RIGHT"),
]

BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

# Footer band
FIRST_ROW_Y = 10  # first totals baseline, below the table's end
SUMMARY_BOX = (112, FIRST_ROW_Y - 5, 70, 35)  # x, top, width, height
SUMMARY_FONT_SIZE = 10
GRAND_TOTAL_FONT_SIZE = 12

TERMS_FONT_SIZE = 8
TERMS_WIDTH_MM = 90
TERMS_LINE_HEIGHT_MM = 4
TERMS_LABEL_Y = FIRST_ROW_Y + 15
TERMS_FIRST_LINE_Y = FIRST_ROW_Y + 20
TERMS_LABEL = "Terms & Conditions:"

BANK_GAP_MM = 8
BANK_LINE_HEIGHT_MM = 5

# Terms and bank details may continue on the next page; totals and signature may not.
FLOWING_BLOCKS = ("terms", "bank")
CONTINUATION_FIRST_Y = 5  # first baseline of footer text carried to a new page

SIGNATURE_BOX = (136, FIRST_ROW_Y + 35, 30, 15)
SIGNATURE_CAPTION_X = 141
SIGNATURE_CAPTION_GAP_MM = 5

# Text blocks extend this far above a baseline and below the last one.
ASCENT_MM = 3
DESCENT_MM = 1.5
BOTTOM_PADDING_MM = 4


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    baseline: float
    font: str = BODY_FONT
    size: float = TERMS_FONT_SIZE
    align: str = "left"  # left | right


@dataclass
class Block:
    name: str
    x: float
    top: float
    width: float
    height: float
    lines: List[TextLine] = field(default_factory=list)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def overlaps(self, other: "Block") -> bool:
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.top
            or other.bottom <= self.top
        )


@dataclass
class FooterLayout:
    blocks: Dict[str, Block]
    terms_lines: List[str]
    height: float  # mm
    signature_image: Optional[Block] = None  # sits inside the signature block

    def block(self, name: str) -> Optional[Block]:
        return self.blocks.get(name)


def format_money(value) -> str:
    return f"Rs. {Decimal(str(value)):.2f}"


def format_quantity(value) -> str:
    """Whole quantities print without decimals: 2, not 2.00."""
    quantity = Decimal(str(value))
    if quantity == quantity.to_integral_value():
        return str(int(quantity))
    return format(quantity.normalize(), "f")


def wrap_terms(terms: str) -> List[str]:
    """Word-wrap the terms text to the terms column width."""
    if not terms or not terms.strip():
        return []
    return simpleSplit(terms.strip(), BODY_FONT, TERMS_FONT_SIZE, TERMS_WIDTH_MM * mm)


def _text_block(name: str, x: float, width: float, lines: List[TextLine]) -> Block:
    top = lines[0].baseline - ASCENT_MM
    bottom = lines[-1].baseline + DESCENT_MM
    return Block(name=name, x=x, top=top, width=width, height=bottom - top, lines=lines)


def _summary_block(invoice) -> Block:
    x, top, width, height = SUMMARY_BOX
    label_x = x + 5
    value_x = x + width - 5
    rows = [
        ("Total Qty:", format_quantity(invoice.total_quantity), FIRST_ROW_Y),
        ("Sub Total:", format_money(invoice.sub_total), FIRST_ROW_Y + 6),
        ("Tax (GST):", format_money(invoice.total_tax), FIRST_ROW_Y + 12),
    ]
    lines = []
    for label, value, baseline in rows:
        lines.append(TextLine(label, label_x, baseline, size=SUMMARY_FONT_SIZE))
        lines.append(TextLine(value, value_x, baseline, size=SUMMARY_FONT_SIZE, align="right"))

    grand_y = FIRST_ROW_Y + 22
    lines.append(TextLine("Grand Total:", label_x, grand_y, BOLD_FONT, GRAND_TOTAL_FONT_SIZE))
    lines.append(TextLine(format_money(invoice.grand_total), value_x, grand_y, BOLD_FONT,
                          GRAND_TOTAL_FONT_SIZE, "right"))
    return Block("summary", x, top, width, height, lines)


def _bank_rows(settings) -> List[str]:
    rows = []
    if settings.bank_name:
        rows.append(f"Bank: {settings.bank_name}")
    if settings.account_number:
        rows.append(f"A/c No: {settings.account_number}")
    if settings.ifsc:
        rows.append(f"IFSC: {settings.ifsc}")
    return rows


def compute_footer_layout(invoice, settings, has_signature: bool = False) -> FooterLayout:
    """Place totals, terms, bank details and signature below the item table.

    Bank details start below the last wrapped terms line, so long terms
    push them down instead of overlapping.
    """
    blocks = {"summary": _summary_block(invoice)}

    terms_lines = wrap_terms(settings.terms)
    if terms_lines:
        lines = [TextLine(TERMS_LABEL, 0, TERMS_LABEL_Y)]
        lines += [
            TextLine(text, 0, TERMS_FIRST_LINE_Y + i * TERMS_LINE_HEIGHT_MM)
            for i, text in enumerate(terms_lines)
        ]
        blocks["terms"] = _text_block("terms", 0, TERMS_WIDTH_MM, lines)

    bank_rows = _bank_rows(settings)
    if bank_rows:
        start = TERMS_FIRST_LINE_Y + len(terms_lines) * TERMS_LINE_HEIGHT_MM + BANK_GAP_MM
        lines = [TextLine("Bank Details:", 0, start, BOLD_FONT)]
        lines += [
            TextLine(text, 0, start + (i + 1) * BANK_LINE_HEIGHT_MM)
            for i, text in enumerate(bank_rows)
        ]
        blocks["bank"] = _text_block("bank", 0, TERMS_WIDTH_MM, lines)

    sig_x, sig_top, sig_width, sig_height = SIGNATURE_BOX
    caption_y = sig_top + sig_height + SIGNATURE_CAPTION_GAP_MM
    caption = TextLine("Authorized Signatory", SIGNATURE_CAPTION_X, caption_y)
    blocks["signature"] = Block(
        name="signature",
        x=sig_x,
        top=sig_top,
        width=CONTENT_WIDTH_MM - sig_x,
        height=caption_y + DESCENT_MM - sig_top,
        lines=[caption],
    )
    image = Block("signature_image", sig_x, sig_top, sig_width, sig_height) if has_signature else None

    return _footer(blocks, image)


def _regroup(layout: FooterLayout, entries, shift: float) -> Dict[str, Block]:
    grouped: Dict[str, List[TextLine]] = {}
    for name, line in entries:
        grouped.setdefault(name, []).append(replace(line, baseline=line.baseline - shift))
    return {
        name: _text_block(name, layout.block(name).x, layout.block(name).width, lines)
        for name, lines in grouped.items()
    }


def _footer(blocks: Dict[str, Block], signature_image: Optional[Block] = None) -> FooterLayout:
    terms = blocks.get("terms")
    terms_lines = [line.text for line in terms.lines if line.text != TERMS_LABEL] if terms else []
    height = max(block.bottom for block in blocks.values()) + BOTTOM_PADDING_MM
    return FooterLayout(blocks=blocks, terms_lines=terms_lines, height=height, signature_image=signature_image)


def split_footer_layout(layout: FooterLayout, available_mm: float) -> Optional[Tuple[FooterLayout, FooterLayout]]:
    """Cut a footer taller than available_mm into a head that fits and a continuation.

    Totals and signature always stay in the head. Terms and bank lines past
    the cut move to the continuation, shifted up to the top of the new page,
    and a block label is never left alone at the bottom of the head.
    Returns None when the head cannot fit at all; the footer then starts on
    the next page.
    """
    fixed = [block for block in layout.blocks.values() if block.name not in FLOWING_BLOCKS]
    if max((block.bottom for block in fixed), default=0) + BOTTOM_PADDING_MM > available_mm:
        return None

    flowing = [
        (name, line)
        for name in FLOWING_BLOCKS if layout.block(name)
        for line in layout.block(name).lines
    ]
    limit = available_mm - BOTTOM_PADDING_MM - DESCENT_MM
    cut = 0
    while cut < len(flowing) and flowing[cut][1].baseline <= limit:
        cut += 1
    if cut == len(flowing):
        return None
    if cut:
        name, line = flowing[cut - 1]
        if line is layout.block(name).lines[0]:
            cut -= 1
    if not cut and not fixed:
        return None

    head_blocks = {block.name: block for block in fixed}
    head_blocks.update(_regroup(layout, flowing[:cut], shift=0))
    rest = flowing[cut:]
    tail_blocks = _regroup(layout, rest, shift=rest[0][1].baseline - CONTINUATION_FIRST_Y)
    return _footer(head_blocks, layout.signature_image), _footer(tail_blocks)
