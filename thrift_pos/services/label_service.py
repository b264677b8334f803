# ==============================================================================
# LABEL SERVICE - Printable barcode labels
# ==============================================================================
# Builds a PDF sheet of 32 x 25 mm thermal labels, three per row on a
# 100 mm roll, three rows per page. Each label carries:
#
#   product name (up to two lines)
#   CODE128 barcode of product.barcode
#   barcode digits
#   selling price
#   lot number
#
# Only the layout lives here; reportlab draws the barcode and the PDF.
# ==============================================================================

import io
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from reportlab.graphics.barcode.code128 import Code128
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from thrift_pos.errors import ValidationError
from thrift_pos.models import Product, to_money
from thrift_pos.utils import parse_int

logger = logging.getLogger(__name__)

LABEL_WIDTH = 32 * mm
LABEL_HEIGHT = 25 * mm
COLUMN_GAP = 2 * mm
ROW_GAP = 3 * mm
ROLL_WIDTH = 100 * mm
LABELS_PER_ROW = 3
ROWS_PER_PAGE = 3
LABELS_PER_PAGE = LABELS_PER_ROW * ROWS_PER_PAGE

PADDING = 1.5 * mm
BAR_HEIGHT = 8 * mm
NAME_LINES = 2

MAX_LABELS = 270

PAGE_HEIGHT = ROWS_PER_PAGE * LABEL_HEIGHT + (ROWS_PER_PAGE - 1) * ROW_GAP
_ROW_WIDTH = LABELS_PER_ROW * LABEL_WIDTH + (LABELS_PER_ROW - 1) * COLUMN_GAP
LEFT_MARGIN = (ROLL_WIDTH - _ROW_WIDTH) / 2


@dataclass(frozen=True)
class Label:
    name: str
    barcode: str
    price: Decimal
    lot_number: Optional[str] = None

    @classmethod
    def for_product(cls, product: Product) -> "Label":
        if not product.barcode:
            raise ValidationError(f'"{product.name}" has no barcode yet.')
        return cls(
            name=product.name,
            barcode=product.barcode,
            price=to_money(product.selling_price),
            lot_number=product.lot.lot_number if product.lot else None,
        )


def label_positions(count) -> List[Tuple[int, float, float]]:
    """
    Where each label goes on the sheet.

    Returns:
        One (page, x, top) per label. x is the left edge and top the upper
        edge measured from the top of the page, both in points.
    """
    positions = []
    for index in range(count):
        page, slot = divmod(index, LABELS_PER_PAGE)
        row, col = divmod(slot, LABELS_PER_ROW)
        x = LEFT_MARGIN + col * (LABEL_WIDTH + COLUMN_GAP)
        top = row * (LABEL_HEIGHT + ROW_GAP)
        positions.append((page, x, top))
    return positions


def _barcode_drawing(value, max_width):
    bars = Code128(value, barHeight=BAR_HEIGHT, quiet=False)
    if bars.width > max_width:
        bars = Code128(value, barHeight=BAR_HEIGHT, quiet=False,
                       barWidth=bars.barWidth * max_width / bars.width)
    return bars


def _draw_label(pdf, label: Label, x, top, currency):
    content_width = LABEL_WIDTH - 2 * PADDING
    center = x + LABEL_WIDTH / 2
    # reportlab measures y from the bottom of the page
    y = PAGE_HEIGHT - top - PADDING

    pdf.setFont("Helvetica-Bold", 7)
    for line in simpleSplit(label.name, "Helvetica-Bold", 7, content_width)[:NAME_LINES]:
        y -= 2.5 * mm
        pdf.drawCentredString(center, y, line)

    y -= 1 * mm + BAR_HEIGHT
    bars = _barcode_drawing(label.barcode, content_width * 0.9)
    bars.drawOn(pdf, center - bars.width / 2, y)

    pdf.setFont("Helvetica", 6)
    y -= 2.3 * mm
    pdf.drawCentredString(center, y, label.barcode)

    pdf.setFont("Helvetica-Bold", 10)
    y -= 3.6 * mm
    pdf.drawCentredString(center, y, f"{currency}{to_money(label.price):,.2f}")

    if label.lot_number:
        pdf.setFont("Helvetica", 6)
        y -= 2.5 * mm
        pdf.drawCentredString(center, y, f"Lot: {label.lot_number}")


def render_label_sheet(labels: Iterable[Label], currency="THB ") -> bytes:
    """
    Draws labels onto as many pages as needed.

    Args:
        labels: Labels in print order
        currency: Text put before the price. The standard PDF fonts have
                  no glyph for every currency sign, so this is plain text.

    Returns:
        The PDF document as bytes
    """
    labels = list(labels)
    if not labels:
        raise ValidationError("There is nothing to print.")

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(ROLL_WIDTH, PAGE_HEIGHT))
    pdf.setTitle("Barcode labels")

    current_page = 0
    for label, (page, x, top) in zip(labels, label_positions(len(labels))):
        if page != current_page:
            pdf.showPage()
            current_page = page
        _draw_label(pdf, label, x, top, currency)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class LabelService:
    """
    Label sheets for one product or a whole lot.
    """

    def __init__(self, inventory_service, lot_service, currency="THB "):
        self.inventory_service = inventory_service
        self.lot_service = lot_service
        self.currency = currency

    def product_labels(self, product_id, copies=LABELS_PER_PAGE) -> bytes:
        """A sheet of identical labels for one product (one page by default)."""
        copies = parse_int(copies, "Copies", minimum=1, maximum=MAX_LABELS)
        product = self.inventory_service.get_product(product_id)
        label = Label.for_product(product)
        logger.info("Printing %d labels for product %s", copies, product.barcode)
        return render_label_sheet([label] * copies, self.currency)

    def lot_labels(self, lot_id) -> bytes:
        """One label per unit in stock of every unsold product in the lot."""
        lot = self.lot_service.get_lot(lot_id)
        labels = []
        for product in lot.products:
            if product.is_sold or not product.barcode:
                continue
            labels.extend([Label.for_product(product)] * max(product.stock_quantity, 1))
        if len(labels) > MAX_LABELS:
            raise ValidationError(f"A sheet holds at most {MAX_LABELS} labels.")
        if not labels:
            raise ValidationError("This lot has no unsold products to label.")
        logger.info("Printing %d labels for lot %s", len(labels), lot.lot_number)
        return render_label_sheet(labels, self.currency)
