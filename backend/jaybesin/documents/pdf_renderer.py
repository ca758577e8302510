"""
PDF rendering for billing documents (reportlab platypus).

Section order is fixed: header, company / bill-to, shipment meta grid,
item table with totals row, then payment details and total due, signature
block, terms. The item table repeats its header row and flows onto as many
pages as it needs.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.graphics.shapes import Drawing, Rect
from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Image, KeepTogether, LongTable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from jaybesin.documents.builder import Currency, Document, format_money

logger = logging.getLogger(__name__)

SLATE_900 = colors.HexColor("#0f172a")
SLATE_500 = colors.HexColor("#64748b")
SLATE_200 = colors.HexColor("#e2e8f0")
SLATE_50 = colors.HexColor("#f8fafc")
DEFAULT_ACCENT = colors.HexColor("#2563eb")

PAGE_MARGIN = 15 * mm
LOGO_SIZE = 30 * mm


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    page_count: int
    filename: str


def _accent(hex_color: str):
    try:
        return colors.HexColor(hex_color) if hex_color else DEFAULT_ACCENT
    except ValueError:
        return DEFAULT_ACCENT


def _styles(accent) -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("DocTitle", parent=base["Heading1"], fontSize=20,
                                alignment=TA_RIGHT, textColor=SLATE_900, spaceAfter=2),
        "meta_right": ParagraphStyle("MetaRight", parent=base["Normal"], fontSize=9,
                                     alignment=TA_RIGHT, textColor=SLATE_500),
        "company": ParagraphStyle("Company", parent=base["Normal"], fontSize=14,
                                  fontName="Helvetica-Bold", textColor=SLATE_900, leading=17),
        "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=9, textColor=SLATE_500),
        "small_right": ParagraphStyle("SmallRight", parent=base["Normal"], fontSize=9,
                                      textColor=SLATE_500, alignment=TA_RIGHT),
        "label": ParagraphStyle("Label", parent=base["Normal"], fontSize=8,
                                fontName="Helvetica-Bold", textColor=SLATE_500),
        "label_right": ParagraphStyle("LabelRight", parent=base["Normal"], fontSize=9,
                                      fontName="Helvetica-Bold", textColor=SLATE_500, alignment=TA_RIGHT),
        "value": ParagraphStyle("Value", parent=base["Normal"], fontSize=9, textColor=SLATE_900),
        "client": ParagraphStyle("Client", parent=base["Normal"], fontSize=11,
                                 fontName="Helvetica-Bold", textColor=SLATE_900, alignment=TA_RIGHT),
        "cell": ParagraphStyle("Cell", parent=base["Normal"], fontSize=9, textColor=SLATE_900),
        "heading": ParagraphStyle("Heading", parent=base["Normal"], fontSize=9,
                                  fontName="Helvetica-Bold", textColor=SLATE_900),
        "total_due": ParagraphStyle("TotalDue", parent=base["Normal"], fontSize=16, leading=20,
                                    fontName="Helvetica-Bold", textColor=accent, alignment=TA_RIGHT),
        "terms": ParagraphStyle("Terms", parent=base["Normal"], fontSize=8,
                                textColor=colors.HexColor("#969696")),
    }


def _logo(url: str, accent):
    """Logo image, or a filled square when the image cannot be read."""
    if not url:
        return Spacer(LOGO_SIZE, LOGO_SIZE)
    try:
        reader = ImageReader(url)
        width, height = reader.getSize()
        scale = min(LOGO_SIZE / width, LOGO_SIZE / height)
        return Image(url, width=width * scale, height=height * scale)
    except Exception as e:
        logger.warning(f"Logo {url!r} could not be loaded ({e}); drawing placeholder")
        placeholder = Drawing(LOGO_SIZE, LOGO_SIZE)
        placeholder.add(Rect(0, LOGO_SIZE - 10 * mm, 10 * mm, 10 * mm, fillColor=accent, strokeColor=None))
        return placeholder


def _p(text, style) -> Paragraph:
    return Paragraph(escape(str(text or "")).replace("\n", "<br/>"), style)


def _header(document: Document, styles, accent, width) -> list:
    right = [
        _p(document.doc_type.value, styles["title"]),
        _p(f"Reference #{document.reference_id or 'DRAFT'}", styles["meta_right"]),
        _p(f"Date: {document.issued_on.strftime('%d %B %Y')}", styles["meta_right"]),
    ]
    table = Table([[_logo(document.issuer.logo_url, accent), right]],
                  colWidths=[LOGO_SIZE + 5 * mm, width - LOGO_SIZE - 5 * mm])
    table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return [table, Spacer(1, 6 * mm)]


def _parties(document: Document, styles, width) -> list:
    issuer = document.issuer
    left = [
        _p(issuer.company_name, styles["company"]),
        _p(issuer.company_address, styles["small"]),
        _p(issuer.company_email, styles["small"]),
        _p(issuer.company_phone, styles["small"]),
    ]
    right = [
        _p("BILL TO", styles["label_right"]),
        _p(document.consignee.name, styles["client"]),
        _p(document.consignee.phone, styles["small_right"]),
        _p(document.consignee.address, styles["small_right"]),
    ]
    table = Table([[left, right]], colWidths=[width / 2, width / 2])
    table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return [table, Spacer(1, 6 * mm)]


def _meta_grid(document: Document, styles, width) -> list:
    fields = [
        ("ORIGIN", document.origin),
        ("DESTINATION", document.destination),
        ("MODE", document.mode),
        ("CONTAINER ID", document.container_id or "N/A"),
    ]
    row = [[_p(label, styles["label"]), _p(value or "-", styles["value"])] for label, value in fields]
    table = Table([row], colWidths=[width / 4] * 4)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), SLATE_50),
        ("BOX", (0, 0), (-1, -1), 0.5, SLATE_200),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LEFTPADDING", (0, 0), (-1, -1), 8),
    ]))
    return [table, Spacer(1, 7 * mm)]


def totals_row(document: Document) -> list[str]:
    """Last row of the items table: cargo quantity and volume, document subtotal."""
    return [
        "Total",
        str(document.total_quantity),
        f"{document.total_volume:.3f}",
        "",
        format_money(document.subtotal, document.currency),
    ]


def _items_table(document: Document, styles, width) -> list:
    currency = document.currency
    data = [["Description", "Qty", "Vol (CBM)", "Rate (USD)", f"Amount ({currency.value})"]]
    for item in document.items:
        data.append([
            _p(item.description, styles["cell"]),
            str(item.quantity) if item.quantity else "-",
            f"{item.cbm:.3f}",
            format_money(item.rate, "USD") if item.rate is not None else "-",
            format_money(item.amount, currency),
        ])
    data.append(totals_row(document))

    fixed = 20 * mm + 25 * mm + 28 * mm + 35 * mm
    table = LongTable(data, colWidths=[width - fixed, 20 * mm, 25 * mm, 28 * mm, 35 * mm], repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("TEXTCOLOR", (0, 0), (-1, 0), SLATE_500),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, SLATE_200),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("TEXTCOLOR", (0, 1), (-1, -1), SLATE_900),
        ("GRID", (0, 1), (-1, -2), 0.1, SLATE_200),
        ("ALIGN", (1, 0), (1, -1), "CENTER"),
        ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
        ("FONTNAME", (-1, 1), (-1, -1), "Helvetica-Bold"),
        ("BACKGROUND", (0, -1), (-1, -1), SLATE_50),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return [table, Spacer(1, 10 * mm)]


def _closing_sections(document: Document, styles, width) -> list:
    issuer = document.issuer
    payment = [
        _p("Payment Details", styles["heading"]),
        _p(issuer.bank_name, styles["small"]),
        _p(f"Account Name: {issuer.account_name}", styles["small"]),
        _p(f"Account No: {issuer.account_number}", styles["small"]),
    ]
    due = [
        _p("Total Due", styles["label_right"]),
        _p(format_money(document.subtotal, document.currency), styles["total_due"]),
    ]
    if document.currency == Currency.GHS:
        due.append(_p(f"Rate: $1 = {document.currency.value} {document.exchange_rate:,.2f}",
                      styles["small_right"]))
    money = Table([[payment, due]], colWidths=[width / 2, width / 2])
    money.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))

    signature = Table(
        [["", ""], ["Authorised Signature", "Customer Signature"]],
        colWidths=[width / 2 - 10 * mm, width / 2 - 10 * mm],
        rowHeights=[14 * mm, None],
        spaceBefore=8 * mm,
    )
    signature.setStyle(TableStyle([
        ("LINEABOVE", (0, 1), (0, 1), 0.5, SLATE_500),
        ("LINEABOVE", (1, 1), (1, 1), 0.5, SLATE_500),
        ("FONTSIZE", (0, 1), (-1, 1), 8),
        ("TEXTCOLOR", (0, 1), (-1, 1), SLATE_500),
    ]))

    terms = [
        Spacer(1, 8 * mm),
        _p(issuer.terms_and_conditions, styles["terms"]),
        _p(issuer.footer_text, styles["terms"]),
    ]
    return [KeepTogether([money, signature, *terms])]


def render(document: Document) -> RenderedDocument:
    """Render to PDF bytes; the item table spills onto extra pages as needed."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN + 5 * mm,
        title=f"{document.doc_type.value} {document.reference_id}",
        author=document.issuer.company_name,
    )
    accent = _accent(document.issuer.primary_color)
    styles = _styles(accent)
    width = doc.width

    story = []
    story += _header(document, styles, accent, width)
    story += _parties(document, styles, width)
    story += _meta_grid(document, styles, width)
    story += _items_table(document, styles, width)
    story += _closing_sections(document, styles, width)

    pages: list[int] = []

    def _page_footer(canvas, _doc):
        pages.append(canvas.getPageNumber())
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(SLATE_500)
        canvas.drawRightString(A4[0] - PAGE_MARGIN, PAGE_MARGIN / 2,
                               f"{document.reference_id} - Page {canvas.getPageNumber()}")
        canvas.restoreState()

    doc.build(story, onFirstPage=_page_footer, onLaterPages=_page_footer)
    logger.info(f"Rendered {document.filename} ({len(pages)} pages)")
    return RenderedDocument(content=buffer.getvalue(), page_count=len(pages), filename=document.filename)


def export(document: Document, directory: str | Path) -> Path:
    """Render and write {DOC_TYPE}_{reference}.pdf into directory."""
    rendered = render(document)
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    path = target / rendered.filename
    path.write_bytes(rendered.content)
    return path
