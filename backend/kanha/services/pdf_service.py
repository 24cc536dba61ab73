"""
PDF Tax Invoice
Renders a stored invoice (header, lines, GST breakdown) for printing.
"""
from io import BytesIO
from datetime import datetime

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER
from xml.sax.saxutils import escape

from kanha.services.pricing import money, tax_breakdown

# Helvetica has no rupee glyph
CURRENCY = "Rs."


def _amount(value) -> str:
    return f"{CURRENCY} {money(value):,.2f}"


def _text(value) -> str:
    return escape(str(value)) if value not in (None, "") else ""


def render_invoice_pdf(detail: dict, shop_name: str) -> BytesIO:
    """
    Build the printable invoice.

    Args:
        detail: result of invoice_service.get_invoice_detail
        shop_name: seller name printed in the header

    Returns:
        BytesIO buffer positioned at the start of the PDF
    """
    invoice = detail["invoice"]
    cart = detail["cart"]

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=0.5*inch,
        bottomMargin=0.5*inch,
        title=f"Invoice {invoice.invoice_no}",
    )

    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#1a56db'),
        alignment=TA_CENTER,
        spaceAfter=12
    )

    heading_style = ParagraphStyle(
        'InvoiceHeading',
        parent=styles['Heading2'],
        fontSize=12,
        textColor=colors.HexColor('#1f2937'),
        spaceAfter=6
    )

    normal_style = ParagraphStyle(
        'InvoiceNormal',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.HexColor('#374151')
    )

    elements.append(Paragraph("TAX INVOICE", title_style))
    elements.append(Spacer(1, 0.2*inch))

    # Seller and invoice info
    created = invoice.created_at.strftime('%d %b %Y') if invoice.created_at else ""
    info_lines = [
        f"<b>Invoice No:</b> {_text(invoice.invoice_no)}",
        f"<b>Date:</b> {created}",
        f"<b>Payment:</b> {_text(invoice.payment_mode)}",
    ]
    if invoice.order_no:
        info_lines.append(f"<b>Order No:</b> {_text(invoice.order_no)}")
    if invoice.road_permit:
        info_lines.append(f"<b>Road Permit:</b> {_text(invoice.road_permit)}")

    info_table = Table(
        [[Paragraph(f"<b>{_text(shop_name)}</b>", normal_style),
          Paragraph("<br/>".join(info_lines), normal_style)]],
        colWidths=[3.5*inch, 3*inch],
    )
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.2*inch))

    # Party
    elements.append(Paragraph("<b>Bill To:</b>", heading_style))
    party = [f"<b>{_text(invoice.party_name)}</b>"]
    address = ", ".join(
        _text(part) for part in (invoice.address, invoice.city, invoice.state, invoice.pincode) if part
    )
    if address:
        party.append(address)
    if invoice.mobile_no:
        party.append(f"Mobile: {_text(invoice.mobile_no)}")
    if invoice.gstin:
        party.append(f"GSTIN: {_text(invoice.gstin)}")
    if invoice.doctor_name:
        party.append(f"Doctor: {_text(invoice.doctor_name)}")
    if invoice.patient_name:
        party.append(f"Patient: {_text(invoice.patient_name)}")
    elements.append(Paragraph("<br/>".join(party), normal_style))
    elements.append(Spacer(1, 0.2*inch))

    # Lines
    header = ["#", "Cat No", "Product", "Lot", "HSN", "MRP", "Qty", "Rate", "Amount"]
    rows = [[Paragraph(f"<b>{h}</b>", normal_style) for h in header]]
    for index, line in enumerate(cart["items"], start=1):
        rows.append([
            str(index),
            _text(line.get("cat_no")),
            Paragraph(_text(line.get("product_name")), normal_style),
            _text(line.get("lot_no")),
            _text(line.get("hsn_code") or line.get("hsn_no")),
            f"{money(line['mrp']):,.2f}" if line.get("mrp") is not None else "",
            str(line["selected_quantity"]),
            f"{money(line['selling_price']):,.2f}",
            f"{money(line['total']):,.2f}",
        ])

    items_table = Table(
        rows,
        colWidths=[0.3*inch, 0.8*inch, 1.9*inch, 0.6*inch, 0.6*inch, 0.6*inch, 0.4*inch, 0.6*inch, 0.8*inch],
        repeatRows=1,
    )
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('ALIGN', (5, 1), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fafafa')]),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # Totals with GST breakdown
    taxes = tax_breakdown(
        cart["cart_total"],
        adjustment_percent=invoice.adjustment_percent,
        cgst=invoice.cgst,
        sgst=invoice.sgst,
        igst=invoice.igst,
    )
    total_rows = [["Subtotal:", _amount(cart["cart_total"])]]
    if taxes.adjustment:
        total_rows.append([f"Adjustment ({invoice.adjustment_percent}%):", _amount(taxes.adjustment)])
    if taxes.cgst:
        total_rows.append([f"CGST ({invoice.cgst}%):", _amount(taxes.cgst)])
    if taxes.sgst:
        total_rows.append([f"SGST ({invoice.sgst}%):", _amount(taxes.sgst)])
    if taxes.igst:
        total_rows.append([f"IGST ({invoice.igst}%):", _amount(taxes.igst)])
    total_rows.append(["Net Amount:", _amount(cart["net_amount"])])
    payable = cart["net_payable_amount"]
    if payable is not None:
        total_rows.append(["Round Off:", _amount(money(payable) - money(cart["net_amount"]))])
        total_rows.append([Paragraph("<b>NET PAYABLE:</b>", heading_style),
                           Paragraph(f"<b>{_amount(payable)}</b>", heading_style)])

    total_table = Table(total_rows, colWidths=[5*inch, 1.6*inch])
    total_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(total_table)

    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    elements.append(Spacer(1, 0.5*inch))
    elements.append(Paragraph("Thank you for your business!", footer_style))
    elements.append(Paragraph(f"Printed on {datetime.now().strftime('%d %b %Y at %I:%M %p')}", footer_style))

    doc.build(elements)

    buffer.seek(0)
    return buffer
