"""
PDF No-Objection Certificate for an approved booking, with a QR code
carrying the booking reference and a checksum for verification.
"""
import hashlib
import io
import json
import logging
from datetime import datetime
from typing import Any, Dict

import qrcode  # type: ignore[import-untyped]
from reportlab.lib import colors  # type: ignore[import-untyped]
from reportlab.lib.pagesizes import A4  # type: ignore[import-untyped]
from reportlab.lib.utils import ImageReader  # type: ignore[import-untyped]
from reportlab.pdfgen import canvas  # type: ignore[import-untyped]
from reportlab.platypus import Table, TableStyle  # type: ignore[import-untyped]

from adwise.core.errors import InvalidTransition
from adwise.database.models import Booking, BookingStatus, NocStatus

logger = logging.getLogger(__name__)

NAVY = "#1F2A44"
ACCENT = "#3399CC"
LIGHT = "#EEF4FA"


def certificate_payload(booking: Booking) -> Dict[str, Any]:
    data = {
        "booking_id": booking.id,
        "billboard_id": booking.billboard_id,
        "campaign": booking.campaign_name,
        "category": booking.noc_category,
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
    }
    data["checksum"] = hashlib.sha256(json.dumps(data, sort_keys=True).encode()).hexdigest()[:16]
    return data


def _qr_image(data: Dict[str, Any]) -> ImageReader:
    qr = qrcode.QRCode(version=1, box_size=8, border=2)
    qr.add_data(json.dumps(data))
    qr.make(fit=True)
    buffer = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer, format="PNG")
    buffer.seek(0)
    return ImageReader(buffer)


def certificate_filename(booking: Booking) -> str:
    safe_name = "".join(ch if ch.isalnum() else "_" for ch in (booking.campaign_name or "campaign"))
    return f"NOC_{safe_name}_{booking.id}.pdf"


def generate_noc_pdf(booking: Booking) -> bytes:
    """Render the certificate; the booking must have its relations loaded."""
    if booking.noc_status != NocStatus.approved.value:
        raise InvalidTransition(
            f"NOC is {booking.noc_status}; a certificate is only issued for an approved NOC",
            details={"booking_id": booking.id},
        )
    if booking.status == BookingStatus.cancelled.value:
        raise InvalidTransition(
            "Booking is cancelled; its NOC certificate is no longer valid",
            details={"booking_id": booking.id},
        )

    billboard = booking.billboard
    owner = billboard.owner
    customer = booking.customer

    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4

    # Header band
    c.setFillColor(colors.HexColor(NAVY))
    c.rect(0, height - 110, width, 110, fill=1, stroke=0)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 24)
    c.drawString(40, height - 60, "NO OBJECTION CERTIFICATE")
    c.setFont("Helvetica", 11)
    c.drawString(40, height - 85, f"Issued on {datetime.now().strftime('%d %b %Y')}")
    c.setFont("Helvetica-Bold", 13)
    c.drawRightString(width - 40, height - 60, f"#{booking.id}")

    y = height - 150
    c.setFillColor(colors.black)
    c.setFont("Helvetica", 12)
    c.drawString(40, y, "This is to certify that we have no objection to the use of our billboard:")

    rows = [
        ["Billboard", billboard.title],
        ["Location", billboard.location],
        ["Campaign", booking.campaign_name or "-"],
        ["Category", booking.noc_category or "-"],
        ["Duration", f"{booking.start_date.strftime('%d %b %Y')} to {booking.end_date.strftime('%d %b %Y')}"],
        ["Customer", (customer.full_name or customer.email) if customer else "-"],
    ]
    if customer is not None and customer.company_name:
        rows.append(["Company", customer.company_name])
    rows.append(["Approved by", (owner.full_name or owner.email) if owner else "Billboard Owner"])

    table = Table(rows, colWidths=[120, 340])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (0, -1), colors.HexColor(LIGHT)),
        ("FONT", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONT", (1, 0), (1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 11),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor(ACCENT)),
        ("LEFTPADDING", (0, 0), (-1, -1), 10),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))
    _, table_height = table.wrapOn(c, width, height)
    table.drawOn(c, 40, y - 25 - table_height)

    qr_y = y - 60 - table_height - 140
    c.drawImage(_qr_image(certificate_payload(booking)), 40, qr_y, width=130, height=130, preserveAspectRatio=True)
    c.setFont("Helvetica", 9)
    c.drawString(40, qr_y - 14, "Scan to verify this certificate")

    c.setFont("Helvetica-Oblique", 10)
    c.setFillColor(colors.HexColor(NAVY))
    c.drawString(40, 50, "This certificate is valid for the specified duration only.")

    c.showPage()
    c.save()
    logger.info("Generated NOC certificate for booking %s", booking.id)
    return buffer.getvalue()
