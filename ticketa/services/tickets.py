"""Ticket document rendering."""

import io
from typing import Protocol

from reportlab.lib.colors import blue, black
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ticketa.core.config import get_ticket_brand
from ticketa.models.events import Event
from ticketa.models.reservations import Reservation
from ticketa.models.users import User


class TicketRenderer(Protocol):
    def render(self, reservation: Reservation, event: Event, user: User | None) -> bytes:
        ...


class PdfTicketRenderer:
    """Renders a one-page A4 ticket with reportlab."""

    margin = 50

    def __init__(self, brand: str | None = None) -> None:
        self.brand = brand or get_ticket_brand()

    def render(self, reservation: Reservation, event: Event, user: User | None) -> bytes:
        buffer = io.BytesIO()
        width, height = A4
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"Ticket {reservation.ticket_code}")

        y = height - self.margin - 25
        pdf.setFont("Helvetica-Bold", 25)
        pdf.drawCentredString(width / 2, y, self.brand)
        y -= 45
        pdf.setFont("Helvetica-Bold", 20)
        pdf.drawCentredString(width / 2, y, "Event Ticket")

        y -= 50
        pdf.setFont("Helvetica", 14)
        for line in self._event_lines(event):
            pdf.drawString(self.margin, y, line)
            y -= 20

        y -= 15
        if user is not None:
            attendee = f"Attendee: {user.username} ({user.email})"
        else:
            attendee = f"Attendee: #{reservation.user_id}"
        pdf.drawString(self.margin, y, attendee)

        y -= 45
        pdf.setFont("Helvetica-Bold", 16)
        pdf.setFillColor(blue)
        pdf.drawCentredString(width / 2, y, f"Ticket Code: {reservation.ticket_code}")
        pdf.setFillColor(black)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    @staticmethod
    def _event_lines(event: Event) -> list[str]:
        date = event.starts_at.strftime("%Y-%m-%d %H:%M") if event.starts_at else "TBA"
        return [
            f"Event: {event.title}",
            f"Date: {date}",
            f"Location: {event.location or 'TBA'}",
        ]
