"""
Notification message builders.

Each builder takes a persisted record and returns the rendered message; none
of them touch the network or the database.
"""

from html import escape
from typing import Tuple

from ..models.appointment import Appointment
from ..models.consultation import Consultation

BRAND = "HealthConnect+"

THEME = {
    "primary": "#0d9488",
    "background": "#f8fafc",
    "text": "#0f172a",
    "muted": "#64748b",
}


def _layout(title: str, rows: Tuple[Tuple[str, str], ...], footer: str) -> str:
    body = "".join(
        f"<tr><td style=\"padding:6px 12px;color:{THEME['muted']}\">{escape(label)}</td>"
        f"<td style=\"padding:6px 12px;color:{THEME['text']}\"><strong>{escape(str(value))}</strong></td></tr>"
        for label, value in rows
    )
    return (
        f"<div style=\"font-family:Arial,sans-serif;background:{THEME['background']};padding:24px\">"
        f"<h2 style=\"color:{THEME['primary']}\">{escape(title)}</h2>"
        f"<table>{body}</table>"
        f"<p style=\"color:{THEME['muted']}\">{escape(footer)}</p>"
        f"<p style=\"color:{THEME['muted']}\">{BRAND}</p>"
        "</div>"
    )


def appointment_email(appointment: Appointment) -> Tuple[str, str]:
    """Subject and HTML body confirming an appointment."""
    subject = f"Appointment Confirmed - {appointment.doctor} on {appointment.date}"
    html = _layout(
        f"Hello {appointment.name}, your appointment is confirmed",
        (
            ("Doctor", appointment.doctor),
            ("Date", appointment.date),
            ("Time", appointment.time_slot),
            ("Phone", appointment.phone),
        ),
        "Please arrive 10-15 minutes early to ensure a smooth check-in.",
    )
    return subject, html


def appointment_sms(appointment: Appointment) -> str:
    return (
        f"{BRAND}: Hi {appointment.name}, your appointment with {appointment.doctor} "
        f"is confirmed for {appointment.date} at {appointment.time_slot}."
    )


def consultation_email(consultation: Consultation) -> Tuple[str, str]:
    """Subject and HTML body acknowledging a consultation request."""
    consultation_type = _type_label(consultation)
    subject = f"Consultation Booked - {consultation.consultation_id}"

    rows = [
        ("Consultation ID", consultation.consultation_id),
        ("Type", consultation_type),
        ("Amount", consultation.amount),
        ("Status", _status_label(consultation)),
    ]
    if consultation.preferred_date:
        rows.append(("Preferred date", consultation.preferred_date))
    rows.append(("Health concern", consultation.health_concern))

    html = _layout(
        f"Hello {consultation.patient_name}, your {consultation_type} consultation is booked",
        tuple(rows),
        "A doctor will contact you shortly. For emergencies, call your local emergency number.",
    )
    return subject, html


def consultation_sms(consultation: Consultation) -> str:
    message = (
        f"{BRAND}: Hi {consultation.patient_name}, your {_type_label(consultation)} "
        f"consultation ({consultation.consultation_id}) is booked. Amount: {consultation.amount}."
    )
    if consultation.preferred_date:
        message += f" Preferred date: {consultation.preferred_date}."
    return message


def _type_label(consultation: Consultation) -> str:
    value = getattr(consultation.consultation_type, "value", consultation.consultation_type)
    return str(value)


def _status_label(consultation: Consultation) -> str:
    value = getattr(consultation.status, "value", consultation.status)
    return str(value)
