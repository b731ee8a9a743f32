"""Appointment emails (confirmation + reminders).

`send_appointment_email` is the dispatcher the reminder scheduler and the
booking API call. It sends inline and never re-queues a failed email.
"""

from django.conf import settings

from appointments.exceptions import DispatchError
from emails.models import EmailStatus, EmailType, Outbox
from emails.services.router import send_email


def appointment_email_data(*, patient_name: str, doctor_name: str, date: str, time: str,
                           reminder_minutes: int | None = None) -> dict:
    data = {
        "brand": getattr(settings, "EMAILS_BRAND_NAME", "CURAX Healthcare"),
        "patient_name": patient_name or "Patient",
        "doctor_name": doctor_name or "Doctor",
        "date": date,
        "time": time,
    }
    if reminder_minutes is not None:
        data["reminder_minutes"] = reminder_minutes
    return data


def send_appointment_email(
    *,
    type: str,
    to: str,
    patient_name: str,
    doctor_name: str,
    date: str,
    time: str,
    reminder_minutes: int | None = None,
) -> Outbox:
    """Send a templated appointment email; raise DispatchError if the provider refuses it."""
    if type not in EmailType.values:
        raise ValueError(f"Unknown appointment email type: {type}")
    if type == EmailType.APPOINTMENT_REMINDER and reminder_minutes is None:
        raise ValueError("reminder_minutes is required for appointment_reminder emails")

    outbox = send_email(
        to=to,
        template_code=type,
        template_data=appointment_email_data(
            patient_name=patient_name,
            doctor_name=doctor_name,
            date=date,
            time=time,
            reminder_minutes=reminder_minutes,
        ),
        tags=[type],
        delivery_mode="INLINE",
        queue_if_failed=False,
    )
    if outbox.status != EmailStatus.SENT:
        raise DispatchError(outbox.last_error or "Email was not sent", status=outbox.provider_status)
    return outbox
