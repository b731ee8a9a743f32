import logging

from django.conf import settings

from appointments.exceptions import DispatchError
from emails.models import EmailType
from notifications.enums import NotificationType

logger = logging.getLogger(__name__)


def send_confirmation(appt):
    """
    Email the booking confirmation and drop an in-app notification.

    A failed email is logged and never fails the booking.
    """
    from emails.services.appointments import send_appointment_email
    from notifications.services.notify import notify_user

    patient = appt.patient
    doctor_name = appt.doctor.full_name or "Doctor"
    date = appt.appointment_date.isoformat()
    time = appt.appointment_time.strftime("%H:%M")

    if patient.email:
        try:
            send_appointment_email(
                type=EmailType.APPOINTMENT_CONFIRMATION,
                to=patient.email,
                patient_name=patient.display_name or "Patient",
                doctor_name=doctor_name,
                date=date,
                time=time,
            )
        except DispatchError as e:
            logger.error("Confirmation email for appointment %s failed (%s): %s", appt.pk, e.status or "-", e)

    return notify_user(
        user=patient,
        title="Appointment booked",
        message=f"Your appointment with Dr. {doctor_name} is confirmed for {date} at {time}.",
        type=NotificationType.APPOINTMENT_CONFIRMATION,
        related_id=appt.pk,
        action_url=getattr(settings, "REMINDERS_ACTION_URL", "/appointments"),
    )
