"""appointments.services.reminders

Checks today's scheduled appointments against the reminder tiers and, for every
due (appointment, tier) pair, emails the patient and records an in-app
notification.

A tier is due when the appointment starts `tier` minutes from now, give or take
the tolerance. Both sides are compared as whole minutes since local midnight, so
an appointment at 14:30 checked at 13:30:45 is 60 minutes away.

Missed windows are not caught up: a run only looks at the current minute.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError
from django.utils import timezone

from appointments.enums import ApptStatus
from appointments.exceptions import (
    DataAccessError,
    DispatchError,
    NotificationInsertError,
    ResolutionError,
)
from appointments.models import Appointment
from emails.models import EmailType
from notifications.enums import NotificationType

logger = logging.getLogger(__name__)

DEFAULT_TIERS = (60, 30, 10)
DEFAULT_TOLERANCE = 1


def minutes_since_midnight(t: datetime.time) -> int:
    return t.hour * 60 + t.minute


def minutes_until(appointment_time: datetime.time, now: datetime.datetime) -> int:
    """Negative once the appointment has started."""
    return minutes_since_midnight(appointment_time) - minutes_since_midnight(now.time())


def due_tiers(minutes: int, tiers: Iterable[int] = DEFAULT_TIERS, tolerance: int = DEFAULT_TOLERANCE) -> list[int]:
    return [t for t in tiers if t - tolerance <= minutes <= t + tolerance]


def scheduled_for_date(day: datetime.date):
    return (
        Appointment.objects.select_related("patient", "doctor")
        .filter(appointment_date=day, status=ApptStatus.SCHEDULED)
        .order_by("appointment_time", "id")
    )


@dataclass
class ReminderContact:
    patient_name: str
    doctor_name: str
    email: str


def resolve_contact(appointment: Appointment) -> ReminderContact:
    try:
        patient = appointment.patient
        doctor = appointment.doctor
    except (ObjectDoesNotExist, DatabaseError) as e:
        raise ResolutionError(f"Could not resolve contacts for appointment {appointment.pk}: {e}") from e

    return ReminderContact(
        patient_name=patient.display_name or "Patient",
        doctor_name=(doctor.full_name if doctor else "") or "Doctor",
        email=(patient.email or "").strip(),
    )


@dataclass
class DuePair:
    appointment: Appointment
    tier: int
    minutes_until: int

    @property
    def key(self) -> str:
        return f"{self.appointment.pk}_{self.tier}min"


@dataclass
class ReminderRunResult:
    reminders_sent: int = 0
    sent: list[str] = field(default_factory=list)
    emails_sent: int = 0
    skipped: list[str] = field(default_factory=list)  # due pairs with no email address
    duplicates: list[str] = field(default_factory=list)  # already in the ledger
    failures: list[dict] = field(default_factory=list)
    lease_held: bool = True

    def fail(self, pair: DuePair, stage: str, error: Exception):
        self.failures.append({
            "appointment_id": pair.appointment.pk,
            "tier": pair.tier,
            "stage": stage,
            "error": str(error),
        })

    def as_dict(self) -> dict:
        return {
            "success": True,
            "remindersSent": self.reminders_sent,
            "failures": self.failures,
        }


def _default_send_email(**kwargs):
    from emails.services.appointments import send_appointment_email
    return send_appointment_email(**kwargs)


def _default_notify(**kwargs):
    from notifications.services.notify import notify_user
    return notify_user(**kwargs)


class ReminderScheduler:
    """
    One reminder pass.

    `now`, `tiers` and `tolerance` default to the wall clock and settings;
    `send_email` and `notify` are the two side effects and can be swapped out.
    With `use_ledger` each pair is claimed in the SentReminder table before
    dispatch; with `use_lease` the whole pass is skipped if another run
    already holds the current minute.
    """

    def __init__(
        self,
        *,
        now: datetime.datetime | None = None,
        tiers: Iterable[int] | None = None,
        tolerance: int | None = None,
        send_email: Callable | None = None,
        notify: Callable | None = None,
        use_ledger: bool | None = None,
        use_lease: bool | None = None,
    ):
        now = now or timezone.now()
        if timezone.is_naive(now):
            now = timezone.make_aware(now)
        self.now = timezone.localtime(now)

        self.tiers = tuple(tiers if tiers is not None else getattr(settings, "REMINDERS_TIERS", DEFAULT_TIERS))
        self.tolerance = int(
            tolerance if tolerance is not None else getattr(settings, "REMINDERS_TOLERANCE_MINUTES", DEFAULT_TOLERANCE)
        )
        self.send_email = send_email or _default_send_email
        self.notify = notify or _default_notify
        self.use_ledger = getattr(settings, "REMINDERS_LEDGER_ENABLED", False) if use_ledger is None else use_ledger
        self.use_lease = getattr(settings, "REMINDERS_LEASE_ENABLED", False) if use_lease is None else use_lease
        self.action_url = getattr(settings, "REMINDERS_ACTION_URL", "/appointments")

    @property
    def today(self) -> datetime.date:
        return self.now.date()

    def fetch_candidates(self) -> list[Appointment]:
        try:
            return list(scheduled_for_date(self.today))
        except DatabaseError as e:
            logger.error("Error fetching appointments: %s", e)
            raise DataAccessError(str(e)) from e

    def plan(self, candidates: list[Appointment] | None = None) -> list[DuePair]:
        if candidates is None:
            candidates = self.fetch_candidates()

        pairs = []
        seen = set()
        for appt in candidates:
            m = minutes_until(appt.appointment_time, self.now)
            for tier in due_tiers(m, self.tiers, self.tolerance):
                if (appt.pk, tier) in seen:
                    continue
                seen.add((appt.pk, tier))
                pairs.append(DuePair(appointment=appt, tier=tier, minutes_until=m))
        return pairs

    def run(self) -> ReminderRunResult:
        logger.info("Checking reminders at %s %s", self.today.isoformat(), self.now.strftime("%H:%M"))

        lease = None
        if self.use_lease:
            from notifications.services.ledger import acquire_run_lease, lease_slot

            try:
                lease = acquire_run_lease(lease_slot(self.now))
            except DatabaseError as e:
                logger.error("Error acquiring reminder run lease: %s", e)
                raise DataAccessError(str(e)) from e
            if lease is None:
                logger.warning("Reminder run for %s already in progress or done; skipping", lease_slot(self.now))
                return ReminderRunResult(lease_held=False)

        result = ReminderRunResult()
        try:
            candidates = self.fetch_candidates()
            logger.info("Found %d scheduled appointments for today", len(candidates))

            for pair in self.plan(candidates):
                self._dispatch(pair, result)
        finally:
            if lease is not None:
                self._release(lease, result)

        logger.info("Sent %d reminders", result.reminders_sent)
        return result

    def _release(self, lease, result: ReminderRunResult):
        from notifications.services.ledger import release_run_lease

        try:
            release_run_lease(lease, reminders_sent=result.reminders_sent)
        except DatabaseError as e:
            logger.error("Could not release reminder run lease %s: %s", lease.slot, e)

    def _dispatch(self, pair: DuePair, result: ReminderRunResult):
        appt, tier = pair.appointment, pair.tier

        if self.use_ledger:
            from notifications.services.ledger import claim_reminder

            try:
                claimed = claim_reminder(appointment_id=appt.pk, tier=tier)
            except DatabaseError as e:
                logger.error("Ledger claim failed for appointment %s (%d min): %s", appt.pk, tier, e)
                result.fail(pair, "ledger", e)
                return
            if not claimed:
                logger.info("%d-min reminder for appointment %s already sent", tier, appt.pk)
                result.duplicates.append(pair.key)
                return

        logger.info("Sending %d-min reminder for appointment %s", tier, appt.pk)

        try:
            contact = resolve_contact(appt)
        except ResolutionError as e:
            logger.error("Could not resolve contacts for appointment %s (%d min): %s", appt.pk, tier, e)
            result.fail(pair, "resolve", e)
            contact = None

        if contact and contact.email:
            self._send_email(pair, contact, result)
        elif contact:
            logger.warning("Patient %s has no email; skipping %d-min email", appt.patient_id, tier)
            result.skipped.append(pair.key)

        doctor_name = contact.doctor_name if contact else "Doctor"
        try:
            self.notify(
                user=appt.patient,
                title=f"Appointment in {tier} minutes",
                message=f"Your appointment with Dr. {doctor_name} starts in {tier} minutes.",
                type=NotificationType.APPOINTMENT_REMINDER,
                related_id=appt.pk,
                action_url=self.action_url,
            )
        except Exception as e:
            err = NotificationInsertError(str(e))
            logger.error("Notification insert failed for appointment %s (%d min): %s", appt.pk, tier, err)
            result.fail(pair, "notify", err)
            return

        result.reminders_sent += 1
        result.sent.append(pair.key)

    def _send_email(self, pair: DuePair, contact: ReminderContact, result: ReminderRunResult):
        appt = pair.appointment
        try:
            self.send_email(
                type=EmailType.APPOINTMENT_REMINDER,
                to=contact.email,
                patient_name=contact.patient_name,
                doctor_name=contact.doctor_name,
                date=appt.appointment_date.isoformat(),
                time=appt.appointment_time.strftime("%H:%M"),
                reminder_minutes=pair.tier,
            )
        except DispatchError as e:
            logger.error("Email reminder failed (%s) for %s: %s", e.status or "-", contact.email, e)
            result.fail(pair, "email", e)
            return
        except Exception as e:
            logger.exception("Error sending email reminder for appointment %s", appt.pk)
            result.fail(pair, "email", DispatchError(str(e)))
            return
        logger.info("Email reminder sent to %s", contact.email)
        result.emails_sent += 1
