"""Optional idempotency helpers for the reminder scheduler.

* ``claim_reminder`` - durable (appointment, tier) ledger.
* ``acquire_run_lease`` / ``release_run_lease`` - one pass per local minute.

Both rely on unique constraints, so concurrent runs race on the insert and
exactly one wins.
"""

from django.db import IntegrityError, transaction
from django.utils import timezone

from notifications.models import ReminderRun, SentReminder


def claim_reminder(*, appointment_id: int, tier: int) -> bool:
    """Return True if this call recorded the pair, False if it was already sent."""
    try:
        with transaction.atomic():
            SentReminder.objects.create(appointment_id=appointment_id, tier=tier)
    except IntegrityError:
        return False
    return True


def lease_slot(moment) -> str:
    """`moment` is a local datetime; the slot is its minute."""
    return moment.strftime("%Y-%m-%dT%H:%M")


def acquire_run_lease(slot: str) -> ReminderRun | None:
    try:
        with transaction.atomic():
            return ReminderRun.objects.create(slot=slot)
    except IntegrityError:
        return None


def release_run_lease(run: ReminderRun, *, reminders_sent: int):
    run.finished_at = timezone.now()
    run.reminders_sent = reminders_sent
    run.save(update_fields=["finished_at","reminders_sent"])
