from django.conf import settings
from django.db import models
from django.utils import timezone
from .enums import NotificationType

class Notification(models.Model):
    """
    A single in-app notification delivered to exactly one user.
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")

    title = models.CharField(max_length=140)
    message = models.TextField()
    type = models.CharField(max_length=40, choices=NotificationType.choices, default=NotificationType.INFO)

    # Optional UX helpers
    related_id = models.PositiveBigIntegerField(null=True, blank=True)  # e.g. appointment id
    action_url = models.CharField(max_length=240, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["user","is_read","created_at"], name="notif_user_read_idx"),
            models.Index(fields=["type","related_id"], name="notif_type_related_idx"),
        ]
        ordering = ["-created_at","-id"]

    def __str__(self):
        return f"{self.title} -> {self.user_id}"

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read","read_at"])

    def mark_unread(self):
        if self.is_read:
            self.is_read = False
            self.read_at = None
            self.save(update_fields=["is_read","read_at"])


class SentReminder(models.Model):
    """
    Durable record of a dispatched (appointment, tier) reminder.

    Only written when REMINDERS_LEDGER_ENABLED is on; the unique constraint
    makes the pending -> sent transition happen at most once per pair.
    """
    appointment = models.ForeignKey("appointments.Appointment", on_delete=models.CASCADE, related_name="sent_reminders")
    tier = models.PositiveIntegerField()  # minutes before the appointment
    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["appointment","tier"], name="uniq_sent_reminder_tier"),
        ]
        ordering = ["-sent_at"]

    def __str__(self):
        return f"Appt#{self.appointment_id} {self.tier}min"


class ReminderRun(models.Model):
    """
    Lease for one reminder pass per local minute (REMINDERS_LEASE_ENABLED).
    """
    slot = models.CharField(max_length=16, unique=True)  # YYYY-MM-DDTHH:MM
    started_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)
    reminders_sent = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-started_at"]

    def __str__(self):
        return f"ReminderRun {self.slot}"
