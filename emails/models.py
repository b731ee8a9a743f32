from datetime import timedelta

from django.db import models
from django.utils import timezone


class EmailStatus(models.TextChoices):
    QUEUED     = "QUEUED", "Queued"
    SENDING    = "SENDING", "Sending"
    SENT       = "SENT", "Sent"
    DELIVERED  = "DELIVERED", "Delivered"  # via provider webhook
    BOUNCED    = "BOUNCED", "Bounced"
    FAILED     = "FAILED", "Failed"        # terminal, never retried


class EmailType(models.TextChoices):
    APPOINTMENT_CONFIRMATION = "appointment_confirmation", "Appointment confirmation"
    APPOINTMENT_REMINDER     = "appointment_reminder", "Appointment reminder"


class Template(models.Model):
    """Overrides the built-in template with the same code."""
    code = models.CharField(max_length=64, unique=True)
    subject = models.CharField(max_length=140)
    html = models.TextField()
    text = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.code


class Outbox(models.Model):
    """
    One outgoing email and its delivery history.

    Every send goes through a row here, even INLINE ones, so failures and
    provider ids can be inspected (and resent) from the admin/API.
    """
    to = models.EmailField()
    cc = models.JSONField(default=list, blank=True)
    bcc = models.JSONField(default=list, blank=True)
    reply_to = models.JSONField(default=list, blank=True)
    from_email = models.CharField(max_length=254, blank=True)

    subject = models.CharField(max_length=140)
    html = models.TextField(blank=True)
    text = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    template_code = models.CharField(max_length=64, blank=True)
    template_data = models.JSONField(default=dict, blank=True)

    status = models.CharField(max_length=12, choices=EmailStatus.choices, default=EmailStatus.QUEUED)
    provider_message_id = models.CharField(max_length=128, blank=True)
    provider_status = models.PositiveIntegerField(null=True, blank=True)  # last HTTP status from API providers
    last_error = models.TextField(blank=True)
    retry_count = models.IntegerField(default=0)
    next_attempt_at = models.DateTimeField(default=timezone.now)

    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["status","next_attempt_at"], name="outbox_status_next_idx")]

    def __str__(self):
        return f"{self.subject} -> {self.to}"

    @property
    def is_sent(self) -> bool:
        return self.status in (EmailStatus.SENT, EmailStatus.DELIVERED)

    def mark_sending(self):
        self.status = EmailStatus.SENDING
        self.save(update_fields=["status"])

    def mark_sent(self, *, message_id: str | None, http_status: int | None):
        self.status = EmailStatus.SENT
        self.provider_message_id = message_id or ""
        self.provider_status = http_status
        self.sent_at = timezone.now()
        self.last_error = ""
        self.save(update_fields=["status","provider_message_id","provider_status","sent_at","last_error"])

    def mark_failed(self, error: str, *, http_status: int | None, retry_in: timedelta | None):
        """`retry_in=None` makes the failure terminal; otherwise the row is re-queued."""
        self.retry_count += 1
        self.last_error = (error or "")[:2000]
        self.provider_status = http_status
        if retry_in is None:
            self.status = EmailStatus.FAILED
        else:
            self.status = EmailStatus.QUEUED
            self.next_attempt_at = timezone.now() + retry_in
        self.save(update_fields=["status","retry_count","next_attempt_at","last_error","provider_status"])

    def reset_for_resend(self):
        self.status = EmailStatus.QUEUED
        self.retry_count = 0
        self.next_attempt_at = timezone.now()
        self.last_error = ""
        self.provider_message_id = ""
        self.provider_status = None
        self.save(update_fields=[
            "status","retry_count","next_attempt_at","last_error","provider_message_id","provider_status",
        ])
