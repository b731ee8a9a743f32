from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from emails.models import Outbox, EmailStatus
from emails.services.router import deliver


class Command(BaseCommand):
    help = "Send/retry queued emails via configured provider (SMTP/Resend)"

    def add_arguments(self, parser):
        parser.add_argument("--batch-size", type=int, default=200)

    def handle(self, *args, **opts):
        max_retries = getattr(settings, "EMAILS_MAX_RETRIES", 6)
        batch = list(
            Outbox.objects.filter(status=EmailStatus.QUEUED, next_attempt_at__lte=timezone.now())
            .order_by("created_at")[: opts["batch_size"]]
        )
        if not batch:
            self.stdout.write("Outbox empty")
            return

        sent = 0
        for o in batch:
            # the last allowed attempt fails terminally instead of re-queuing
            if deliver(o, queue_if_failed=(o.retry_count + 1 < max_retries)):
                sent += 1
        self.stdout.write(f"Processed {len(batch)} outbox item(s), sent {sent}")
