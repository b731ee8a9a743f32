# notifications/management/commands/cleanup_notifications.py
"""
Management command to clean up old notifications.

Usage:
    python manage.py cleanup_notifications                  # Default: delete read notifications 90+ days old
    python manage.py cleanup_notifications --dry-run        # Show what would be deleted
    python manage.py cleanup_notifications --days 30        # Delete read notifications older than 30 days
    python manage.py cleanup_notifications --include-unread # Also delete unread ones past the cutoff
"""

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone


class Command(BaseCommand):
    help = "Clean up old notifications"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be cleaned up without actually doing it",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=90,
            help="Delete notifications older than this many days (default: 90)",
        )
        parser.add_argument(
            "--include-unread",
            action="store_true",
            help="Also delete unread notifications past the cutoff",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=1000,
            help="Process in batches of this size (default: 1000)",
        )

    def handle(self, *args, **options):
        from notifications.models import Notification, ReminderRun

        dry_run = options["dry_run"]
        days = options["days"]
        batch_size = options["batch_size"]

        cutoff = timezone.now() - timedelta(days=days)
        qs = Notification.objects.filter(created_at__lt=cutoff)
        if not options["include_unread"]:
            qs = qs.filter(is_read=True)

        count = qs.count()
        if count == 0:
            self.stdout.write("Nothing to clean up")
            return

        if dry_run:
            self.stdout.write(self.style.WARNING(f"DRY RUN - would delete {count} notifications older than {days} days"))
            return

        total_deleted = 0
        # Delete in batches to avoid memory issues
        while True:
            batch_ids = list(qs.values_list("id", flat=True)[:batch_size])
            if not batch_ids:
                break
            deleted, _ = Notification.objects.filter(id__in=batch_ids).delete()
            total_deleted += deleted
            self.stdout.write(f"Deleted {deleted} notifications...")

        self.stdout.write(self.style.SUCCESS(f"Cleanup complete: {total_deleted} deleted"))

        # Reminder run leases are only needed for the minute they cover.
        runs_deleted, _ = ReminderRun.objects.filter(started_at__lt=cutoff).delete()
        if runs_deleted:
            self.stdout.write(f"Deleted {runs_deleted} reminder run leases")
