"""appointments.management.commands.check_appointment_reminders

Emails + notifies patients whose appointment starts in 60, 30 or 10 minutes.

Run every minute (cron / Render cron job), e.g.:
  python manage.py check_appointment_reminders
  python manage.py check_appointment_reminders --dry-run
  python manage.py check_appointment_reminders --tiers 60,30,10 --tolerance 1
"""

from django.core.management.base import BaseCommand, CommandError

from appointments.exceptions import DataAccessError
from appointments.services.reminders import ReminderScheduler


class Command(BaseCommand):
    help = "Send due appointment reminders (email + in-app notification)"

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Do not send, just print due reminders")
        parser.add_argument("--tiers", type=str, default="", help="Comma separated lead times in minutes")
        parser.add_argument("--tolerance", type=int, default=None, help="Matching window (+/- minutes)")

    def handle(self, *args, **options):
        dry_run = bool(options["dry_run"])
        tiers = [int(t) for t in options["tiers"].split(",") if t.strip()] or None

        scheduler = ReminderScheduler(tiers=tiers, tolerance=options["tolerance"])

        try:
            if dry_run:
                pairs = scheduler.plan()
            else:
                result = scheduler.run()
        except DataAccessError as e:
            raise CommandError(f"Reminder store unavailable: {e}")

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - no emails or notifications will be sent"))
            if not pairs:
                self.stdout.write("No reminders due")
                return
            for p in pairs:
                a = p.appointment
                self.stdout.write(
                    f"Would send {p.tier}-min reminder appointment={a.pk} patient={a.patient_id} "
                    f"at={a.appointment_time:%H:%M}"
                )
            self.stdout.write(self.style.WARNING(f"DRY RUN complete. Would send: {len(pairs)}"))
            return

        if not result.lease_held:
            self.stdout.write(self.style.WARNING("Another run already handled this minute"))
            return

        for f in result.failures:
            self.stdout.write(self.style.ERROR(
                f"Failed {f['stage']} for appointment {f['appointment_id']} ({f['tier']} min): {f['error']}"
            ))

        self.stdout.write(self.style.SUCCESS(
            f"Reminders sent={result.reminders_sent} emails={result.emails_sent} "
            f"no_email={len(result.skipped)} duplicates={len(result.duplicates)} failed={len(result.failures)}"
        ))
