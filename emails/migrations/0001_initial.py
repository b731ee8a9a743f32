import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Template",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=64, unique=True)),
                ("subject", models.CharField(max_length=140)),
                ("html", models.TextField()),
                ("text", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Outbox",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("to", models.EmailField(max_length=254)),
                ("cc", models.JSONField(blank=True, default=list)),
                ("bcc", models.JSONField(blank=True, default=list)),
                ("subject", models.CharField(max_length=140)),
                ("html", models.TextField(blank=True)),
                ("text", models.TextField(blank=True)),
                ("from_email", models.CharField(blank=True, max_length=254)),
                ("reply_to", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("template_code", models.CharField(blank=True, max_length=64)),
                ("template_data", models.JSONField(blank=True, default=dict)),
                ("provider_message_id", models.CharField(blank=True, max_length=128)),
                ("provider_status", models.PositiveIntegerField(blank=True, null=True)),
                ("status", models.CharField(choices=[("QUEUED", "Queued"), ("SENDING", "Sending"), ("SENT", "Sent"), ("DELIVERED", "Delivered"), ("BOUNCED", "Bounced"), ("FAILED", "Failed")], default="QUEUED", max_length=12)),
                ("last_error", models.TextField(blank=True)),
                ("retry_count", models.IntegerField(default=0)),
                ("next_attempt_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "indexes": [models.Index(fields=["status", "next_attempt_at"], name="outbox_status_next_idx")],
            },
        ),
    ]
