import datetime

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Doctor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(max_length=160)),
                ("specialization", models.CharField(blank=True, max_length=120)),
                ("bio", models.TextField(blank=True)),
                ("qualification", models.CharField(blank=True, max_length=255)),
                ("experience_years", models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("consultation_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("available_from", models.TimeField(default=datetime.time(9, 0))),
                ("available_to", models.TimeField(default=datetime.time(17, 0))),
                ("is_approved", models.BooleanField(default=False)),
                ("is_featured", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="doctor_profile", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["full_name", "id"],
                "indexes": [models.Index(fields=["is_approved"], name="doctor_approved_idx")],
            },
        ),
    ]
