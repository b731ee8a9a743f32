import datetime

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Doctor(models.Model):
    """
    A bookable doctor. `user` is optional: admins can list a doctor before
    the doctor has signed up.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.CASCADE, related_name="doctor_profile"
    )

    full_name = models.CharField(max_length=160)
    specialization = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    experience_years = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # Working hours (local time)
    available_from = models.TimeField(default=datetime.time(9, 0))
    available_to = models.TimeField(default=datetime.time(17, 0))

    # Admin approval flow
    is_approved = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name", "id"]
        indexes = [models.Index(fields=["is_approved"], name="doctor_approved_idx")]

    def __str__(self):
        return f"Dr. {self.full_name}"
