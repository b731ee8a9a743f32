from django.conf import settings
from django.db import models
from doctors.models import Doctor
from .enums import ApptStatus

class Appointment(models.Model):
    patient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="appointments")
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name="appointments")

    # local calendar date + time-of-day; reminders compare both in server local time
    appointment_date = models.DateField()
    appointment_time = models.TimeField()
    status = models.CharField(max_length=16, choices=ApptStatus.choices, default=ApptStatus.SCHEDULED)

    reason = models.TextField(blank=True)
    notes  = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["appointment_date","status"], name="appt_date_status_idx"),
            models.Index(fields=["patient","appointment_date"], name="appt_patient_date_idx"),
            models.Index(fields=["doctor","appointment_date"], name="appt_doctor_date_idx"),
        ]
        ordering = ["appointment_date","appointment_time","id"]

    def __str__(self):
        return f"Appt#{self.id} P:{self.patient_id} D:{self.doctor_id} {self.appointment_date} {self.appointment_time:%H:%M} ({self.status})"
