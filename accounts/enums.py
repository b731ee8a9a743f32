from django.db import models

class UserRole(models.TextChoices):
    ADMIN   = "ADMIN", "Admin"
    DOCTOR  = "DOCTOR", "Doctor"
    PATIENT = "PATIENT", "Patient"
