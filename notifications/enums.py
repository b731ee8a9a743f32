from django.db import models

class NotificationType(models.TextChoices):
    INFO                     = "info", "Info"
    APPOINTMENT              = "appointment", "Appointment"
    APPOINTMENT_REMINDER     = "appointment_reminder", "Appointment reminder"
    APPOINTMENT_CONFIRMATION = "appointment_confirmation", "Appointment confirmation"
    REPORT_ANALYSIS          = "report_analysis", "Report analysis"
    MESSAGE                  = "message", "Message"
