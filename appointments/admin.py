from django.contrib import admin
from .models import Appointment

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id","patient","doctor","appointment_date","appointment_time","status","created_at")
    list_filter = ("status","appointment_date")
    search_fields = ("patient__email","patient__full_name","doctor__full_name","reason","notes")
    date_hierarchy = "appointment_date"
