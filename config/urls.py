from django.contrib import admin
from django.urls import path, include

from appointments.views import check_appointment_reminders

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/accounts/", include("accounts.urls")),
    path("api/doctors/", include("doctors.urls")),
    path("api/appointments/", include("appointments.urls")),
    path("api/notifications/", include("notifications.urls")),
    path("api/emails/", include("emails.urls")),
    path(
        "api/functions/check-appointment-reminders/",
        check_appointment_reminders,
        name="check-appointment-reminders",
    ),
]
