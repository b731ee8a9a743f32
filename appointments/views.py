import hmac
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import UserRole
from .enums import ApptStatus
from .exceptions import DataAccessError
from .models import Appointment
from .permissions import CanViewAppointment
from .serializers import AppointmentSerializer
from .services.notify import send_confirmation
from .services.reminders import ReminderScheduler

logger = logging.getLogger(__name__)


class AppointmentViewSet(
    viewsets.GenericViewSet,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.ListModelMixin,
):
    queryset = Appointment.objects.select_related("patient", "doctor")
    serializer_class = AppointmentSerializer
    permission_classes = [IsAuthenticated, CanViewAppointment]

    def get_queryset(self):
        q = self.queryset
        u = self.request.user

        if u.role == UserRole.ADMIN:
            pass
        elif u.role == UserRole.DOCTOR:
            q = q.filter(doctor__user=u)
        else:
            q = q.filter(patient=u)

        s = self.request.query_params.get("status")
        if s:
            q = q.filter(status=s)
        d = self.request.query_params.get("date")
        if d:
            q = q.filter(appointment_date=d)
        return q

    def perform_create(self, serializer):
        appt = serializer.save()
        send_confirmation(appt)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        appt = self.get_object()
        if appt.status == ApptStatus.COMPLETED:
            return Response({"detail": "Completed appointments cannot be cancelled."}, status=400)
        if appt.status != ApptStatus.CANCELLED:
            appt.status = ApptStatus.CANCELLED
            appt.save(update_fields=["status", "updated_at"])
        return Response(self.get_serializer(appt).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        appt = self.get_object()
        if request.user.role not in (UserRole.DOCTOR, UserRole.ADMIN):
            return Response({"detail": "Only the doctor can complete an appointment."}, status=403)
        if appt.status != ApptStatus.SCHEDULED:
            return Response({"detail": f"Cannot complete a {appt.status} appointment."}, status=400)
        appt.status = ApptStatus.COMPLETED
        appt.save(update_fields=["status", "updated_at"])
        return Response(self.get_serializer(appt).data)

    @action(detail=False, methods=["get"])
    def statuses(self, request):
        return Response([{"value": c, "label": l} for c, l in ApptStatus.choices])


# ─────────────────────────────────────────────────────────────
# Reminder trigger (cron / scheduler hits this every minute)
# ─────────────────────────────────────────────────────────────

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _with_cors(resp):
    for k, v in CORS_HEADERS.items():
        resp[k] = v
    return resp


def _trigger_authorized(request) -> bool:
    secret = getattr(settings, "REMINDERS_TRIGGER_SECRET", "")
    if not secret:
        return True
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer":
        return False
    return hmac.compare_digest(token.strip().encode(), secret.encode())


@csrf_exempt
def check_appointment_reminders(request):
    """
    Run one reminder pass. No body required.

    200 {"success": true, "remindersSent": n, "failures": [...]}
    500 {"error": "..."} when today's appointments cannot be read.
    """
    if request.method == "OPTIONS":
        return _with_cors(HttpResponse())
    if request.method not in ("GET", "POST"):
        return _with_cors(JsonResponse({"error": "Method not allowed"}, status=405))
    if not _trigger_authorized(request):
        return _with_cors(JsonResponse({"error": "Unauthorized"}, status=401))

    try:
        result = ReminderScheduler().run()
    except DataAccessError as e:
        logger.error("Error in check-appointment-reminders: %s", e)
        return _with_cors(JsonResponse({"error": str(e)}, status=500))

    return _with_cors(JsonResponse(result.as_dict(), status=200))
