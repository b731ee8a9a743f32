import hmac, hashlib, json, logging
from django.conf import settings
from django.utils.timezone import now
from django.http import JsonResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from rest_framework import viewsets, mixins
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from appointments.exceptions import DispatchError
from .models import Outbox, Template, EmailStatus
from .serializers import OutboxSerializer, TemplateSerializer, AppointmentEmailSerializer
from emails.services.appointments import send_appointment_email
from emails.services.router import deliver

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def send_appointment_email_view(request):
    """
    Send an appointment confirmation/reminder email.

    200 {"success": true, "id": "<provider id>"}
    <upstream status> {"success": false, "status": ..., "error": ...} when the
    provider refuses (e.g. 403 in Resend testing mode, 429 rate limited).
    """
    s = AppointmentEmailSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    d = s.validated_data
    logger.info("Sending %s email to %s", d["type"], d["to"])

    try:
        outbox = send_appointment_email(
            type=d["type"],
            to=d["to"],
            patient_name=d["patientName"],
            doctor_name=d["doctorName"],
            date=d["date"],
            time=d["time"],
            reminder_minutes=d.get("reminderMinutes"),
        )
    except DispatchError as e:
        status = e.status if e.status and e.status >= 400 else 502
        return Response({"success": False, "status": status, "error": str(e)}, status=status)

    return Response({"success": True, "id": outbox.provider_message_id})


class OutboxViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.RetrieveModelMixin):
    queryset = Outbox.objects.all().order_by("-created_at")
    serializer_class = OutboxSerializer
    permission_classes = [IsAuthenticated, IsAdminUser]

    def get_queryset(self):
        q = self.queryset
        s = self.request.query_params.get("status")
        if s:
            q = q.filter(status=s.upper())
        to = self.request.query_params.get("to")
        if to:
            q = q.filter(to__iexact=to)
        return q

    @action(detail=True, methods=["post"])
    def resend(self, request, pk=None):
        """
        Manually resend an email from the outbox.

        Resets retry state and attempts an immediate send; on failure it is
        re-queued with backoff, same as process_outbox.
        """
        outbox = self.get_object()
        outbox.reset_for_resend()
        deliver(outbox, queue_if_failed=True)

        serializer = self.get_serializer(outbox)
        return Response(serializer.data)


class TemplateViewSet(viewsets.GenericViewSet, mixins.ListModelMixin, mixins.CreateModelMixin, mixins.UpdateModelMixin):
    queryset = Template.objects.all().order_by("code")
    serializer_class = TemplateSerializer
    permission_classes = [IsAuthenticated, IsAdminUser]


@csrf_exempt
def resend_webhook(request):
    secret = getattr(settings, "EMAILS_WEBHOOK_SECRET", "")
    if secret:
        sig = request.headers.get("X-Resend-Signature", "")
        raw = request.body
        mac = hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()
        if not hmac.compare_digest(sig, mac):
            return HttpResponseBadRequest("Invalid signature")

    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return HttpResponseBadRequest("Bad JSON")

    ev_type = payload.get("type", "")
    data = payload.get("data") or {}
    email_id = data.get("email_id") or data.get("id")
    if not email_id:
        return HttpResponseBadRequest("No email id")

    ob = Outbox.objects.filter(provider_message_id=email_id).first()
    if not ob:
        return JsonResponse({"ok": True})

    if ev_type.endswith("delivered"):
        ob.status = EmailStatus.DELIVERED
        ob.delivered_at = now()
        ob.save(update_fields=["status", "delivered_at"])
    elif ev_type.endswith("bounced") or ev_type.endswith("complained"):
        ob.status = EmailStatus.BOUNCED
        ob.last_error = f"Webhook: {ev_type}"
        ob.save(update_fields=["status", "last_error"])
        logger.warning("Email %s to %s %s", email_id, ob.to, ev_type)

    return JsonResponse({"ok": True})
