import hashlib
import hmac
import io
import json
import urllib.error
from datetime import timedelta

import pytest
from django.core import mail
from django.core.management import call_command
from django.utils import timezone

from appointments.exceptions import DispatchError
from emails.models import EmailStatus, Outbox, Template
from emails.services import router
from emails.services.appointments import send_appointment_email
from emails.services.providers import resend_provider
from emails.services.render import render_template

pytestmark = pytest.mark.django_db

SEND_URL = "/api/emails/send/"


@pytest.fixture()
def resend(settings, monkeypatch):
    """Route email through the Resend provider with a stubbed HTTP call."""
    settings.EMAILS_PROVIDER = "RESEND"
    settings.RESEND_API_KEY = "re_test"
    calls = []

    def ok(url, data, headers):
        calls.append({"url": url, "payload": json.loads(data), "headers": headers})
        return 200, json.dumps({"id": "re_msg_1"})

    monkeypatch.setattr(resend_provider, "_http_post", ok)
    return calls


def _http_error(code, body):
    return urllib.error.HTTPError(resend_provider.RESEND_URL, code, "error", {}, io.BytesIO(body.encode()))


def test_builtin_reminder_template_renders():
    subject, html, text = render_template("appointment_reminder", {
        "brand": "CURAX Healthcare",
        "patient_name": "Ada <Obi>",
        "doctor_name": "Bola Ade",
        "date": "2026-03-02",
        "time": "14:30",
        "reminder_minutes": 30,
    })

    assert subject == "Appointment Reminder (30 min) - CURAX Healthcare"
    assert "Your appointment is in 30 minutes!" in html
    assert "Ada &lt;Obi&gt;" in html
    assert "Ada <Obi>" in text
    assert "$" not in html


def test_database_template_overrides_builtin():
    Template.objects.create(code="appointment_confirmation", subject="Booked with $doctor_name", html="<p>$date</p>")

    subject, html, text = render_template("appointment_confirmation", {"doctor_name": "Bola", "date": "2026-03-02"})

    assert subject == "Booked with Bola"
    assert html == "<p>2026-03-02</p>"
    assert text == ""


def test_unknown_template_raises():
    with pytest.raises(Template.DoesNotExist):
        render_template("newsletter", {})


def test_send_appointment_email_via_smtp():
    outbox = send_appointment_email(
        type="appointment_confirmation",
        to="ada@example.com",
        patient_name="Ada Obi",
        doctor_name="Bola Ade",
        date="02-03-2026",
        time="14:30",
    )

    assert outbox.status == EmailStatus.SENT
    assert outbox.tags == ["appointment_confirmation"]
    assert len(mail.outbox) == 1
    assert mail.outbox[0].subject == "Appointment Confirmed - CURAX Healthcare"


def test_send_appointment_email_via_resend(resend):
    outbox = send_appointment_email(
        type="appointment_reminder",
        to="ada@example.com",
        patient_name="Ada Obi",
        doctor_name="Bola Ade",
        date="2026-03-02",
        time="14:30",
        reminder_minutes=10,
    )

    assert outbox.provider_message_id == "re_msg_1"
    assert outbox.provider_status == 200
    payload = resend[0]["payload"]
    assert payload["to"] == ["ada@example.com"]
    assert payload["subject"] == "Appointment Reminder (10 min) - CURAX Healthcare"
    assert payload["from"] == "CURAX Healthcare <onboarding@resend.dev>"
    assert resend[0]["headers"]["Authorization"] == "Bearer re_test"


def test_rate_limited_send_raises_dispatch_error_without_requeue(resend, monkeypatch):
    def limited(url, data, headers):
        raise _http_error(429, '{"message": "Too many requests"}')

    monkeypatch.setattr(resend_provider, "_http_post", limited)

    with pytest.raises(DispatchError) as exc:
        send_appointment_email(
            type="appointment_reminder", to="ada@example.com", patient_name="Ada", doctor_name="Bola",
            date="2026-03-02", time="14:30", reminder_minutes=60,
        )

    assert exc.value.status == 429
    assert "Too many requests" in str(exc.value)
    assert Outbox.objects.get().status == EmailStatus.FAILED


def test_reminder_requires_minutes():
    with pytest.raises(ValueError):
        send_appointment_email(
            type="appointment_reminder", to="ada@example.com", patient_name="Ada", doctor_name="Bola",
            date="2026-03-02", time="14:30",
        )


def test_failed_send_is_requeued_with_backoff(resend, monkeypatch, settings):
    settings.EMAILS_RETRY_BACKOFF_SEC = 60

    def down(url, data, headers):
        raise _http_error(503, "unavailable")

    monkeypatch.setattr(resend_provider, "_http_post", down)
    before = timezone.now()

    o = router.send_email(to="ada@example.com", subject="Hi", html="<p>x</p>", delivery_mode="INLINE")

    o.refresh_from_db()
    assert o.status == EmailStatus.QUEUED
    assert o.retry_count == 1
    assert o.provider_status == 503
    assert o.next_attempt_at >= before + timedelta(seconds=60)


def test_queue_mode_defers_to_process_outbox(resend, capsys):
    o = router.send_email(to="ada@example.com", subject="Hi", html="<p>x</p>", delivery_mode="QUEUE")
    assert resend == []

    call_command("process_outbox")

    o.refresh_from_db()
    assert o.status == EmailStatus.SENT
    assert "sent 1" in capsys.readouterr().out


def test_process_outbox_gives_up_after_max_retries(resend, monkeypatch, settings):
    settings.EMAILS_MAX_RETRIES = 3
    def broken(url, data, headers):
        raise _http_error(500, "boom")

    monkeypatch.setattr(resend_provider, "_http_post", broken)
    o = Outbox.objects.create(to="ada@example.com", subject="Hi", retry_count=2)

    call_command("process_outbox")

    o.refresh_from_db()
    assert o.status == EmailStatus.FAILED
    assert o.retry_count == 3


def test_send_endpoint(patient_client, resend):
    resp = patient_client.post(SEND_URL, {
        "type": "appointment_reminder",
        "to": "ada@example.com",
        "patientName": "Ada Obi",
        "doctorName": "Bola Ade",
        "date": "2026-03-02",
        "time": "14:30",
        "reminderMinutes": 60,
    }, format="json")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "id": "re_msg_1"}


def test_send_endpoint_passes_upstream_status(patient_client, resend, monkeypatch):
    def forbidden(url, data, headers):
        raise _http_error(403, "You can only send testing emails to your own email address")

    monkeypatch.setattr(resend_provider, "_http_post", forbidden)

    resp = patient_client.post(SEND_URL, {
        "type": "appointment_confirmation",
        "to": "someone@example.com",
        "patientName": "Ada Obi",
        "doctorName": "Bola Ade",
        "date": "02-03-2026",
        "time": "14:30",
    }, format="json")

    assert resp.status_code == 403
    body = resp.json()
    assert body["success"] is False
    assert body["status"] == 403
    assert "testing emails" in body["error"]


def test_send_endpoint_rejects_bad_body(patient_client):
    resp = patient_client.post(SEND_URL, {"type": "appointment_reminder", "to": "not-an-email"}, format="json")
    assert resp.status_code == 400


def test_send_endpoint_requires_auth(api_client):
    assert api_client.post(SEND_URL, {}, format="json").status_code == 401


def test_resend_webhook_marks_delivered(client, settings):
    settings.EMAILS_WEBHOOK_SECRET = "whsec"
    o = Outbox.objects.create(to="ada@example.com", subject="Hi", provider_message_id="re_msg_9", status=EmailStatus.SENT)
    body = json.dumps({"type": "email.delivered", "data": {"email_id": "re_msg_9"}}).encode()
    sig = hmac.new(b"whsec", body, hashlib.sha256).hexdigest()

    bad = client.post("/api/emails/webhooks/resend/", body, content_type="application/json", HTTP_X_RESEND_SIGNATURE="nope")
    ok = client.post("/api/emails/webhooks/resend/", body, content_type="application/json", HTTP_X_RESEND_SIGNATURE=sig)

    assert bad.status_code == 400
    assert ok.status_code == 200
    o.refresh_from_db()
    assert o.status == EmailStatus.DELIVERED
    assert o.delivered_at is not None
