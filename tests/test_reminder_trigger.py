import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import DatabaseError

from appointments import views
from appointments.services import reminders
from appointments.services.reminders import ReminderScheduler
from appointments.management.commands import check_appointment_reminders as command
from notifications.models import Notification
from notifications.services import ledger

from conftest import at

pytestmark = pytest.mark.django_db

URL = "/api/functions/check-appointment-reminders/"


@pytest.fixture()
def frozen(monkeypatch, sender):
    """Point both trigger surfaces at 13:30 with the fake dispatcher."""
    def factory(**kwargs):
        kwargs.setdefault("now", at(13, 30))
        kwargs.setdefault("send_email", sender)
        return ReminderScheduler(**kwargs)

    monkeypatch.setattr(views, "ReminderScheduler", factory)
    monkeypatch.setattr(command, "ReminderScheduler", factory)
    return factory


def test_trigger_runs_and_reports_count(client, frozen, make_appointment):
    make_appointment(14, 30)

    resp = client.post(URL)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "remindersSent": 1, "failures": []}
    assert resp["Access-Control-Allow-Origin"] == "*"
    assert Notification.objects.count() == 1


def test_trigger_accepts_get(client, frozen):
    resp = client.get(URL)
    assert resp.status_code == 200
    assert resp.json()["remindersSent"] == 0


def test_trigger_answers_preflight(client):
    resp = client.options(URL)
    assert resp.status_code == 200
    assert "authorization" in resp["Access-Control-Allow-Headers"]


def test_trigger_reports_fetch_failure_as_500(client, frozen, monkeypatch):
    def broken(day):
        raise DatabaseError("relation \"appointments\" does not exist")

    monkeypatch.setattr(reminders, "scheduled_for_date", broken)

    resp = client.post(URL)

    assert resp.status_code == 500
    assert "does not exist" in resp.json()["error"]
    assert Notification.objects.count() == 0


def test_trigger_reports_per_pair_failures(client, frozen, sender, patient, make_appointment):
    appt = make_appointment(14, 30)
    sender.rate_limit(patient.email)

    data = client.post(URL).json()

    assert data["success"] is True
    assert data["remindersSent"] == 1
    assert data["failures"][0]["appointment_id"] == appt.id
    assert data["failures"][0]["stage"] == "email"


def test_trigger_secret(client, frozen, settings):
    settings.REMINDERS_TRIGGER_SECRET = "s3cret"

    assert client.post(URL).status_code == 401
    assert client.post(URL, HTTP_AUTHORIZATION="Bearer wrong").status_code == 401
    assert client.post(URL, HTTP_AUTHORIZATION="Bearer s3cret").status_code == 200


def test_trigger_rejects_other_methods(client):
    assert client.delete(URL).status_code == 405


def test_command_sends_due_reminders(frozen, make_appointment, capsys):
    make_appointment(14, 30)

    call_command("check_appointment_reminders")

    out = capsys.readouterr().out
    assert "Reminders sent=1" in out
    assert Notification.objects.count() == 1


def test_command_dry_run_has_no_side_effects(frozen, sender, make_appointment, capsys):
    appt = make_appointment(14, 30)

    call_command("check_appointment_reminders", "--dry-run")

    out = capsys.readouterr().out
    assert f"Would send 60-min reminder appointment={appt.id}" in out
    assert Notification.objects.count() == 0
    assert sender.calls == []


def test_command_custom_tiers(frozen, make_appointment, capsys):
    make_appointment(13, 45)

    call_command("check_appointment_reminders", "--tiers", "15", "--tolerance", "0")

    assert Notification.objects.get().title == "Appointment in 15 minutes"


def test_command_fetch_failure_raises_command_error(frozen, monkeypatch):
    def broken(day):
        raise DatabaseError("timeout")

    monkeypatch.setattr(reminders, "scheduled_for_date", broken)

    with pytest.raises(CommandError, match="timeout"):
        call_command("check_appointment_reminders")


def test_trigger_reports_lease_store_failure_as_json_500(client, frozen, settings, monkeypatch, make_appointment):
    settings.REMINDERS_LEASE_ENABLED = True
    make_appointment(14, 30)

    def down(slot):
        raise DatabaseError("could not connect to server")

    monkeypatch.setattr(ledger, "acquire_run_lease", down)

    resp = client.post(URL)

    assert resp.status_code == 500
    assert resp["Content-Type"] == "application/json"
    assert resp["Access-Control-Allow-Origin"] == "*"
    assert "could not connect" in resp.json()["error"]
    assert Notification.objects.count() == 0


def test_command_lease_store_failure_raises_command_error(frozen, settings, monkeypatch):
    settings.REMINDERS_LEASE_ENABLED = True

    def down(slot):
        raise DatabaseError("could not connect to server")

    monkeypatch.setattr(ledger, "acquire_run_lease", down)

    with pytest.raises(CommandError, match="could not connect"):
        call_command("check_appointment_reminders")
