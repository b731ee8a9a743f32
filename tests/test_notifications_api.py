from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from notifications.enums import NotificationType
from notifications.models import Notification, ReminderRun
from notifications.services.notify import notify_user

pytestmark = pytest.mark.django_db

URL = "/api/notifications/"


def _notify(user, **kw):
    kw.setdefault("title", "Appointment in 10 minutes")
    kw.setdefault("message", "Your appointment with Dr. Bola Ade starts in 10 minutes.")
    kw.setdefault("type", NotificationType.APPOINTMENT_REMINDER)
    return notify_user(user=user, **kw)


def test_list_only_own_notifications(patient_client, patient, other_patient):
    _notify(patient)
    _notify(other_patient)

    resp = patient_client.get(URL)

    assert resp.status_code == 200
    rows = resp.json()
    assert len(rows) == 1
    assert rows[0]["user"] == patient.id
    assert rows[0]["time_ago"].endswith("s")


def test_filters(patient_client, patient):
    _notify(patient)
    read = _notify(patient, type=NotificationType.INFO, title="Welcome", message="Hi")
    read.mark_read()

    assert len(patient_client.get(URL, {"read": "false"}).json()) == 1
    assert len(patient_client.get(URL, {"read": "true"}).json()) == 1
    assert [n["title"] for n in patient_client.get(URL, {"type": "info"}).json()] == ["Welcome"]


def test_mark_read_and_unread_count(patient_client, patient):
    n = _notify(patient)
    _notify(patient)

    assert patient_client.get(URL + "unread_count/").json() == {"unread": 2}

    assert patient_client.post(f"{URL}{n.id}/read/").status_code == 200
    n.refresh_from_db()
    assert n.is_read and n.read_at is not None
    assert patient_client.get(URL + "unread_count/").json() == {"unread": 1}

    assert patient_client.post(URL + "read_all/").json() == {"ok": True, "updated": 1}
    assert patient_client.get(URL + "unread_count/").json() == {"unread": 0}


def test_cannot_read_someone_elses_notification(patient_client, other_patient):
    n = _notify(other_patient)
    assert patient_client.post(f"{URL}{n.id}/read/").status_code == 404


def test_requires_auth(api_client):
    assert api_client.get(URL).status_code == 401


def test_cleanup_deletes_old_read_notifications(patient, capsys):
    old_read = _notify(patient)
    old_read.mark_read()
    old_unread = _notify(patient)
    fresh = _notify(patient)
    fresh.mark_read()
    long_ago = timezone.now() - timedelta(days=120)
    Notification.objects.filter(pk__in=[old_read.pk, old_unread.pk]).update(created_at=long_ago)
    ReminderRun.objects.create(slot="2025-01-01T09:00", started_at=long_ago)

    call_command("cleanup_notifications", "--dry-run")
    assert Notification.objects.count() == 3

    call_command("cleanup_notifications", "--days", "90")

    assert set(Notification.objects.values_list("pk", flat=True)) == {old_unread.pk, fresh.pk}
    assert ReminderRun.objects.count() == 0
    assert "Cleanup complete: 1 deleted" in capsys.readouterr().out


def test_cleanup_include_unread(patient):
    n = _notify(patient)
    Notification.objects.filter(pk=n.pk).update(created_at=timezone.now() - timedelta(days=10))

    call_command("cleanup_notifications", "--days", "7", "--include-unread")

    assert Notification.objects.count() == 0


def test_mark_unread(patient_client, patient):
    n = _notify(patient)
    n.mark_read()

    assert patient_client.post(f"{URL}{n.id}/unread/").status_code == 200

    n.refresh_from_db()
    assert n.is_read is False
    assert n.read_at is None
