import datetime
from typing import Any, Dict, List

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.enums import UserRole
from appointments.enums import ApptStatus
from appointments.exceptions import DispatchError


# All scheduler tests run "today" = this date, at a wall-clock time they choose.
TODAY = datetime.date(2026, 3, 2)


def at(hour: int, minute: int, second: int = 0, day: datetime.date = TODAY) -> datetime.datetime:
    """Aware datetime in the active (server local) time zone."""
    return timezone.make_aware(datetime.datetime.combine(day, datetime.time(hour, minute, second)))


@pytest.fixture(autouse=True)
def _reminder_settings(settings):
    settings.REMINDERS_TIERS = [60, 30, 10]
    settings.REMINDERS_TOLERANCE_MINUTES = 1
    settings.REMINDERS_TRIGGER_SECRET = ""
    settings.REMINDERS_LEDGER_ENABLED = False
    settings.REMINDERS_LEASE_ENABLED = False
    settings.EMAILS_PROVIDER = "SMTP"
    settings.EMAILS_DELIVERY_MODE = "INLINE"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


@pytest.fixture()
def patient(django_user_model):
    return django_user_model.objects.create_user(
        email="ada@example.com", full_name="Ada Obi", role=UserRole.PATIENT
    )


@pytest.fixture()
def other_patient(django_user_model):
    return django_user_model.objects.create_user(
        email="tunde@example.com", full_name="Tunde Bakare", role=UserRole.PATIENT
    )


@pytest.fixture()
def doctor(django_user_model):
    from doctors.models import Doctor

    user = django_user_model.objects.create_user(
        email="dr.bola@example.com", full_name="Bola Ade", role=UserRole.DOCTOR
    )
    return Doctor.objects.create(
        user=user,
        full_name="Bola Ade",
        specialization="Cardiology",
        is_approved=True,
        available_from=datetime.time(8, 0),
        available_to=datetime.time(18, 0),
    )


@pytest.fixture()
def make_appointment(patient, doctor):
    from appointments.models import Appointment

    def _make(hour: int, minute: int, *, day: datetime.date = TODAY, status=ApptStatus.SCHEDULED, **kw):
        kw.setdefault("patient", patient)
        kw.setdefault("doctor", doctor)
        return Appointment.objects.create(
            appointment_date=day,
            appointment_time=datetime.time(hour, minute),
            status=status,
            **kw,
        )

    return _make


class FakeSender:
    """
    Stands in for the appointment email dispatcher; records every call.

    `fail_for` maps an address to the DispatchError raised for it.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.fail_for: Dict[str, Exception] = {}

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        err = self.fail_for.get(kwargs["to"])
        if err is not None:
            raise err
        return None

    def rate_limit(self, to: str):
        self.fail_for[to] = DispatchError("Resend API error (429): rate limited", status=429)


@pytest.fixture()
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture()
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture()
def patient_client(api_client, patient) -> APIClient:
    api_client.force_authenticate(user=patient)
    return api_client
