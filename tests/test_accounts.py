import pytest

from accounts.enums import UserRole

pytestmark = pytest.mark.django_db


def test_token_and_me(api_client, django_user_model):
    django_user_model.objects.create_user(email="Ada@Example.com", password="s3cure-pass!", full_name="Ada Obi")

    resp = api_client.post("/api/accounts/token/", {"email": "Ada@example.com", "password": "s3cure-pass!"}, format="json")
    assert resp.status_code == 200
    access = resp.json()["access"]

    me = api_client.get("/api/accounts/me/", HTTP_AUTHORIZATION=f"Bearer {access}")

    assert me.status_code == 200
    assert me.json()["full_name"] == "Ada Obi"
    assert me.json()["role"] == UserRole.PATIENT


def test_superuser_defaults_to_admin_role(django_user_model):
    admin = django_user_model.objects.create_superuser(email="root@example.com", password="x")
    assert admin.is_staff and admin.is_superuser
    assert admin.role == UserRole.ADMIN


def test_display_name_falls_back_to_first_last(django_user_model):
    u = django_user_model.objects.create_user(email="a@example.com", first_name="Ada", last_name="Obi")
    assert u.display_name == "Ada Obi"
    assert django_user_model.objects.create_user(email="b@example.com").display_name == ""
