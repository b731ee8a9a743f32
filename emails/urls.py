from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import OutboxViewSet, TemplateViewSet, resend_webhook, send_appointment_email_view

router = DefaultRouter()
router.register("outbox", OutboxViewSet, basename="outbox")
router.register("templates", TemplateViewSet, basename="template")

urlpatterns = [
    path("send/", send_appointment_email_view, name="email-send"),
    path("webhooks/resend/", resend_webhook, name="email-resend-webhook"),
    path("", include(router.urls)),
]
