from rest_framework import serializers
from .models import Outbox, Template, EmailType


class OutboxSerializer(serializers.ModelSerializer):
    class Meta:
        model = Outbox
        fields = "__all__"


class TemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Template
        fields = ["id","code","subject","html","text","created_at"]


class AppointmentEmailSerializer(serializers.Serializer):
    """Body of POST /api/emails/send/ (camelCase, as the web client sends it)."""
    type = serializers.ChoiceField(choices=EmailType.choices)
    to = serializers.EmailField()
    patientName = serializers.CharField(required=False, allow_blank=True, default="Patient")
    doctorName = serializers.CharField(required=False, allow_blank=True, default="Doctor")
    date = serializers.CharField()
    time = serializers.CharField()
    reminderMinutes = serializers.IntegerField(required=False, allow_null=True, min_value=1, default=None)

    def validate(self, attrs):
        if attrs["type"] == EmailType.APPOINTMENT_REMINDER and attrs.get("reminderMinutes") is None:
            raise serializers.ValidationError({"reminderMinutes": "Required for appointment reminders."})
        return attrs
