from django.utils import timezone
from rest_framework import serializers

from doctors.models import Doctor
from .models import Appointment
from .enums import ApptStatus


class AppointmentSerializer(serializers.ModelSerializer):
    """
    Booking serializer. The patient is always the requesting user and new
    appointments always start as `scheduled`.
    """
    doctor = serializers.PrimaryKeyRelatedField(queryset=Doctor.objects.filter(is_approved=True))
    doctor_name = serializers.CharField(source="doctor.full_name", read_only=True)
    specialization = serializers.CharField(source="doctor.specialization", read_only=True)
    patient_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "patient",
            "patient_name",
            "doctor",
            "doctor_name",
            "specialization",
            "appointment_date",
            "appointment_time",
            "status",
            "reason",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["patient", "status", "created_at", "updated_at"]

    def get_patient_name(self, obj):
        return obj.patient.display_name or "Patient"

    def validate_appointment_time(self, value):
        # minute resolution
        return value.replace(second=0, microsecond=0)

    def validate(self, attrs):
        day = attrs["appointment_date"]
        at = attrs["appointment_time"]
        doctor = attrs["doctor"]

        if day < timezone.localdate():
            raise serializers.ValidationError("Appointments cannot be booked in the past.")

        if not (doctor.available_from <= at < doctor.available_to):
            raise serializers.ValidationError(
                f"Dr. {doctor.full_name} is available between "
                f"{doctor.available_from:%H:%M} and {doctor.available_to:%H:%M}."
            )

        taken = (
            Appointment.objects.filter(doctor=doctor, appointment_date=day, appointment_time=at)
            .exclude(status=ApptStatus.CANCELLED)
        )
        if taken.exists():
            raise serializers.ValidationError("This time slot is already booked.")
        return attrs

    def create(self, validated_data):
        return Appointment.objects.create(
            patient=self.context["request"].user,
            status=ApptStatus.SCHEDULED,
            **validated_data,
        )
