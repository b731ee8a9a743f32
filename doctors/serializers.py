from rest_framework import serializers

from .models import Doctor


class DoctorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Doctor
        fields = [
            "id", "full_name", "specialization", "bio", "qualification",
            "experience_years", "consultation_fee", "available_from", "available_to",
            "is_approved", "is_featured",
        ]
        read_only_fields = ["is_approved", "is_featured"]
