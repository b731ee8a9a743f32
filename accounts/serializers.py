from rest_framework import serializers
from .models import User

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id","email","full_name","first_name","last_name","phone","role"]
        read_only_fields = fields
