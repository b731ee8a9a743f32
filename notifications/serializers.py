from django.utils import timezone
from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    time_ago = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            "id",
            "user",
            "title",
            "message",
            "type",
            "related_id",
            "action_url",
            "is_read",
            "read_at",
            "created_at",
            "time_ago",
        ]
        read_only_fields = fields

    def get_time_ago(self, obj):
        # Keep frontend simple; still okay if frontend ignores this.
        delta = timezone.now() - obj.created_at
        seconds = max(0, int(delta.total_seconds()))
        if seconds < 60:
            return f"{seconds}s"
        minutes = seconds // 60
        if minutes < 60:
            return f"{minutes}m"
        hours = minutes // 60
        if hours < 24:
            return f"{hours}h"
        days = hours // 24
        return f"{days}d"
