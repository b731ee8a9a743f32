from rest_framework.permissions import BasePermission


class IsRecipient(BasePermission):
    """Notifications are only visible to and changeable by the user they were sent to."""

    def has_object_permission(self, request, view, obj):
        u = request.user
        return bool(u and u.is_authenticated and obj.user_id == u.id)
