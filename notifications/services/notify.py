from django.contrib.auth import get_user_model
from django.db import transaction

from notifications.enums import NotificationType
from notifications.models import Notification

User = get_user_model()


@transaction.atomic
def notify_user(
    *,
    user: User,
    title: str,
    message: str,
    type: str = NotificationType.INFO,
    related_id: int | None = None,
    action_url: str = "",
) -> Notification:
    """
    Create one in-app notification row for `user`.

    Runs in its own atomic block so a rejected insert never poisons the
    caller's transaction.
    """
    return Notification.objects.create(
        user=user,
        title=title,
        message=message,
        type=type,
        related_id=related_id,
        action_url=action_url or "",
    )
