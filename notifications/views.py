from django.utils import timezone
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Notification
from .permissions import IsRecipient
from .serializers import NotificationSerializer

class NotificationViewSet(viewsets.GenericViewSet,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated, IsRecipient]

    def get_queryset(self):
        q = Notification.objects.filter(user=self.request.user)
        # filters: read, type
        read = self.request.query_params.get("read")
        ntype = self.request.query_params.get("type")
        if read is not None:
            q = q.filter(is_read=(read.lower() == "true"))
        if ntype:
            q = q.filter(type=ntype)
        return q

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        n = self.get_object()
        n.mark_read()
        return Response({"ok": True})

    @action(detail=True, methods=["post"])
    def unread(self, request, pk=None):
        n = self.get_object()
        n.mark_unread()
        return Response({"ok": True})

    @action(detail=False, methods=["post"])
    def read_all(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )
        return Response({"ok": True, "updated": updated})

    @action(detail=False, methods=["get"])
    def unread_count(self, request):
        count = Notification.objects.filter(user=request.user, is_read=False).count()
        return Response({"unread": count})
