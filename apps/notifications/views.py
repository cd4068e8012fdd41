"""API views for notifications."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """The authenticated user's own notifications."""

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["kind", "is_read"]

    def get_queryset(self):  # type: ignore
        return Notification.objects.filter(recipient=self.request.user)

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        return Response({
            "unread_count": self.get_queryset().filter(is_read=False).count(),
            "results": self.get_serializer(queryset, many=True).data,
        })

    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):  # type: ignore
        notification = self.get_object()
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read"])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):  # type: ignore
        updated = self.get_queryset().filter(is_read=False).update(is_read=True)
        logger.info(f"User {request.user.pk} marked {updated} notifications as read")
        return Response({"updated": updated})
