"""
Notification views - the authenticated user's own notifications.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.notifications import services
from apps.notifications.models import Notification
from apps.notifications.serializers import NotificationSerializer


class NotificationPagination(LimitOffsetPagination):
    default_limit = 20
    max_limit = 100


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    """
    GET /api/v1/notifications/

    Own notifications, newest first. `unread=true` limits to unread ones.
    """
    queryset = Notification.objects.for_user(request.user.id)
    if request.query_params.get("unread") in ("true", "1"):
        queryset = queryset.unread()

    paginator = NotificationPagination()
    page = paginator.paginate_queryset(queryset.order_by("-created_at"), request)
    serializer = NotificationSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def mark_notification_read(request, notificationId):
    """POST /api/v1/notifications/{notificationId}/read"""
    notification = services.mark_read(request.user.id, notificationId)
    return Response(
        {"data": NotificationSerializer(notification).data}, status=status.HTTP_200_OK
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def mark_all_notifications_read(request):
    """POST /api/v1/notifications/read-all"""
    count = services.mark_all_read(request.user.id)
    return Response({"data": {"updated": count}}, status=status.HTTP_200_OK)
