"""
URL routing for notification endpoints.
"""

from django.urls import path
from apps.notifications import views

app_name = "notifications"

urlpatterns = [
    path("", views.list_notifications, name="list-notifications"),
    path("read-all", views.mark_all_notifications_read, name="read-all-notifications"),
    path(
        "<uuid:notificationId>/read",
        views.mark_notification_read,
        name="mark-notification-read",
    ),
]
