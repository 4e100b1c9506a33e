"""
Routes for the notification inbox and the enumerations the report screens
use for their status, user-type and chat-type labels.

Mounted at ``api/core/``:

- ``constants/``: report statuses, user types and chat types.
- ``notifications/``: the caller's notifications, newest first
  (``?unread=true`` for unseen ones only).
- ``notifications/<id>/read/``: mark one of the caller's notifications seen.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "core"

inbox_router = DefaultRouter()
inbox_router.register(r"notifications", views.NotificationViewSet, basename="notification")

urlpatterns = [
    path("constants/", views.SystemConstantsView.as_view(), name="system-constants"),
    path("", include(inbox_router.urls)),
]
