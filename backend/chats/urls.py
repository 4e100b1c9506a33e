from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

app_name = "chats"

router = SimpleRouter()
router.register(
    prefix=r"",
    viewset=views.ChatViewSet,
    basename="chat",
)

urlpatterns = [
    path("", include(router.urls)),
]
