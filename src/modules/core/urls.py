from django.urls import path

from modules.core.views import LogoutView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/auth/logout/", LogoutView.as_view(), name="logout"),
]
