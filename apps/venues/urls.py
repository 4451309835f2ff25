"""URL routing for the venues domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import SportViewSet, VenueViewSet

router = DefaultRouter()
router.register(r"sports", SportViewSet, basename="sport")
router.register(r"", VenueViewSet, basename="venue")

urlpatterns = [
    path("", include(router.urls)),
]
