from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import SlotCatalogView, SlotLockViewSet

router = DefaultRouter()
router.register("locks", SlotLockViewSet, basename="slot-lock")

urlpatterns = [
    path("slots/", SlotCatalogView.as_view(), name="slot-catalog"),
    path("", include(router.urls)),
]
