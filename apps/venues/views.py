"""Venue API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import VenueFilterSet
from .models import Resource, Sport, Venue
from .serializers import ResourceSerializer, SportSerializer, VenueSerializer


def _is_admin(user) -> bool:
    return bool(
        getattr(user, "is_staff", False)
        or (hasattr(user, "is_platform_admin") and user.is_platform_admin())
    )


class IsVenueOwnerOrAdmin(permissions.BasePermission):
    """Providers manage their own venues; admins manage all of them."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if _is_admin(user):
            return True
        return hasattr(user, "is_provider") and user.is_provider() and user.is_approved

    def has_object_permission(self, request, view, obj: Venue):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if _is_admin(user):
            return True
        return obj.provider_id == user.id


class SportViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Sport.objects.filter(is_active=True)
    serializer_class = SportSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None


class VenueViewSet(viewsets.ModelViewSet):
    """Public venue catalogue plus provider self-service."""

    queryset = Venue.objects.select_related("provider", "sport").prefetch_related("resources__sport")
    serializer_class = VenueSerializer
    permission_classes = [IsVenueOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = VenueFilterSet
    ordering_fields = ["price_per_hour", "created_at", "name"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        public = qs.filter(is_active=True, verification_status=Venue.VerificationStatus.APPROVED)
        if not user.is_authenticated:
            return public
        if _is_admin(user):
            return qs
        if hasattr(user, "is_provider") and user.is_provider():
            return (public | qs.filter(provider=user)).distinct()
        return public

    def perform_create(self, serializer):  # type: ignore
        serializer.save(provider=self.request.user)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):  # type: ignore
        if not _is_admin(request.user):
            raise PermissionDenied("Only administrators can approve venues.")
        venue: Venue = self.get_object()  # type: ignore
        venue.approve()
        return Response(self.get_serializer(venue).data)

    @action(detail=True, methods=["get", "post"])
    def resources(self, request, pk=None):  # type: ignore
        venue: Venue = self.get_object()  # type: ignore
        if request.method == "GET":
            qs = venue.resources.select_related("sport", "venue").filter(is_active=True)
            return Response(ResourceSerializer(qs, many=True).data)

        serializer = ResourceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        resource: Resource = serializer.save(venue=venue)
        return Response(ResourceSerializer(resource).data, status=status.HTTP_201_CREATED)
