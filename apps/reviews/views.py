"""API views for venue reviews."""

from __future__ import annotations

from django.db.models import Avg, Count  # type: ignore
from rest_framework import mixins, permissions, serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking

from .models import Review
from .serializers import ReviewCreateSerializer, ReviewSerializer


def _is_admin(user) -> bool:
    return bool(
        getattr(user, "is_staff", False)
        or (hasattr(user, "is_platform_admin") and user.is_platform_admin())
    )


class IsReviewerOrAdmin(permissions.BasePermission):
    """Customers remove their own reviews; admins moderate all of them."""

    def has_object_permission(self, request, view, obj: Review) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return _is_admin(user) or obj.customer_id == user.id


class ReviewViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Public venue reviews; customers add one per completed booking."""

    queryset = Review.objects.select_related("customer", "venue", "booking")
    permission_classes = [permissions.IsAuthenticatedOrReadOnly, IsReviewerOrAdmin]
    filterset_fields = ["venue", "rating"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        return ReviewSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = self.perform_create(serializer)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def perform_create(self, serializer):  # type: ignore
        booking: Booking = serializer.validated_data["booking"]
        if booking.customer_id != self.request.user.id or booking.status != Booking.Status.COMPLETED:
            raise serializers.ValidationError(
                {"booking": "You can only review your own completed bookings."}
            )
        if Review.objects.filter(booking=booking).exists():
            raise serializers.ValidationError({"booking": "You have already reviewed this booking."})
        return serializer.save(customer=self.request.user, venue=booking.venue)

    @action(detail=False, methods=["get"])
    def summary(self, request):  # type: ignore
        stats = self.filter_queryset(self.get_queryset()).aggregate(
            average_rating=Avg("rating"),
            review_count=Count("id"),
        )
        if stats["average_rating"] is not None:
            stats["average_rating"] = round(stats["average_rating"], 1)
        return Response(stats)
