"""API views for the booking domain."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.payments.services import record_manual_payment

from .models import Booking
from .serializers import BookingCancelSerializer, BookingCreateSerializer, BookingSerializer
from .services import (
    BookingDetails,
    BookingError,
    BookingPermissionError,
    BookingStateError,
    LockNotUsable,
    SlotNoLongerAvailable,
    cancel_booking,
    confirm_booking,
    finalize_booking,
)

ERROR_STATUS = {
    LockNotUsable: status.HTTP_409_CONFLICT,
    SlotNoLongerAvailable: status.HTTP_409_CONFLICT,
    BookingStateError: status.HTTP_400_BAD_REQUEST,
    BookingPermissionError: status.HTTP_403_FORBIDDEN,
}


def booking_error_response(exc: BookingError) -> Response:
    code = next(
        (value for klass, value in ERROR_STATUS.items() if isinstance(exc, klass)),
        status.HTTP_400_BAD_REQUEST,
    )
    return Response({"detail": str(exc), "code": exc.code}, status=code)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Create bookings from held slots and manage them afterwards."""

    queryset = Booking.objects.select_related("customer", "venue", "venue__provider", "resource")
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "payment_status", "booking_date", "venue"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False) or (
            hasattr(user, "is_platform_admin") and user.is_platform_admin()
        ):
            return qs
        if hasattr(user, "is_provider") and user.is_provider():
            return qs.filter(venue__provider=user)
        return qs.filter(customer=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        details = BookingDetails(
            notes=data["notes"],
            payment_intent_id=data["payment_reference"],
        )
        try:
            with transaction.atomic():
                booking = finalize_booking(data["lock"], request.user.id, details)
                if booking.payment_intent_id:
                    record_manual_payment(booking)
        except BookingError as exc:
            return booking_error_response(exc)

        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = cancel_booking(booking, request.user, serializer.validated_data["reason"])
        except BookingError as exc:
            return booking_error_response(exc)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        try:
            booking = confirm_booking(booking, request.user)
        except BookingError as exc:
            return booking_error_response(exc)
        return Response(BookingSerializer(booking).data)
