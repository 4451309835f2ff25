"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Finalise a held slot into a booking.

    ``payment_reference`` is the UPI transaction id (or similar) the
    customer paid with; the venue verifies it before confirming.
    """

    lock = serializers.UUIDField()
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class BookingSerializer(serializers.ModelSerializer):
    customer_id = serializers.ReadOnlyField(source="customer.id")
    customer_name = serializers.ReadOnlyField(source="customer.display_name")
    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")
    resource_id = serializers.ReadOnlyField(source="resource.id")
    resource_name = serializers.ReadOnlyField(source="resource.name")
    label = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "customer_id",
            "customer_name",
            "venue_id",
            "venue_name",
            "resource_id",
            "resource_name",
            "booking_date",
            "start_time",
            "end_time",
            "label",
            "status",
            "payment_status",
            "payment_intent_id",
            "total_amount",
            "convenience_fee",
            "commission_percentage",
            "platform_commission",
            "provider_payout",
            "notes",
            "cancelled_at",
            "cancelled_by",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
