"""Serializers for the payments API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Payout


class CreateOrderSerializer(serializers.Serializer):
    lock = serializers.UUIDField()


class VerifyPaymentSerializer(serializers.Serializer):
    razorpay_order_id = serializers.CharField(max_length=64)
    razorpay_payment_id = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    razorpay_signature = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")



class PayoutSerializer(serializers.ModelSerializer):
    booking_code = serializers.ReadOnlyField(source="booking.booking_code")
    booking_date = serializers.ReadOnlyField(source="booking.booking_date")
    venue_name = serializers.ReadOnlyField(source="booking.venue.name")

    class Meta:
        model = Payout
        fields = [
            "id",
            "booking",
            "booking_code",
            "booking_date",
            "venue_name",
            "gross_amount",
            "commission_percentage",
            "commission_amount",
            "net_amount",
            "status",
            "payout_date",
            "transaction_reference",
            "created_at",
        ]
        read_only_fields = fields


class PayoutSettleSerializer(serializers.Serializer):
    transaction_reference = serializers.CharField(max_length=255)
    payout_date = serializers.DateField(required=False)
