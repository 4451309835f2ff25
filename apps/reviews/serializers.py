"""Serializers for reviews.

The reviewing customer and the venue are taken from the booking in the
view, so a create request only names the booking.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking

from .models import Review


class ReviewCreateSerializer(serializers.ModelSerializer):
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.select_related("venue"))

    class Meta:
        model = Review
        fields = ["booking", "rating", "comment"]

    def validate_rating(self, value: int) -> int:  # type: ignore
        if value < 1 or value > 5:
            raise serializers.ValidationError("Rating must be between 1 and 5.")
        return value


class ReviewSerializer(serializers.ModelSerializer):
    customer_name = serializers.ReadOnlyField(source="customer.display_name")
    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")
    booking_code = serializers.ReadOnlyField(source="booking.booking_code")

    class Meta:
        model = Review
        fields = [
            "id",
            "customer_name",
            "venue_id",
            "venue_name",
            "booking_code",
            "rating",
            "comment",
            "created_at",
        ]
        read_only_fields = fields
