"""Serializers for the venues domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Resource, Sport, Venue


class SportSerializer(serializers.ModelSerializer):
    class Meta:
        model = Sport
        fields = ["id", "name", "icon"]


class ResourceSerializer(serializers.ModelSerializer):
    sport_name = serializers.ReadOnlyField(source="sport.name")
    hourly_rate = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Resource
        fields = [
            "id",
            "venue",
            "sport",
            "sport_name",
            "name",
            "price_per_hour",
            "hourly_rate",
            "is_active",
        ]
        read_only_fields = ["id", "venue", "sport_name", "hourly_rate"]


class VenueSerializer(serializers.ModelSerializer):
    provider_id = serializers.ReadOnlyField(source="provider.id")
    sport_name = serializers.ReadOnlyField(source="sport.name")
    resources = ResourceSerializer(many=True, read_only=True)

    class Meta:
        model = Venue
        fields = [
            "id",
            "provider_id",
            "sport",
            "sport_name",
            "name",
            "location",
            "address",
            "description",
            "price_per_hour",
            "is_active",
            "is_verified",
            "verification_status",
            "resources",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "provider_id",
            "sport_name",
            "is_verified",
            "verification_status",
            "resources",
            "created_at",
            "updated_at",
        ]
