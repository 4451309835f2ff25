"""Serializers for the reservations API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.venues.models import Resource

from .models import SlotLock


class SlotQuerySerializer(serializers.Serializer):
    resource = serializers.PrimaryKeyRelatedField(queryset=Resource.objects.filter(is_active=True))
    date = serializers.DateField()


class SlotSerializer(serializers.Serializer):
    start_time = serializers.TimeField(format="%H:%M:%S")
    end_time = serializers.TimeField(format="%H:%M:%S")
    label = serializers.CharField()
    is_booked = serializers.BooleanField()
    is_past = serializers.BooleanField()
    is_locked = serializers.BooleanField()
    locked_by_me = serializers.BooleanField()
    is_available = serializers.BooleanField()
    lock_id = serializers.CharField(allow_null=True)


class LockRequestSerializer(serializers.Serializer):
    """Incoming lock request.

    Fields are optional here so the service can report a single
    ``missing_slot_info`` error instead of per-field messages.
    """

    resource = serializers.IntegerField(required=False, allow_null=True)
    slot_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.TimeField(required=False, allow_null=True)
    end_time = serializers.TimeField(required=False, allow_null=True)


class SlotLockSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)
    seconds_remaining = serializers.SerializerMethodField()
    resource_name = serializers.CharField(source="resource.name", read_only=True)
    venue = serializers.IntegerField(source="resource.venue_id", read_only=True)

    class Meta:
        model = SlotLock
        fields = [
            "id",
            "resource",
            "resource_name",
            "venue",
            "slot_date",
            "start_time",
            "end_time",
            "label",
            "status",
            "locked_at",
            "expires_at",
            "released_at",
            "seconds_remaining",
        ]
        read_only_fields = fields

    def get_seconds_remaining(self, obj: SlotLock) -> int:
        return obj.seconds_remaining()
