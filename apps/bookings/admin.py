"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "venue",
        "resource",
        "customer",
        "booking_date",
        "start_time",
        "status",
        "payment_status",
        "total_amount",
    )
    list_filter = ("status", "payment_status", "booking_date", "cancelled_by")
    search_fields = ("booking_code", "venue__name", "customer__email", "payment_intent_id")
    readonly_fields = (
        "booking_code",
        "slot_lock",
        "total_amount",
        "commission_percentage",
        "platform_commission",
        "provider_payout",
        "created_at",
        "updated_at",
    )
    raw_id_fields = ("customer", "venue", "resource")
