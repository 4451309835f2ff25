"""Admin registration for venues."""

from __future__ import annotations

from django.contrib import admin

from .models import Resource, Sport, Venue


class ResourceInline(admin.TabularInline):
    model = Resource
    extra = 0


@admin.register(Sport)
class SportAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    search_fields = ("name",)


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "provider",
        "sport",
        "location",
        "price_per_hour",
        "verification_status",
        "is_active",
        "created_at",
    )
    list_filter = ("verification_status", "is_active", "sport")
    search_fields = ("name", "location", "provider__email")
    readonly_fields = ("created_at", "updated_at")
    inlines = [ResourceInline]
