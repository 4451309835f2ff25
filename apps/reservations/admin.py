from django.contrib import admin  # type: ignore

from .models import SlotLock


@admin.register(SlotLock)
class SlotLockAdmin(admin.ModelAdmin):
    list_display = ("id", "resource", "slot_date", "start_time", "locked_by", "status", "expires_at")
    list_filter = ("status", "slot_date")
    search_fields = ("locked_by__email", "resource__name", "resource__venue__name")
    readonly_fields = ("locked_at", "released_at", "created_at", "updated_at")
    raw_id_fields = ("resource", "locked_by")
