from django.contrib import admin  # type: ignore

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "venue", "customer", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("venue__name", "customer__email", "booking__booking_code", "comment")
    raw_id_fields = ("customer", "venue", "booking")
