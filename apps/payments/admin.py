from django.contrib import admin  # type: ignore

from .models import Payment, Payout


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "booking", "method", "status", "total_amount", "gateway_order_id", "paid_at")
    list_filter = ("method", "status")
    search_fields = ("gateway_order_id", "gateway_payment_id", "customer__email", "booking__booking_code")
    readonly_fields = ("created_at", "updated_at", "metadata")
    raw_id_fields = ("customer", "slot_lock", "booking")


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "provider", "booking", "net_amount", "status", "payout_date")
    list_filter = ("status",)
    search_fields = ("provider__email", "booking__booking_code", "transaction_reference")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("provider", "booking")
