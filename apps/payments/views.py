"""Payment API views."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.serializers import BookingSerializer
from apps.bookings.services import BookingError
from apps.bookings.views import booking_error_response
from apps.reservations.services import ReservationError
from apps.reservations.views import reservation_error_response

from .gateway import PaymentGatewayError, PaymentVerificationError
from .models import Payout
from .serializers import (
    CreateOrderSerializer,
    PayoutSerializer,
    PayoutSettleSerializer,
    VerifyPaymentSerializer,
)
from .services import (
    PayoutAlreadySettled,
    create_order_for_lock,
    payout_summary,
    settle_payout,
    verify_and_finalize,
)


class CreateOrderView(APIView):
    """Open a gateway order for a slot the caller currently holds."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment, gateway = create_order_for_lock(serializer.validated_data["lock"], request.user)
        except ReservationError as exc:
            return reservation_error_response(exc)
        except BookingError as exc:
            return booking_error_response(exc)
        except PaymentGatewayError as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_502_BAD_GATEWAY)

        return Response(
            {
                "payment_id": payment.pk,
                "order_id": payment.gateway_order_id,
                "amount": payment.amount_in_paise,
                "currency": payment.currency,
                "key_id": gateway.key_id,
                "base_amount": payment.amount,
                "convenience_fee": payment.convenience_fee,
                "total_amount": payment.total_amount,
                "test_mode": gateway.test_mode,
            },
            status=status.HTTP_201_CREATED,
        )


class VerifyPaymentView(APIView):
    """Verify the gateway's payment signature and finalise the booking."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            booking = verify_and_finalize(
                data["razorpay_order_id"],
                data["razorpay_payment_id"],
                data["razorpay_signature"],
                request.user,
                notes=data["notes"],
            )
        except PaymentVerificationError as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)
        except BookingError as exc:
            return booking_error_response(exc)

        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


def _is_admin(user) -> bool:
    return bool(
        getattr(user, "is_staff", False)
        or (hasattr(user, "is_platform_admin") and user.is_platform_admin())
    )


class PayoutViewSet(viewsets.ReadOnlyModelViewSet):
    """Provider earnings per completed booking, settled by administrators."""

    queryset = Payout.objects.select_related("booking", "booking__venue", "provider")
    serializer_class = PayoutSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status"]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if _is_admin(user):
            return qs
        if hasattr(user, "is_provider") and user.is_provider():
            return qs.filter(provider=user)
        return qs.none()

    @action(detail=False, methods=["get"])
    def summary(self, request):  # type: ignore
        return Response(payout_summary(self.filter_queryset(self.get_queryset())))

    @action(detail=True, methods=["post"])
    def settle(self, request, pk=None):  # type: ignore
        if not _is_admin(request.user):
            raise PermissionDenied("Only administrators can settle payouts.")
        payout: Payout = self.get_object()  # type: ignore
        serializer = PayoutSettleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payout = settle_payout(
                payout,
                serializer.validated_data["transaction_reference"],
                on_date=serializer.validated_data.get("payout_date"),
            )
        except PayoutAlreadySettled as exc:
            return Response({"detail": str(exc), "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PayoutSerializer(payout).data)
