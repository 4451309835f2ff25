"""Reservation API views."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .serializers import (
    LockRequestSerializer,
    SlotLockSerializer,
    SlotQuerySerializer,
    SlotSerializer,
)
from .services import (
    LockNotFound,
    LockStateError,
    MissingSlotInfo,
    NotAuthenticated,
    ReservationError,
    ResourceUnavailable,
    SlotAlreadyBooked,
    SlotLockedByAnother,
    TransientFailure,
    acquire_lock,
    get_lock,
    release_lock,
    sweep_expired_locks,
)
from .slots import generate_slots

ERROR_STATUS = {
    MissingSlotInfo: status.HTTP_400_BAD_REQUEST,
    NotAuthenticated: status.HTTP_401_UNAUTHORIZED,
    ResourceUnavailable: status.HTTP_404_NOT_FOUND,
    LockNotFound: status.HTTP_404_NOT_FOUND,
    SlotLockedByAnother: status.HTTP_409_CONFLICT,
    SlotAlreadyBooked: status.HTTP_409_CONFLICT,
    LockStateError: status.HTTP_409_CONFLICT,
    TransientFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def reservation_error_response(exc: ReservationError) -> Response:
    return Response(
        {"detail": str(exc), "code": exc.code},
        status=ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
    )


class SlotCatalogView(APIView):
    """Hourly slots of one resource for one date, with live occupancy."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = SlotQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        resource = query.validated_data["resource"]
        slot_date = query.validated_data["date"]

        sweep_expired_locks()
        viewer_id = request.user.id if request.user.is_authenticated else None
        slots = generate_slots(resource.id, slot_date, viewer_id)

        return Response(
            {
                "resource": resource.id,
                "date": slot_date,
                "slots": SlotSerializer(slots, many=True).data,
            }
        )


class SlotLockViewSet(viewsets.GenericViewSet):
    """Acquire, inspect and release slot locks held by the current user."""

    serializer_class = SlotLockSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def create(self, request):  # type: ignore
        payload = LockRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        try:
            lock, created = acquire_lock(
                data.get("resource"),
                data.get("slot_date"),
                data.get("start_time"),
                data.get("end_time"),
                request.user.id,
            )
        except ReservationError as exc:
            return reservation_error_response(exc)

        return Response(
            SlotLockSerializer(lock).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def retrieve(self, request, pk=None):  # type: ignore
        try:
            lock = get_lock(pk, request.user.id)
        except ReservationError as exc:
            return reservation_error_response(exc)
        return Response(SlotLockSerializer(lock).data)

    @action(detail=True, methods=["post"])
    def release(self, request, pk=None):  # type: ignore
        try:
            lock = release_lock(pk, request.user.id)
        except ReservationError as exc:
            return reservation_error_response(exc)
        return Response(SlotLockSerializer(lock).data)
