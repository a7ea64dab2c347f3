"""Retainer API endpoints.

Each mutating endpoint follows the same order: validate, call the service,
schedule the live update for after the commit, respond. The response never
depends on whether the live update reached anyone.
"""

from __future__ import annotations

import logging

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import NotAuthenticated
from rest_framework.exceptions import NotFound as NotFoundError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from retainer.audit.api.serializers import AuditLogSerializer
from retainer.clients import services
from retainer.clients.exceptions import InvalidState
from retainer.clients.exceptions import NotFound
from retainer.clients.exceptions import ValidationFailed
from retainer.realtime.events.retainer import publish_client_deleted
from retainer.realtime.events.retainer import publish_details_updated
from retainer.realtime.events.retainer import publish_log_added
from retainer.realtime.events.retainer import publish_log_deleted
from retainer.realtime.events.retainer import publish_refill
from retainer.realtime.events.retainer import publish_status_updated

from .authentication import AdminTokenAuthentication
from .serializers import ClientAdminSerializer
from .serializers import ClientCreateSerializer
from .serializers import ClientSerializer
from .serializers import DetailsUpdateSerializer
from .serializers import RefillCreateSerializer
from .serializers import RefillSerializer
from .serializers import StatusUpdateSerializer
from .serializers import WorkLogCreateSerializer
from .serializers import WorkLogSerializer

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The retainer's status does not allow this change."
    default_code = "conflict"


class BadRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Malformed input."
    default_code = "invalid"


class RetainerAPIView(APIView):
    authentication_classes = [AdminTokenAuthentication]
    permission_classes = [AllowAny]

    def admin_token(self, request) -> str:
        if not request.auth:
            msg = "Unauthorized: Missing Admin Token"
            raise NotAuthenticated(msg)
        return request.auth

    def handle_exception(self, exc):
        if isinstance(exc, NotFound):
            exc = NotFoundError(str(exc))
        elif isinstance(exc, InvalidState):
            exc = Conflict(str(exc))
        elif isinstance(exc, ValidationFailed):
            exc = BadRequest(str(exc))
        return super().handle_exception(exc)


@extend_schema(tags=["Clients"])
class ClientCreateView(RetainerAPIView):
    authentication_classes = []

    @extend_schema(request=ClientCreateSerializer)
    def post(self, request):
        serializer = ClientCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        client = services.create_client(
            data["name"], data["totalHours"], data.get("refillLink", "")
        )
        # The only response that ever carries the admin token.
        return Response(
            {
                "message": "Retainer created successfully",
                "data": {
                    "adminToken": client.admin_token,
                    "slug": client.slug,
                    "adminUrl": f"/manage/{client.admin_token}",
                    "publicUrl": f"/{client.slug}",
                },
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Clients"])
class ClientAdminView(RetainerAPIView):
    def get(self, request):
        client = services.get_admin_view(self.admin_token(request))
        return Response({"role": "ADMIN", "data": ClientAdminSerializer(client).data})


@extend_schema(tags=["Clients"])
class ClientPublicView(RetainerAPIView):
    authentication_classes = []

    def get(self, request, slug: str):
        client = services.get_public_view(slug)
        return Response({"role": "CLIENT", "data": ClientSerializer(client).data})


@extend_schema(tags=["Clients"])
class ClientStatusView(RetainerAPIView):
    @extend_schema(request=StatusUpdateSerializer)
    def patch(self, request):
        token = self.admin_token(request)
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        client, _room = services.update_status(
            token, serializer.validated_data["status"]
        )
        transaction.on_commit(lambda: publish_status_updated(client))
        return Response({"data": ClientAdminSerializer(client).data})


@extend_schema(tags=["Clients"])
class ClientDetailsView(RetainerAPIView):
    @extend_schema(request=DetailsUpdateSerializer)
    def patch(self, request):
        token = self.admin_token(request)
        serializer = DetailsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        changes = {}
        if "name" in data:
            changes["name"] = data["name"]
        if "refillLink" in data:
            changes["refill_link"] = data["refillLink"]
        if "totalHours" in data:
            changes["total_hours"] = data["totalHours"]
        client, _room = services.update_details(token, **changes)
        transaction.on_commit(lambda: publish_details_updated(client))
        return Response({"success": True, "data": ClientAdminSerializer(client).data})

    def delete(self, request):
        token = self.admin_token(request)
        _client, room = services.delete_client(token)
        logger.info("Emitting deletion event to room %s", room)
        transaction.on_commit(lambda: publish_client_deleted(room))
        return Response({"success": True, "message": "Project deleted successfully"})


@extend_schema(tags=["Clients"])
class ClientRefillView(RetainerAPIView):
    @extend_schema(request=RefillCreateSerializer)
    def post(self, request):
        token = self.admin_token(request)
        serializer = RefillCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        refill, room = services.add_refill(token, data["hours"], data.get("note", ""))
        transaction.on_commit(lambda: publish_refill(refill, room))
        return Response(
            {
                "message": "Refill added",
                "data": {
                    "totalHours": float(refill.client.total_hours),
                    "refill": RefillSerializer(refill).data,
                },
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Clients"])
class ClientActivityView(RetainerAPIView):
    def get(self, request):
        token = self.admin_token(request)
        try:
            limit = int(request.query_params.get("limit", "20"))
        except (TypeError, ValueError):
            limit = 20
        rows = services.recent_activity(token, limit=limit)
        data = AuditLogSerializer(rows, many=True).data
        limit = max(1, min(limit, services.ACTIVITY_LIMIT_MAX))
        return Response({"results": data, "limit": limit})


@extend_schema(tags=["Logs"])
class WorkLogCreateView(RetainerAPIView):
    @extend_schema(request=WorkLogCreateSerializer)
    def post(self, request):
        token = self.admin_token(request)
        serializer = WorkLogCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        log, room = services.add_work_log(
            token, data["description"], data["hours"], data.get("date")
        )
        transaction.on_commit(lambda: publish_log_added(log, room))
        return Response(
            {"message": "Log added", "data": WorkLogSerializer(log).data},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Logs"])
class WorkLogDetailView(RetainerAPIView):
    def delete(self, request, log_id):
        token = self.admin_token(request)
        deleted_id, room = services.delete_work_log(token, log_id)
        transaction.on_commit(lambda: publish_log_deleted(deleted_id, room))
        return Response({"message": "Log deleted"})
