from __future__ import annotations

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from retainer.clients.models import MIN_HOURS
from retainer.clients.models import Client
from retainer.clients.models import Refill
from retainer.clients.models import WorkLog

# Read serializers. Their output is also the payload of live updates, so every
# value must be JSON-native (hours as floats, ids and dates as strings).


class WorkLogSerializer(serializers.ModelSerializer):
    clientId = serializers.UUIDField(source="client_id", read_only=True)  # noqa: N815
    hours = serializers.FloatField(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)  # noqa: N815

    class Meta:
        model = WorkLog
        fields = ("id", "clientId", "description", "hours", "date", "createdAt")


class RefillSerializer(serializers.ModelSerializer):
    hours = serializers.FloatField(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)  # noqa: N815

    class Meta:
        model = Refill
        fields = ("id", "hours", "note", "createdAt")


class ClientSerializer(serializers.ModelSerializer):
    """Public dashboard view. Never exposes the admin token."""

    totalHours = serializers.FloatField(source="total_hours", read_only=True)  # noqa: N815
    usedHours = serializers.FloatField(source="used_hours", read_only=True)  # noqa: N815
    remainingHours = serializers.FloatField(  # noqa: N815
        source="remaining_hours", read_only=True
    )
    refillLink = serializers.CharField(source="refill_link", read_only=True)  # noqa: N815
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)  # noqa: N815
    logs = WorkLogSerializer(many=True, read_only=True)

    class Meta:
        model = Client
        fields = (
            "name",
            "slug",
            "status",
            "totalHours",
            "usedHours",
            "remainingHours",
            "refillLink",
            "createdAt",
            "logs",
        )


class ClientAdminSerializer(ClientSerializer):
    refills = RefillSerializer(many=True, read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)  # noqa: N815

    class Meta(ClientSerializer.Meta):
        fields = ("id", *ClientSerializer.Meta.fields, "refills", "updatedAt")


# Write serializers (request validation only; the service applies the change).


class ClientCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, trim_whitespace=True)
    totalHours = serializers.DecimalField(  # noqa: N815
        max_digits=10, decimal_places=2, min_value=MIN_HOURS
    )
    refillLink = serializers.URLField(  # noqa: N815
        max_length=500, required=False, allow_blank=True, default=""
    )


class WorkLogCreateSerializer(serializers.Serializer):
    description = serializers.CharField(trim_whitespace=True)
    hours = serializers.DecimalField(
        max_digits=8,
        decimal_places=2,
        min_value=MIN_HOURS,
        error_messages={"min_value": _("Hours must be a number > 0")},
    )
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)


class RefillCreateSerializer(serializers.Serializer):
    hours = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=MIN_HOURS)
    note = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )


class DetailsUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, trim_whitespace=True)
    # null or "" clears the link.
    refillLink = serializers.URLField(  # noqa: N815
        max_length=500, required=False, allow_blank=True, allow_null=True
    )
    totalHours = serializers.DecimalField(  # noqa: N815
        max_digits=10, decimal_places=2, required=False, min_value=MIN_HOURS
    )

    def validate(self, attrs):
        if not attrs:
            msg = _("Provide at least one of name, refillLink, totalHours.")
            raise serializers.ValidationError(msg)
        return attrs


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=Client.Status.choices,
        error_messages={
            "invalid_choice": "Status must be one of: "
            + ", ".join(Client.Status.values),
        },
    )
