import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

MIN_HOURS = Decimal("0.01")


class Client(models.Model):
    """A retainer: a named pool of prepaid hours.

    ``slug`` is public and doubles as the realtime room name; ``admin_token`` is
    the private capability that authorizes every mutation.
    """

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        PAUSED = "PAUSED", _("Paused")
        ARCHIVED = "ARCHIVED", _("Archived")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=80, unique=True)
    admin_token = models.CharField(max_length=128, unique=True, editable=False)
    total_hours = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Prepaid hours, including every refill"),
    )
    refill_link = models.URLField(max_length=500, blank=True, default="")
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.slug})"

    @property
    def used_hours(self) -> Decimal:
        total = self.logs.aggregate(total=Sum("hours"))["total"]
        return total or Decimal("0.00")

    @property
    def remaining_hours(self) -> Decimal:
        return Decimal(self.total_hours) - self.used_hours


class WorkLog(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name="logs")
    description = models.TextField()
    hours = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(MIN_HOURS)]
    )
    date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]

    def __str__(self):
        return f"{self.hours}h - {self.description[:40]}"


class Refill(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    client = models.ForeignKey(
        Client, on_delete=models.CASCADE, related_name="refills"
    )
    hours = models.DecimalField(
        max_digits=8, decimal_places=2, validators=[MinValueValidator(MIN_HOURS)]
    )
    note = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"+{self.hours}h for {self.client_id}"
