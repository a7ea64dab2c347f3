from django.db import models


class AuditLog(models.Model):
    """One row per committed retainer mutation.

    ``client_id`` is a plain value, not a foreign key, so the trail of a
    deleted client stays readable.
    """

    action = models.CharField(max_length=100)
    client_id = models.UUIDField(null=True, blank=True, db_index=True)
    message = models.TextField(blank=True)
    model_name = models.CharField(max_length=150, blank=True)
    record_id = models.CharField(max_length=64, blank=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        who = self.client_id or "system"
        return f"[{self.created_at}] {who}: {self.action}"
