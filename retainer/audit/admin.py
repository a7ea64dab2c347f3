from django.contrib import admin

from retainer.audit import models


@admin.register(models.AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["id", "action", "client_id", "message", "model_name"]
    search_fields = ["action", "message", "model_name", "record_id"]
    list_filter = ["action", "created_at"]
