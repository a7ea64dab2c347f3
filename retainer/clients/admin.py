from django.contrib import admin

from retainer.clients import models


class WorkLogInline(admin.TabularInline):
    model = models.WorkLog
    extra = 0
    fields = ["date", "description", "hours"]


class RefillInline(admin.TabularInline):
    model = models.Refill
    extra = 0
    fields = ["hours", "note", "created_at"]
    readonly_fields = ["created_at"]


@admin.register(models.Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "status", "total_hours", "created_at"]
    search_fields = ["name", "slug"]
    list_filter = ["status", "created_at"]
    readonly_fields = ["id", "admin_token", "created_at", "updated_at"]
    inlines = [WorkLogInline, RefillInline]


@admin.register(models.WorkLog)
class WorkLogAdmin(admin.ModelAdmin):
    list_display = ["id", "client", "description", "hours", "date"]
    search_fields = ["description", "client__name", "client__slug"]
    list_filter = ["date"]


@admin.register(models.Refill)
class RefillAdmin(admin.ModelAdmin):
    list_display = ["id", "client", "hours", "note", "created_at"]
    search_fields = ["note", "client__name", "client__slug"]
