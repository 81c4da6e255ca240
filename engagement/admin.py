from django.contrib import admin

from .models import Engagement


@admin.register(Engagement)
class EngagementAdmin(admin.ModelAdmin):
    list_display = ["kind", "user", "content_type", "content_id", "created_at"]
    list_filter = ["kind", "content_type"]
    search_fields = ["content_id", "user__username", "text"]
    raw_id_fields = ["user", "parent"]
