from django.contrib import admin

from .models import UserRanking


@admin.register(UserRanking)
class UserRankingAdmin(admin.ModelAdmin):
    list_display = ["user", "category", "score", "updated_by", "updated_at"]
    list_filter = ["category"]
    search_fields = ["user__username"]
    ordering = ["category", "-score"]
