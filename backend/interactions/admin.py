"""Tells what to show in the Django admin interface for interactions app"""

from django.contrib import admin
from .models import Like, Dislike


@admin.register(Like)
class LikeAdmin(admin.ModelAdmin):
    list_display = ['id', 'liked_by', 'user', 'created_at']
    search_fields = ['liked_by__email', 'user__email']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'


@admin.register(Dislike)
class DislikeAdmin(admin.ModelAdmin):
    list_display = ("id", "disliked_by", "user", "created_at")
    search_fields = ("disliked_by__email", "user__email")
    readonly_fields = ("created_at", "updated_at")
