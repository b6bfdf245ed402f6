from django.contrib import admin

from .models import Tiddler, TiddlerHistory


@admin.register(Tiddler)
class TiddlerAdmin(admin.ModelAdmin):
    list_display = ["title", "revision", "updated_at"]
    search_fields = ["title"]
    readonly_fields = ["revision", "updated_at"]


@admin.register(TiddlerHistory)
class TiddlerHistoryAdmin(admin.ModelAdmin):
    list_display = ["title", "revision", "created_at"]
    search_fields = ["title"]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
