from django.contrib import admin
from .models import Doctor

@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ("id","full_name","specialization","is_approved","is_featured","created_at")
    list_filter = ("is_approved","is_featured","specialization")
    search_fields = ("full_name","specialization")
    actions = ["approve"]

    @admin.action(description="Approve selected doctors")
    def approve(self, request, queryset):
        queryset.update(is_approved=True)
