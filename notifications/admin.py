from django.contrib import admin
from .models import Notification, ReminderRun, SentReminder

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id","user","type","title","related_id","is_read","created_at")
    list_filter = ("type","is_read")
    search_fields = ("title","message","user__email")

@admin.register(SentReminder)
class SentReminderAdmin(admin.ModelAdmin):
    list_display = ("appointment","tier","sent_at")
    list_filter = ("tier",)

@admin.register(ReminderRun)
class ReminderRunAdmin(admin.ModelAdmin):
    list_display = ("slot","started_at","finished_at","reminders_sent")
