from django.contrib import admin

from lessons.models import Lesson, Order, OrderLine
from lessons.services.lesson_service import EDITABLE_FIELDS


class OrderLineInline(admin.TabularInline):
    model = OrderLine
    extra = 0
    can_delete = False
    readonly_fields = ["lesson", "position", "seats"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ["topic", "location", "price", "capacity", "initial_capacity"]
    search_fields = ["topic", "location"]
    # seats move only through orders
    readonly_fields = ["capacity", "initial_capacity", "version", "created_at", "updated_at"]

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ["capacity", "version", "created_at", "updated_at"]
        return self.readonly_fields

    def save_model(self, request, obj, form, change):
        if change:
            # a full save would write back a stale capacity
            obj.save(update_fields=[*EDITABLE_FIELDS, "updated_at"])
            return
        obj.capacity = obj.initial_capacity
        super().save_model(request, obj, form, change)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ["name", "phone", "created_at"]
    search_fields = ["name", "phone"]
    readonly_fields = ["name", "phone", "idempotency_key", "created_at"]
    inlines = [OrderLineInline]

    def has_add_permission(self, request):
        return False
