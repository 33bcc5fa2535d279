# procurement/admin.py

from django.contrib import admin

from .models import ProcurementRequest


@admin.register(ProcurementRequest)
class ProcurementRequestAdmin(admin.ModelAdmin):
    list_display = (
        'request_number', 'department', 'requested_by', 'estimated_cost',
        'priority', 'status', 'created_at',
    )
    list_filter = ('status', 'priority', 'department')
    search_fields = ('request_number', 'description', 'requested_by')
    readonly_fields = ('request_number', 'approved_by', 'approved_at', 'created_at', 'updated_at')
