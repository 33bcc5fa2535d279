# hr/admin.py

from django.contrib import admin

from .models import Tutor


@admin.register(Tutor)
class TutorAdmin(admin.ModelAdmin):
    list_display = ('employee_code', 'get_full_name', 'email', 'department', 'specialization', 'is_active')
    list_filter = ('is_active', 'department')
    search_fields = ('employee_code', 'first_name', 'last_name', 'email')
    readonly_fields = ('employee_code',)
