# students/admin.py

from django.contrib import admin

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = (
        'admission_number', 'get_full_name', 'programme', 'school_class',
        'academic_year', 'session', 'academic_status',
    )
    list_filter = ('academic_status', 'academic_year', 'session', 'department')
    search_fields = ('admission_number', 'first_name', 'last_name', 'id_number', 'email')
    readonly_fields = ('admission_number', 'created_at', 'updated_at')
