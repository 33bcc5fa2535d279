# academics/admin.py

from django.contrib import admin

from .models import Department, Programme, SchoolClass


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'head_of_department', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'code')


@admin.register(Programme)
class ProgrammeAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'department', 'level', 'duration_months', 'is_active')
    list_filter = ('level', 'department', 'is_active')
    search_fields = ('name', 'code')


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'programme', 'academic_year', 'session', 'capacity', 'is_active')
    list_filter = ('academic_year', 'session', 'is_active')
    search_fields = ('name', 'code')
