# fees/admin.py

from django.contrib import admin

from .models import FeeStructure, FeePayment


@admin.register(FeeStructure)
class FeeStructureAdmin(admin.ModelAdmin):
    list_display = (
        'programme', 'academic_year', 'session', 'tuition_fee',
        'total_fee', 'components_match_total', 'is_active',
    )
    list_filter = ('academic_year', 'session', 'is_active')
    search_fields = ('programme__name', 'programme__code')

    @admin.display(boolean=True, description='Voteheads match total')
    def components_match_total(self, obj):
        return obj.components_match_total


@admin.register(FeePayment)
class FeePaymentAdmin(admin.ModelAdmin):
    list_display = (
        'transaction_ref', 'student', 'amount_paid', 'payment_method',
        'status', 'payment_date',
    )
    list_filter = ('status', 'payment_method', 'academic_year', 'session')
    search_fields = ('transaction_ref', 'student__admission_number', 'student__last_name')
    date_hierarchy = 'payment_date'
