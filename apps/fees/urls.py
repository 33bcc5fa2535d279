# fees/urls.py

from django.urls import path
from . import ajax_views, views

app_name = 'fees'

urlpatterns = [
    # =============================================================================
    # INVOICES
    # =============================================================================
    path('invoices/bulk/', ajax_views.bulk_invoices, name='bulk_invoices'),
    path('invoices/<uuid:student_id>/', ajax_views.student_invoice, name='student_invoice'),
    path('invoices/<uuid:student_id>/history/', ajax_views.student_invoice_history, name='student_invoice_history'),
    path('invoices/<uuid:student_id>/pdf/', views.invoice_pdf, name='invoice_pdf'),

    # =============================================================================
    # PAYMENTS
    # =============================================================================
    path('payments/', ajax_views.payment_list, name='payment_list'),
    path('payments/create/', ajax_views.payment_create, name='payment_create'),
    path('payments/balance/', ajax_views.student_balance, name='student_balance'),
    path('payments/statistics/', ajax_views.payment_statistics, name='payment_statistics'),
    path('payments/<uuid:pk>/status/', ajax_views.payment_status, name='payment_status'),
    path('payments/<uuid:pk>/delete/', ajax_views.payment_delete, name='payment_delete'),

    # =============================================================================
    # FEE STRUCTURES
    # =============================================================================
    path('structures/', ajax_views.fee_structure_list, name='fee_structure_list'),
    path('structures/create/', ajax_views.fee_structure_create, name='fee_structure_create'),
    path('structures/calculate/', ajax_views.calculate_totals, name='calculate_totals'),
    path('structures/student/<uuid:student_id>/', ajax_views.student_fee_structure, name='student_fee_structure'),
    path('structures/<uuid:pk>/', ajax_views.fee_structure_detail, name='fee_structure_detail'),
    path('structures/<uuid:pk>/update/', ajax_views.fee_structure_update, name='fee_structure_update'),
    path('structures/<uuid:pk>/delete/', ajax_views.fee_structure_delete, name='fee_structure_delete'),

    # =============================================================================
    # REPORTS
    # =============================================================================
    path('reports/collections/', ajax_views.collection_report, name='collection_report'),
    path('reports/collections/excel/', views.collection_report_excel, name='collection_report_excel'),
    path('reports/outstanding/', ajax_views.outstanding_fees_report, name='outstanding_fees_report'),
    path('reports/departments/<uuid:department_id>/', ajax_views.department_financial_summary, name='department_financial_summary'),
    path('reports/cash-flow/', ajax_views.cash_flow_report, name='cash_flow_report'),
]
