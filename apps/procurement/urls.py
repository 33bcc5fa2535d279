# procurement/urls.py

from django.urls import path
from . import ajax_views

app_name = 'procurement'

urlpatterns = [
    path('requests/', ajax_views.procurement_list, name='procurement_list'),
    path('requests/create/', ajax_views.procurement_create, name='procurement_create'),
    path('requests/number/next/', ajax_views.next_request_number, name='next_request_number'),
    path('requests/summary/', ajax_views.procurement_summary, name='procurement_summary'),
    path('requests/budget/', ajax_views.department_budget, name='department_budget'),
    path('requests/<uuid:pk>/', ajax_views.procurement_detail, name='procurement_detail'),
    path('requests/<uuid:pk>/update/', ajax_views.procurement_update, name='procurement_update'),
    path('requests/<uuid:pk>/delete/', ajax_views.procurement_delete, name='procurement_delete'),
    path('requests/<uuid:pk>/approve/', ajax_views.procurement_approve, name='procurement_approve'),
    path('requests/<uuid:pk>/reject/', ajax_views.procurement_reject, name='procurement_reject'),
    path('requests/<uuid:pk>/complete/', ajax_views.procurement_complete, name='procurement_complete'),
    path('requests/<uuid:pk>/status/', ajax_views.procurement_status, name='procurement_status'),
]
