"""
URL configuration for kongoni project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Students app - admission numbers, registration
    path('students/', include(('students.urls', 'students'), namespace='students')),

    # HR / Tutors app
    path('hr/', include(('hr.urls', 'hr'), namespace='hr')),

    # Procurement app - requests and approvals
    path('procurement/', include(('procurement.urls', 'procurement'), namespace='procurement')),

    # Fees app - fee structures, payments, invoices, reports
    path('fees/', include(('fees.urls', 'fees'), namespace='fees')),
]
