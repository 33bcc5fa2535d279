# students/urls.py

from django.urls import path
from . import ajax_views

app_name = 'students'

urlpatterns = [
    path('admission-number/next/', ajax_views.next_admission_number, name='next_admission_number'),
    path('create/', ajax_views.student_create, name='student_create'),
]
