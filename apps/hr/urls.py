# hr/urls.py

from django.urls import path
from . import ajax_views

app_name = 'hr'

urlpatterns = [
    path('tutors/employee-code/next/', ajax_views.next_employee_code, name='next_employee_code'),
    path('tutors/create/', ajax_views.tutor_create, name='tutor_create'),
    path('tutors/<uuid:pk>/update/', ajax_views.tutor_update, name='tutor_update'),
]
