# tests/test_students_hr.py

from datetime import date
from unittest import mock
import uuid

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from hr import services as hr_services
from hr.models import Tutor, TutorPatch
from students import services as student_services
from students.models import Student
from tests.conftest import ACADEMIC_YEAR, SESSION


def student_data(school_class, **overrides):
    data = {
        'first_name': 'Brian',
        'last_name': 'Mutua',
        'gender': 'MALE',
        'academic_year': ACADEMIC_YEAR,
        'session': SESSION,
        'department_id': school_class.department_id,
        'programme_id': school_class.programme_id,
        'school_class_id': school_class.pk,
    }
    data.update(overrides)
    return data


def tutor_data(**overrides):
    data = {
        'first_name': 'Grace',
        'last_name': 'Akinyi',
        'email': 'grace.akinyi@college.ac.ke',
        'specialization': 'Power Systems',
    }
    data.update(overrides)
    return data


# =============================================================================
# STUDENTS
# =============================================================================

@pytest.mark.django_db
def test_create_student_allocates_admission_number(school_class, make_student):
    make_student(admission_number='KTYC/S/9/25')
    make_student(admission_number='KTYC/S/10/25')

    with mock.patch('students.utils.get_today', return_value=date(2025, 9, 1)):
        result = student_services.create_student(student_data(school_class))

    assert result.success
    assert result.data.admission_number == 'KTYC/S/11/25'
    assert result.data.nationality.code == 'KE'


@pytest.mark.django_db
def test_create_student_with_given_number(school_class):
    result = student_services.create_student(
        student_data(school_class, admission_number='KTYC/S/500/24')
    )

    assert result.data.admission_number == 'KTYC/S/500/24'


@pytest.mark.django_db
def test_duplicate_admission_number(school_class, student):
    result = student_services.create_student(
        student_data(school_class, admission_number=student.admission_number)
    )

    assert result.error == 'A student with this admission number already exists'
    assert Student.objects.count() == 1


@pytest.mark.django_db
def test_duplicate_id_number(school_class, make_student):
    make_student(id_number='12345678')

    result = student_services.create_student(student_data(school_class, id_number='12345678'))

    assert result.error == 'A student with this ID number already exists'


@pytest.mark.django_db
def test_create_student_validation(school_class):
    result = student_services.create_student(student_data(school_class, gender='OTHER'))

    assert result.is_invalid
    assert 'gender' in result.error


@pytest.mark.django_db
def test_generate_admission_number_preview(make_student):
    make_student(admission_number='KTYC/S/3/25')

    with mock.patch('students.utils.get_today', return_value=date(2026, 1, 15)):
        result = student_services.generate_admission_number()

    assert result.to_dict() == {'success': True, 'data': 'KTYC/S/4/26'}
    # Previewing does not reserve anything
    assert Student.objects.count() == 1


# =============================================================================
# TUTORS
# =============================================================================

@pytest.mark.django_db
def test_create_tutor_allocates_employee_code():
    Tutor.objects.create(
        employee_code='KTYC/TUT/0007', first_name='A', last_name='B', email='ab@college.ac.ke'
    )

    result = hr_services.create_tutor(tutor_data())

    assert result.success
    assert result.message == 'Tutor created successfully'
    assert result.data.employee_code == 'KTYC/TUT/0008'


@pytest.mark.django_db
def test_create_tutor_duplicate_email():
    hr_services.create_tutor(tutor_data())

    result = hr_services.create_tutor(tutor_data(first_name='Other'))

    assert result.error == 'A tutor with this email already exists'


@pytest.mark.django_db
def test_create_tutor_duplicate_code():
    hr_services.create_tutor(tutor_data(employee_code='KTYC/TUT/0001'))

    result = hr_services.create_tutor(
        tutor_data(employee_code='KTYC/TUT/0001', email='x@college.ac.ke')
    )

    assert result.error == 'A tutor with this employee code already exists'


@pytest.mark.django_db
def test_update_tutor_is_sparse(department):
    tutor = hr_services.create_tutor(tutor_data(phone_number='0712000000')).data

    result = hr_services.update_tutor(tutor.pk, TutorPatch(department_id=department.pk, is_active=False))

    assert result.success
    tutor.refresh_from_db()
    assert tutor.department == department
    assert tutor.is_active is False
    assert tutor.phone_number == '0712000000'
    assert tutor.specialization == 'Power Systems'


@pytest.mark.django_db
def test_update_tutor_email_conflict():
    hr_services.create_tutor(tutor_data())
    other = hr_services.create_tutor(tutor_data(email='other@college.ac.ke')).data

    result = hr_services.update_tutor(other.pk, {'email': 'grace.akinyi@college.ac.ke'})

    assert result.error == 'A tutor with this email already exists'


@pytest.mark.django_db
def test_update_missing_tutor():
    assert hr_services.update_tutor(uuid.uuid4(), {}).error == 'Tutor not found'


@pytest.mark.django_db
def test_create_tutor_without_email_skips_lookup():
    data = tutor_data()
    del data['email']

    with CaptureQueriesContext(connection) as queries:
        result = hr_services.create_tutor(data)

    assert result.is_invalid
    assert 'email' in result.error
    assert not any('IS NULL' in query['sql'] for query in queries.captured_queries)
