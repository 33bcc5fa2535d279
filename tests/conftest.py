# tests/conftest.py

from datetime import datetime
from decimal import Decimal
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from academics.models import Department, Programme, SchoolClass
from fees.models import FeeStructure, FeePayment
from students.models import Student

ACADEMIC_YEAR = '2025/2026'
SESSION = 'SEPT_DEC'


@pytest.fixture
def department(db):
    return Department.objects.create(name='Electrical Engineering', code='EE')


@pytest.fixture
def programme(department):
    return Programme.objects.create(
        name='Diploma in Electrical Engineering', code='DEE', department=department
    )


@pytest.fixture
def school_class(programme, department):
    return SchoolClass.objects.create(
        name='DEE Sept 2025',
        code='DEE-S25',
        programme=programme,
        department=department,
        academic_year=ACADEMIC_YEAR,
        session=SESSION,
    )


@pytest.fixture
def make_student(school_class):
    """Student factory; admission numbers default to KTYC/S/{n}/25"""
    numbers = count(1)

    def _make(**overrides):
        n = next(numbers)
        klass = overrides.pop('school_class', school_class)
        fields = {
            'admission_number': f"KTYC/S/{n}/25",
            'first_name': 'Student',
            'last_name': f"Number{n}",
            'gender': 'FEMALE',
            'academic_year': ACADEMIC_YEAR,
            'session': SESSION,
            'department': klass.department,
            'programme': klass.programme,
            'school_class': klass,
        }
        fields.update(overrides)
        return Student.objects.create(**fields)

    return _make


@pytest.fixture
def student(make_student):
    return make_student(first_name='Achieng', last_name='Otieno')


@pytest.fixture
def make_fee_structure(programme):
    def _make(**overrides):
        fields = {
            'programme': programme,
            'academic_year': ACADEMIC_YEAR,
            'session': SESSION,
            'tuition_fee': Decimal('60000'),
            'exam_fee': Decimal('15000'),
            'library_fee': None,
            'activity_fee': Decimal('0'),
            'total_fee': Decimal('90000'),
        }
        fields.update(overrides)
        return FeeStructure.objects.create(**fields)

    return _make


@pytest.fixture
def fee_structure(make_fee_structure):
    return make_fee_structure()


@pytest.fixture
def make_payment(db):
    refs = count(1)

    def _make(student, amount, **overrides):
        fields = {
            'student': student,
            'academic_year': student.academic_year,
            'session': student.session,
            'amount_paid': Decimal(str(amount)),
            'payment_method': 'MPESA',
            'transaction_ref': f"TXN{next(refs):05d}",
            'payment_date': timezone.make_aware(datetime(2025, 9, 15, 10, 0)),
            'status': 'COMPLETED',
        }
        fields.update(overrides)
        return FeePayment.objects.create(**fields)

    return _make


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(
        username='bursar', password='secret-pass', first_name='Jane', last_name='Wanjiku'
    )


@pytest.fixture
def auth_client(client, user):
    client.force_login(user)
    return client
