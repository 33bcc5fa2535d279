# tests/test_reports.py

from datetime import date, datetime
from decimal import Decimal
from unittest import mock
import uuid

import pytest
from django.utils import timezone

from academics.models import Department, Programme
from fees import stats
from procurement.models import ProcurementRequest


def aware(*args):
    return timezone.make_aware(datetime(*args))


def make_expense(department, cost, status='COMPLETED', created_at=None):
    count = ProcurementRequest.objects.count() + 1
    return ProcurementRequest.objects.create(
        request_number=f"PR/2025/{count:04d}",
        requested_by='HOD',
        department=department,
        description='Workshop supplies',
        estimated_cost=Decimal(str(cost)),
        status=status,
        created_at=created_at or aware(2025, 9, 20, 9),
    )


# =============================================================================
# COLLECTIONS
# =============================================================================

@pytest.mark.django_db
def test_collection_report(student, make_student, make_payment):
    other = make_student(session='JAN_APRIL')
    make_payment(student, 1000, payment_method='CASH', payment_date=aware(2025, 9, 1, 10))
    make_payment(student, 2000, payment_date=aware(2025, 9, 1, 15))
    make_payment(other, 500, payment_date=aware(2025, 9, 2, 10))
    make_payment(student, 7000, status='PENDING')

    report = stats.generate_collection_report().data
    summary = report['summary']

    assert summary['total_collected'] == Decimal('3500.00')
    assert summary['total_transactions'] == 3
    assert summary['by_payment_method'] == {'CASH': Decimal('1000.00'), 'MPESA': Decimal('2500.00')}
    assert summary['by_session'] == {'JAN_APRIL': Decimal('500.00'), 'SEPT_DEC': Decimal('3000.00')}
    assert summary['by_department'] == {'Electrical Engineering': Decimal('3500.00')}
    assert summary['daily_collections'] == {
        '2025-09-01': Decimal('3000.00'),
        '2025-09-02': Decimal('500.00'),
    }
    assert len(report['payments']) == 3


@pytest.mark.django_db
def test_collection_report_filters(student, make_payment):
    make_payment(student, 1000, payment_date=aware(2025, 9, 1, 10))
    make_payment(student, 2000, payment_date=aware(2025, 10, 1, 10))

    report = stats.generate_collection_report({'date_from': '2025-09-15'}).data
    assert report['summary']['total_collected'] == Decimal('2000.00')

    report = stats.generate_collection_report({'programme_id': str(uuid.uuid4())}).data
    assert report['summary']['total_transactions'] == 0
    assert report['summary']['total_collected'] == Decimal('0.00')


# =============================================================================
# OUTSTANDING
# =============================================================================

@pytest.mark.django_db
def test_outstanding_fees_report(make_student, fee_structure, make_payment, department):
    owing = make_student()
    paid_up = make_student()
    unpriced = make_student(
        programme=Programme.objects.create(name='Plumbing', code='PLB', department=department)
    )
    make_payment(owing, 30000)
    make_payment(paid_up, 90000)
    make_payment(unpriced, 100)

    report = stats.generate_outstanding_fees_report().data

    assert [row['admission_number'] for row in report['outstanding_fees']] == [owing.admission_number]
    row = report['outstanding_fees'][0]
    assert row['balance'] == Decimal('60000.00')
    assert row['percentage_paid'] == Decimal('33.33')

    summary = report['summary']
    assert summary['total_students'] == 1
    assert summary['total_outstanding'] == Decimal('60000.00')
    assert summary['collection_rate'] == Decimal('33.33')
    assert summary['by_department'] == {
        'Electrical Engineering': {'students': 1, 'outstanding': Decimal('60000.00')},
    }


@pytest.mark.django_db
def test_outstanding_report_with_nobody_owing():
    summary = stats.generate_outstanding_fees_report().data['summary']

    assert summary['total_students'] == 0
    assert summary['collection_rate'] == Decimal('0.00')


# =============================================================================
# DEPARTMENT SUMMARY
# =============================================================================

@pytest.mark.django_db
def test_department_financial_summary(make_student, fee_structure, make_payment, department):
    make_payment(make_student(), 45000)
    make_student()
    make_student(academic_status='WITHDRAWN')
    make_expense('Electrical Engineering', 12000)
    make_expense('Electrical Engineering', 5000, status='APPROVED')
    make_expense('Mechanical Engineering', 8000)

    data = stats.generate_department_financial_summary(department.pk).data
    summary = data['summary']

    assert data['department']['code'] == 'EE'
    assert summary['student_count'] == 2
    assert summary['total_expected_revenue'] == Decimal('180000.00')
    assert summary['total_collected'] == Decimal('45000.00')
    assert summary['total_outstanding'] == Decimal('135000.00')
    assert summary['collection_rate'] == Decimal('25.00')
    assert summary['total_expenses'] == Decimal('12000.00')
    assert summary['net_position'] == Decimal('33000.00')


@pytest.mark.django_db
def test_department_summary_unknown_department():
    result = stats.generate_department_financial_summary(uuid.uuid4())

    assert result.error == 'Department not found'
    assert result.is_not_found


@pytest.mark.django_db
def test_department_summary_without_students():
    empty = Department.objects.create(name='Hospitality', code='HOS')

    summary = stats.generate_department_financial_summary(empty.pk).data['summary']

    assert summary['student_count'] == 0
    assert summary['collection_rate'] == Decimal('0.00')


# =============================================================================
# CASH FLOW
# =============================================================================

@pytest.mark.django_db
def test_cash_flow_report(student, make_payment):
    make_payment(student, 30000, payment_date=aware(2025, 9, 5, 10))
    make_payment(student, 10000, payment_date=aware(2025, 10, 5, 10))
    make_expense('Electrical Engineering', 12000, created_at=aware(2025, 9, 20, 9))
    make_expense('Electrical Engineering', 4000, status='PENDING', created_at=aware(2025, 9, 21, 9))

    data = stats.generate_cash_flow_report({'date_from': date(2025, 9, 1), 'date_to': date(2025, 12, 31)}).data

    assert data['summary']['total_inflow'] == Decimal('40000.00')
    assert data['summary']['total_outflow'] == Decimal('12000.00')
    assert data['summary']['net_cash_flow'] == Decimal('28000.00')
    assert data['monthly_data'] == {
        '2025-09': {'inflow': Decimal('30000.00'), 'outflow': Decimal('12000.00'), 'net': Decimal('18000.00')},
        '2025-10': {'inflow': Decimal('10000.00'), 'outflow': Decimal('0.00'), 'net': Decimal('10000.00')},
    }


@pytest.mark.django_db
def test_cash_flow_defaults_to_year_to_date(student, make_payment):
    make_payment(student, 500, payment_date=aware(2024, 12, 31, 10))
    make_payment(student, 700, payment_date=aware(2025, 2, 1, 10))

    with mock.patch('fees.stats.get_today', return_value=date(2025, 6, 30)):
        data = stats.generate_cash_flow_report().data

    assert data['summary']['period_start'] == date(2025, 1, 1)
    assert data['summary']['period_end'] == date(2025, 6, 30)
    assert data['summary']['total_inflow'] == Decimal('700.00')
