# tests/test_invoices.py

from datetime import date, timedelta
from decimal import Decimal
from unittest import mock
import uuid

import pytest
from django.core.exceptions import ValidationError

from academics.models import Programme
from core.exceptions import NoActiveFeeStructure, StudentNotFound
from fees.invoice_generators import FeeLedgerEngine, get_invoice_number
from fees.services import generate_student_invoice, generate_bulk_invoices
from tests.conftest import ACADEMIC_YEAR, SESSION


def build(student, term='TERM1', **kwargs):
    return FeeLedgerEngine.build_invoice(student.pk, ACADEMIC_YEAR, SESSION, term, **kwargs)


# =============================================================================
# SINGLE INVOICE
# =============================================================================

@pytest.mark.django_db
def test_invoice_items_are_a_third_of_each_votehead(student, fee_structure):
    invoice = build(student)

    assert [(item.votehead, item.amount) for item in invoice.items] == [
        ('Tuition Fees', Decimal('20000.00')),
        ('Examination Fee', Decimal('5000.00')),
    ]
    assert invoice.subtotal == Decimal('30000.00')
    assert invoice.total_paid == Decimal('0.00')
    assert invoice.balance == Decimal('30000.00')


@pytest.mark.django_db
def test_all_optional_voteheads_in_order(student, make_fee_structure):
    make_fee_structure(
        tuition_fee=Decimal('60000'), exam_fee=Decimal('6000'),
        library_fee=Decimal('3000'), activity_fee=Decimal('1500'),
        total_fee=Decimal('70500'),
    )

    invoice = build(student)

    assert [item.votehead for item in invoice.items] == [
        'Tuition Fees', 'Examination Fee', 'Library Fee', 'Activity Fee',
    ]
    assert invoice.items[3].amount == Decimal('500.00')


@pytest.mark.django_db
def test_subtotal_uses_total_fee_not_items(student, make_fee_structure):
    make_fee_structure(total_fee=Decimal('100000'))

    invoice = build(student)

    assert invoice.subtotal == Decimal('33333.33')
    assert sum(item.amount for item in invoice.items) == Decimal('25000.00')


@pytest.mark.django_db
def test_rounding_is_half_up(student, make_fee_structure):
    make_fee_structure(tuition_fee=Decimal('100'), exam_fee=None, total_fee=Decimal('200'))

    invoice = build(student)

    # 100 / 3 = 33.333..., 200 / 3 = 66.666...
    assert invoice.items[0].amount == Decimal('33.33')
    assert invoice.subtotal == Decimal('66.67')


@pytest.mark.django_db
def test_balance_is_zero_when_term_is_paid(student, fee_structure, make_payment):
    make_payment(student, 30000)

    invoice = build(student)

    assert invoice.total_paid == Decimal('30000.00')
    assert invoice.balance == Decimal('0.00')
    assert invoice.is_settled


@pytest.mark.django_db
def test_overpayment_gives_negative_balance(student, fee_structure, make_payment):
    make_payment(student, 20000)
    make_payment(student, 15000)

    invoice = build(student)

    assert invoice.balance == Decimal('-5000.00')


@pytest.mark.django_db
def test_only_completed_payments_count(student, fee_structure, make_payment):
    make_payment(student, 10000)
    make_payment(student, 5000, status='PENDING')
    make_payment(student, 5000, status='FAILED')
    make_payment(student, 5000, status='REFUNDED')

    assert build(student).total_paid == Decimal('10000.00')


@pytest.mark.django_db
def test_payments_are_session_wide(student, fee_structure, make_payment):
    make_payment(student, 30000)
    make_payment(student, 1000, session='JAN_APRIL')

    # Same payments reduce every term of the session
    for term in ('TERM1', 'TERM2', 'TERM3'):
        assert build(student, term).total_paid == Decimal('30000.00')


@pytest.mark.django_db
def test_invoice_number_and_dates(student, fee_structure):
    invoice = build(student, 'TERM2', invoice_date=date(2025, 9, 1))

    assert invoice.invoice_number == 'INV/2025/2026/KTYC/S/1/25/TERM2'
    assert invoice.invoice_number == get_invoice_number(ACADEMIC_YEAR, student.admission_number, 'TERM2')
    assert invoice.due_date == date(2025, 10, 1)


@pytest.mark.django_db
def test_invoice_date_defaults_to_today(student, fee_structure):
    with mock.patch('fees.invoice_generators.get_today', return_value=date(2026, 1, 5)):
        invoice = build(student)

    assert invoice.invoice_date == date(2026, 1, 5)
    assert invoice.due_date == date(2026, 1, 5) + timedelta(days=30)


@pytest.mark.django_db
def test_student_snapshot(student, fee_structure):
    details = build(student).as_dict()['student']

    assert details['name'] == 'Achieng Otieno'
    assert details['admission_number'] == student.admission_number
    assert details['programme'] == 'Diploma in Electrical Engineering'
    assert details['department'] == 'Electrical Engineering'
    assert details['class'] == 'DEE Sept 2025'


@pytest.mark.django_db
def test_most_recently_updated_structure_wins(student, make_fee_structure):
    older = make_fee_structure(total_fee=Decimal('90000'))
    newer = make_fee_structure(total_fee=Decimal('120000'), tuition_fee=Decimal('90000'))
    older.save()

    assert build(student).subtotal == Decimal('30000.00')
    newer.save()
    assert build(student).subtotal == Decimal('40000.00')


@pytest.mark.django_db
def test_inactive_structure_is_ignored(student, make_fee_structure):
    make_fee_structure(is_active=False)

    with pytest.raises(NoActiveFeeStructure):
        build(student)


@pytest.mark.django_db
def test_missing_student():
    with pytest.raises(StudentNotFound):
        FeeLedgerEngine.build_invoice(uuid.uuid4(), ACADEMIC_YEAR, SESSION, 'TERM1')


@pytest.mark.django_db
def test_invalid_term(student, fee_structure):
    with pytest.raises(ValidationError):
        build(student, 'TERM4')


@pytest.mark.django_db
def test_mismatched_structure_logs_warning(student, make_fee_structure, caplog):
    make_fee_structure(total_fee=Decimal('95000'))

    build(student)

    assert 'voteheads sum to 75000.00' in caplog.text


# =============================================================================
# SERVICE ENVELOPE
# =============================================================================

@pytest.mark.django_db
def test_generate_invoice_without_structure_fails_cleanly(student):
    result = generate_student_invoice({
        'student_id': student.pk,
        'academic_year': ACADEMIC_YEAR,
        'session': SESSION,
        'term': 'TERM1',
    })

    assert result.to_dict() == {'success': False, 'error': 'No active fee structure found'}
    assert isinstance(result.cause, NoActiveFeeStructure)


@pytest.mark.django_db
def test_generate_invoice_for_unknown_student():
    result = generate_student_invoice({
        'student_id': 'not-a-uuid',
        'academic_year': ACADEMIC_YEAR,
        'session': SESSION,
        'term': 'TERM1',
    })

    assert not result
    assert result.error == 'Student not found'


@pytest.mark.django_db
def test_generate_invoice_success(student, fee_structure):
    result = generate_student_invoice({
        'student_id': str(student.pk),
        'academic_year': ACADEMIC_YEAR,
        'session': SESSION,
        'term': 'TERM3',
    })

    assert result.success
    assert result.data.subtotal == Decimal('30000.00')


# =============================================================================
# BULK
# =============================================================================

@pytest.mark.django_db
def test_bulk_tolerates_missing_structure(make_student, fee_structure, department, school_class):
    other_programme = Programme.objects.create(
        name='Certificate in Plumbing', code='CPL', department=department
    )
    for _ in range(9):
        make_student()
    unpriced = make_student(programme=other_programme)

    result = FeeLedgerEngine.build_bulk_invoices(ACADEMIC_YEAR, SESSION, 'TERM1')

    assert (result['total'], result['successful'], result['failed']) == (10, 9, 1)
    assert result['failures'] == [{
        'student_id': str(unpriced.pk),
        'admission_number': unpriced.admission_number,
        'error': 'No active fee structure found',
    }]


@pytest.mark.django_db
def test_bulk_only_includes_active_students(make_student, fee_structure):
    make_student()
    make_student(academic_status='SUSPENDED')
    make_student(academic_status='GRADUATED')
    make_student(session='JAN_APRIL')

    result = FeeLedgerEngine.build_bulk_invoices(ACADEMIC_YEAR, SESSION, 'TERM1')

    assert result['total'] == 1


@pytest.mark.django_db
def test_bulk_filters_by_programme(make_student, fee_structure, programme, department):
    other_programme = Programme.objects.create(
        name='Certificate in Plumbing', code='CPL', department=department
    )
    make_student()
    make_student(programme=other_programme)

    result = FeeLedgerEngine.build_bulk_invoices(
        ACADEMIC_YEAR, SESSION, 'TERM1', programme_id=programme.pk
    )

    assert (result['total'], result['successful']) == (1, 1)


@pytest.mark.django_db
def test_bulk_keeps_going_after_unexpected_error(make_student, fee_structure):
    first = make_student()
    make_student()
    original = FeeLedgerEngine.build_invoice

    def flaky(student_id, *args, **kwargs):
        if student_id == first.pk:
            raise RuntimeError('database hiccup')
        return original(student_id, *args, **kwargs)

    with mock.patch.object(FeeLedgerEngine, 'build_invoice', side_effect=flaky):
        result = FeeLedgerEngine.build_bulk_invoices(ACADEMIC_YEAR, SESSION, 'TERM1')

    assert (result['successful'], result['failed']) == (1, 1)
    assert result['failures'][0]['error'] == 'database hiccup'


@pytest.mark.django_db
def test_bulk_service_message(make_student, fee_structure):
    make_student()
    make_student()

    result = generate_bulk_invoices({
        'academic_year': ACADEMIC_YEAR, 'session': SESSION, 'term': 'TERM1',
    })

    assert result.success
    assert result.message == 'Generated 2 of 2 invoices'


@pytest.mark.django_db
def test_bulk_rejects_invalid_term(make_student, fee_structure):
    make_student()

    result = generate_bulk_invoices({
        'academic_year': ACADEMIC_YEAR, 'session': SESSION, 'term': 'TERM9',
    })

    assert not result
    assert result.error == 'Invalid term: TERM9'


# =============================================================================
# HISTORY & SUMMARY
# =============================================================================

@pytest.mark.django_db
def test_invoice_history_has_three_terms(student, fee_structure):
    invoices = FeeLedgerEngine.build_invoice_history(student.pk)

    assert [invoice.term for invoice in invoices] == ['TERM1', 'TERM2', 'TERM3']


@pytest.mark.django_db
def test_invoice_history_without_structure_is_empty(student):
    assert FeeLedgerEngine.build_invoice_history(student.pk) == []


def test_empty_payment_summary():
    summary = FeeLedgerEngine.build_payment_summary([])

    assert summary == {
        'total_payments': 0,
        'total_amount': Decimal('0.00'),
        'by_method': {},
        'by_programme': {},
        'by_department': {},
    }


@pytest.mark.django_db
def test_payment_summary_buckets(student, make_payment):
    payments = [
        make_payment(student, 1000, payment_method='CASH'),
        make_payment(student, 2500, payment_method='MPESA'),
        make_payment(student, 500, payment_method='MPESA'),
    ]

    summary = FeeLedgerEngine.build_payment_summary(payments)

    assert summary['total_payments'] == 3
    assert summary['total_amount'] == Decimal('4000.00')
    assert summary['by_method'] == {
        'CASH': {'count': 1, 'amount': Decimal('1000.00')},
        'MPESA': {'count': 2, 'amount': Decimal('3000.00')},
    }
    assert summary['by_programme'] == {
        'Diploma in Electrical Engineering': {'count': 3, 'amount': Decimal('4000.00')},
    }
    assert summary['by_department']['Electrical Engineering']['count'] == 3
