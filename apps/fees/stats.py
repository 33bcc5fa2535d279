# fees/stats.py

"""
Finance reports: collections, outstanding balances, department positions
and cash flow.

Collections are COMPLETED fee payments; expenses are COMPLETED procurement
requests (estimated cost).
"""

from django.core.exceptions import ValidationError
from django.db.models import Count, Sum, Value, DecimalField
from django.db.models.functions import TruncDate, TruncMonth, Coalesce
from django.utils import timezone
from decimal import Decimal
import logging

from academics.models import Department
from core.exceptions import DepartmentNotFound, NoActiveFeeStructure
from core.results import service_action
from core.utils import calculate_percentage, get_today, to_money
from procurement.models import ProcurementRequest
from students.models import Student
from .invoice_generators import FeeLedgerEngine
from .models import FeePayment

logger = logging.getLogger(__name__)

ZERO = Value(Decimal('0.00'), output_field=DecimalField(max_digits=14, decimal_places=2))


def _grouped_totals(queryset, field, amount_field='amount_paid'):
    """{value of field: total} using values().annotate()"""
    rows = (
        queryset.values(field)
        .annotate(total=Coalesce(Sum(amount_field), ZERO))
        .order_by(field)
    )
    return {row[field]: to_money(row['total']) for row in rows}


def _filter_students(queryset, filters, prefix=''):
    for key, lookup in (
        ('department_id', 'department_id'),
        ('programme_id', 'programme_id'),
        ('class_id', 'school_class_id'),
    ):
        if filters.get(key):
            queryset = queryset.filter(**{f"{prefix}{lookup}": filters[key]})
    return queryset


def _student_position(student):
    """
    (total_fee, total_paid) for the student's own year and session, or
    None when no fee structure is active.
    """
    try:
        fee_structure = FeeLedgerEngine.get_active_fee_structure(
            student.programme_id, student.academic_year, student.session
        )
    except NoActiveFeeStructure:
        return None

    total_paid = FeeLedgerEngine.get_total_paid(student, student.academic_year, student.session)
    return to_money(fee_structure.total_fee), total_paid


# =============================================================================
# COLLECTIONS
# =============================================================================

@service_action('Failed to generate collection report')
def generate_collection_report(filters=None):
    """
    Completed payments with totals.

    Args:
        filters (dict): academic_year, session, department_id,
            programme_id, class_id, date_from, date_to

    Returns:
        dict: payments, summary (total_collected, total_transactions,
        by_payment_method, by_department, by_programme, by_session,
        daily_collections), report_date, filters
    """
    filters = filters or {}
    payments = FeePayment.objects.filter(status='COMPLETED').select_related(
        'student', 'student__programme', 'student__department', 'student__school_class'
    )

    if filters.get('academic_year'):
        payments = payments.filter(academic_year=filters['academic_year'])
    if filters.get('session'):
        payments = payments.filter(session=filters['session'])
    if filters.get('date_from'):
        payments = payments.filter(payment_date__date__gte=filters['date_from'])
    if filters.get('date_to'):
        payments = payments.filter(payment_date__date__lte=filters['date_to'])
    payments = _filter_students(payments, filters, prefix='student__')

    totals = payments.aggregate(count=Count('id'), amount=Coalesce(Sum('amount_paid'), ZERO))

    daily = (
        payments.annotate(day=TruncDate('payment_date'))
        .values('day')
        .annotate(total=Coalesce(Sum('amount_paid'), ZERO))
        .order_by('day')
    )

    summary = {
        'total_collected': to_money(totals['amount']),
        'total_transactions': totals['count'],
        'by_payment_method': _grouped_totals(payments, 'payment_method'),
        'by_department': _grouped_totals(payments, 'student__department__name'),
        'by_programme': _grouped_totals(payments, 'student__programme__name'),
        'by_session': _grouped_totals(payments, 'session'),
        'daily_collections': {
            row['day'].isoformat(): to_money(row['total']) for row in daily
        },
    }

    return {
        'payments': list(payments.order_by('-payment_date')),
        'summary': summary,
        'report_date': timezone.now(),
        'filters': filters,
    }


# =============================================================================
# OUTSTANDING FEES
# =============================================================================

@service_action('Failed to generate outstanding fees report')
def generate_outstanding_fees_report(filters=None):
    """
    ACTIVE students who still owe on their session fees.

    Students without an active fee structure are left out.

    Returns:
        dict: outstanding_fees (list), summary (total_students,
        total_outstanding, total_expected, total_collected,
        collection_rate, by_department, by_programme), report_date, filters
    """
    filters = filters or {}
    students = Student.objects.filter(academic_status='ACTIVE').select_related(
        'programme', 'department', 'school_class'
    )
    if filters.get('academic_year'):
        students = students.filter(academic_year=filters['academic_year'])
    if filters.get('session'):
        students = students.filter(session=filters['session'])
    students = _filter_students(students, filters)

    outstanding = []
    for student in students.order_by('admission_number'):
        position = _student_position(student)
        if position is None:
            continue

        total_fee, total_paid = position
        balance = total_fee - total_paid
        if balance <= 0:
            continue

        outstanding.append({
            'student_id': str(student.pk),
            'admission_number': student.admission_number,
            'name': student.invoice_name,
            'programme': student.programme.name,
            'department': student.department.name,
            'class': student.school_class.name if student.school_class else None,
            'total_fee': total_fee,
            'total_paid': total_paid,
            'balance': balance,
            'percentage_paid': calculate_percentage(total_paid, total_fee),
        })

    total_expected = sum((row['total_fee'] for row in outstanding), Decimal('0.00'))
    total_collected = sum((row['total_paid'] for row in outstanding), Decimal('0.00'))

    by_department = {}
    by_programme = {}
    for row in outstanding:
        for bucket, key in ((by_department, row['department']), (by_programme, row['programme'])):
            entry = bucket.setdefault(key, {'students': 0, 'outstanding': Decimal('0.00')})
            entry['students'] += 1
            entry['outstanding'] += row['balance']

    return {
        'outstanding_fees': outstanding,
        'summary': {
            'total_students': len(outstanding),
            'total_outstanding': sum((row['balance'] for row in outstanding), Decimal('0.00')),
            'total_expected': total_expected,
            'total_collected': total_collected,
            'collection_rate': calculate_percentage(total_collected, total_expected),
            'by_department': by_department,
            'by_programme': by_programme,
        },
        'report_date': timezone.now(),
        'filters': filters,
    }


# =============================================================================
# DEPARTMENT SUMMARY
# =============================================================================

@service_action('Failed to generate department financial summary')
def generate_department_financial_summary(department_id, filters=None):
    """
    Fee position and procurement spending for one department.

    Expenses are COMPLETED procurement requests raised under the
    department's name.
    """
    filters = filters or {}
    try:
        department = Department.objects.get(pk=department_id)
    except (Department.DoesNotExist, ValidationError, ValueError):
        raise DepartmentNotFound()

    students = Student.objects.filter(department=department, academic_status='ACTIVE')
    if filters.get('academic_year'):
        students = students.filter(academic_year=filters['academic_year'])
    if filters.get('session'):
        students = students.filter(session=filters['session'])

    student_count = 0
    expected = Decimal('0.00')
    collected = Decimal('0.00')
    for student in students:
        student_count += 1
        position = _student_position(student)
        if position is None:
            continue
        total_fee, total_paid = position
        expected += total_fee
        collected += total_paid

    expenses = ProcurementRequest.objects.filter(department=department.name, status='COMPLETED')
    if filters.get('date_from'):
        expenses = expenses.filter(created_at__date__gte=filters['date_from'])
    if filters.get('date_to'):
        expenses = expenses.filter(created_at__date__lte=filters['date_to'])
    total_expenses = to_money(
        expenses.aggregate(total=Coalesce(Sum('estimated_cost'), ZERO))['total']
    )

    return {
        'department': {
            'id': str(department.pk),
            'name': department.name,
            'code': department.code,
        },
        'summary': {
            'student_count': student_count,
            'total_expected_revenue': expected,
            'total_collected': collected,
            'total_outstanding': expected - collected,
            'collection_rate': calculate_percentage(collected, expected),
            'total_expenses': total_expenses,
            'net_position': collected - total_expenses,
        },
        'report_date': timezone.now(),
        'filters': filters,
    }


# =============================================================================
# CASH FLOW
# =============================================================================

@service_action('Failed to generate cash flow report')
def generate_cash_flow_report(filters=None):
    """
    Fee inflow against procurement outflow, by month.

    The period defaults to 1 January of the current year up to today.

    Returns:
        dict: summary (total_inflow, total_outflow, net_cash_flow,
        period_start, period_end), monthly_data {'YYYY-MM': {inflow,
        outflow, net}}, report_date
    """
    filters = filters or {}
    today = get_today()
    date_from = filters.get('date_from') or today.replace(month=1, day=1)
    date_to = filters.get('date_to') or today

    payments = FeePayment.objects.filter(
        status='COMPLETED',
        payment_date__date__gte=date_from,
        payment_date__date__lte=date_to,
    )
    expenses = ProcurementRequest.objects.filter(
        status='COMPLETED',
        created_at__date__gte=date_from,
        created_at__date__lte=date_to,
    )

    monthly = {}

    def _bucket(month):
        return monthly.setdefault(month.strftime('%Y-%m'), {
            'inflow': Decimal('0.00'),
            'outflow': Decimal('0.00'),
            'net': Decimal('0.00'),
        })

    for row in (
        payments.annotate(month=TruncMonth('payment_date'))
        .values('month')
        .annotate(total=Coalesce(Sum('amount_paid'), ZERO))
    ):
        _bucket(row['month'])['inflow'] += to_money(row['total'])

    for row in (
        expenses.annotate(month=TruncMonth('created_at'))
        .values('month')
        .annotate(total=Coalesce(Sum('estimated_cost'), ZERO))
    ):
        _bucket(row['month'])['outflow'] += to_money(row['total'])

    for entry in monthly.values():
        entry['net'] = entry['inflow'] - entry['outflow']

    total_inflow = sum((entry['inflow'] for entry in monthly.values()), Decimal('0.00'))
    total_outflow = sum((entry['outflow'] for entry in monthly.values()), Decimal('0.00'))

    return {
        'summary': {
            'total_inflow': total_inflow,
            'total_outflow': total_outflow,
            'net_cash_flow': total_inflow - total_outflow,
            'period_start': date_from,
            'period_end': date_to,
        },
        'monthly_data': dict(sorted(monthly.items())),
        'report_date': timezone.now(),
    }
