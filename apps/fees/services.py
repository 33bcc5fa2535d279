# fees/services.py

"""
Fee operations: invoices, payments and fee structures.

Invoice arithmetic lives in fees/invoice_generators.py; this module is the
boundary used by views, reports and management commands. All public
functions return core.results.ActionResult.
"""

from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db.models import Sum, Count
from django.utils import timezone
import logging

from core.exceptions import StudentNotFound, FeeStructureNotFound, PaymentNotFound
from core.results import ActionResult, service_action
from core.utils import safe_decimal, to_money
from students.models import Student
from utils.utils import slice_page
from .invoice_generators import FeeLedgerEngine
from .models import FeeStructure, FeeStructurePatch, FeePayment

logger = logging.getLogger(__name__)

PAYMENT_PAGE_SIZE = 10
FEE_STRUCTURE_PAGE_SIZE = 50

EMPTY_PAGINATION = {'total': 0, 'total_pages': 0, 'current_page': 1}

FEE_STRUCTURE_FIELDS = (
    'programme_id', 'academic_year', 'session', 'tuition_fee', 'exam_fee',
    'library_fee', 'activity_fee', 'total_fee', 'is_active',
)

VOTEHEAD_FIELDS = ('tuition_fee', 'exam_fee', 'library_fee', 'activity_fee')


def _get_payment(payment_id):
    try:
        return FeePayment.objects.select_related('student').get(pk=payment_id)
    except (FeePayment.DoesNotExist, ValidationError, ValueError):
        raise PaymentNotFound()


def _get_fee_structure(structure_id):
    try:
        return FeeStructure.objects.select_related('programme').get(pk=structure_id)
    except (FeeStructure.DoesNotExist, ValidationError, ValueError):
        raise FeeStructureNotFound()


# =============================================================================
# INVOICES
# =============================================================================

@service_action('Failed to generate invoice')
def generate_student_invoice(data):
    """
    Build one term invoice.

    Args:
        data (dict): student_id, academic_year, session, term

    Returns:
        ActionResult with an Invoice
    """
    return FeeLedgerEngine.build_invoice(
        data.get('student_id'),
        data.get('academic_year'),
        data.get('session'),
        data.get('term'),
    )


@service_action('Failed to generate bulk invoices')
def generate_bulk_invoices(filters):
    """
    Build term invoices for every ACTIVE student matching the filters.

    Args:
        filters (dict): academic_year, session, term, and optionally
            class_id, programme_id, department_id
    """
    result = FeeLedgerEngine.build_bulk_invoices(
        filters.get('academic_year'),
        filters.get('session'),
        filters.get('term'),
        class_id=filters.get('class_id'),
        programme_id=filters.get('programme_id'),
        department_id=filters.get('department_id'),
    )
    return ActionResult.ok(
        result,
        message=f"Generated {result['successful']} of {result['total']} invoices",
    )


@service_action('Failed to fetch invoice history')
def get_student_invoice_history(student_id):
    return FeeLedgerEngine.build_invoice_history(student_id)


# =============================================================================
# PAYMENTS
# =============================================================================

@service_action(
    'Failed to record payment',
    conflict_message='Transaction reference already exists',
)
def record_fee_payment(data):
    """
    Record a payment.

    Args:
        data (dict): student_id, academic_year, session, amount_paid,
            payment_method, transaction_ref, and optionally payment_date,
            status, received_by, notes
    """
    transaction_ref = (data.get('transaction_ref') or '').strip()
    if not transaction_ref:
        raise ValidationError('Transaction reference is required')

    if FeePayment.objects.filter(transaction_ref=transaction_ref).exists():
        raise ValidationError('Transaction reference already exists. Please use a unique reference.')

    try:
        student = Student.objects.get(pk=data.get('student_id'))
    except (Student.DoesNotExist, ValidationError, ValueError):
        raise StudentNotFound()

    payment = FeePayment(
        student=student,
        academic_year=data.get('academic_year') or student.academic_year,
        session=data.get('session') or student.session,
        amount_paid=to_money(data.get('amount_paid')),
        payment_method=data.get('payment_method'),
        transaction_ref=transaction_ref,
        payment_date=data.get('payment_date') or timezone.now(),
        status=data.get('status') or 'COMPLETED',
        received_by=data.get('received_by') or '',
        notes=data.get('notes') or '',
    )
    payment.full_clean(validate_unique=False)
    payment.save()

    logger.info(
        f"Recorded {payment.payment_method} payment {payment.transaction_ref} "
        f"of {payment.amount_paid} for {student.admission_number}"
    )

    return ActionResult.ok(payment, message='Payment recorded successfully')


@service_action('Failed to fetch fee payments', empty_pagination=EMPTY_PAGINATION)
def get_fee_payments(filters=None, page=1, limit=PAYMENT_PAGE_SIZE):
    """
    Payments, newest first.

    Filters:
        student_id, academic_year, session, payment_method, status,
        start_date, end_date
    """
    filters = filters or {}
    queryset = FeePayment.objects.select_related(
        'student', 'student__programme', 'student__department'
    )

    for key, lookup in (
        ('student_id', 'student_id'),
        ('academic_year', 'academic_year'),
        ('session', 'session'),
        ('payment_method', 'payment_method'),
        ('status', 'status'),
        ('start_date', 'payment_date__date__gte'),
        ('end_date', 'payment_date__date__lte'),
    ):
        if filters.get(key):
            queryset = queryset.filter(**{lookup: filters[key]})

    rows, pagination = slice_page(queryset.order_by('-payment_date'), page, limit)
    return ActionResult.ok(rows, pagination=pagination)


@service_action('Failed to fetch fee balance')
def get_student_fee_balance(admission_number):
    """
    Whole-session position for a student.

    Returns:
        dict: student_id, total_fee, total_paid, balance, academic_year,
        session, payments (COMPLETED, newest first)
    """
    try:
        student = Student.objects.get(admission_number=admission_number)
    except Student.DoesNotExist:
        raise StudentNotFound()

    fee_structure = FeeLedgerEngine.get_active_fee_structure(
        student.programme_id, student.academic_year, student.session
    )

    payments = list(
        FeePayment.objects.filter(
            student=student,
            academic_year=student.academic_year,
            session=student.session,
            status='COMPLETED',
        ).order_by('-payment_date')
    )
    total_paid = to_money(sum((p.amount_paid for p in payments), Decimal('0')))
    total_fee = to_money(fee_structure.total_fee)

    return {
        'student_id': str(student.pk),
        'total_fee': total_fee,
        'total_paid': total_paid,
        'balance': total_fee - total_paid,
        'academic_year': student.academic_year,
        'session': student.session,
        'payments': payments,
    }


@service_action('Failed to update payment status')
def update_payment_status(payment_id, status):
    if status not in dict(FeePayment.PAYMENT_STATUS_CHOICES):
        raise ValidationError(f"Invalid payment status: {status}")

    payment = _get_payment(payment_id)
    previous = payment.status
    payment.status = status
    payment.save(update_fields=['status'])

    logger.info(f"Payment {payment.transaction_ref}: {previous} -> {status}")

    return ActionResult.ok(payment, message='Payment status updated successfully')


@service_action('Failed to delete payment')
def delete_payment(payment_id):
    payment = _get_payment(payment_id)
    transaction_ref = payment.transaction_ref
    payment.delete()

    logger.info(f"Deleted payment {transaction_ref}")

    return ActionResult.ok(None, message='Payment deleted successfully')


@service_action('Failed to fetch payment statistics')
def get_payment_statistics(filters=None):
    """
    Totals over COMPLETED payments.

    Filters:
        academic_year, session, start_date, end_date

    Returns:
        dict: {
            'total_payments': int,
            'total_amount': Decimal,
            'by_method': {method: {'count', 'amount'}},
            'by_programme': {programme: {'count', 'amount'}},
            'by_department': {department: {'count', 'amount'}},
        }
    """
    filters = filters or {}
    queryset = FeePayment.objects.filter(status='COMPLETED')

    if filters.get('academic_year'):
        queryset = queryset.filter(academic_year=filters['academic_year'])
    if filters.get('session'):
        queryset = queryset.filter(session=filters['session'])
    if filters.get('start_date'):
        queryset = queryset.filter(payment_date__date__gte=filters['start_date'])
    if filters.get('end_date'):
        queryset = queryset.filter(payment_date__date__lte=filters['end_date'])

    totals = queryset.aggregate(count=Count('id'), amount=Sum('amount_paid'))
    by_method = {
        row['payment_method']: {'count': row['count'], 'amount': to_money(row['amount'])}
        for row in queryset.values('payment_method').annotate(
            count=Count('id'), amount=Sum('amount_paid')
        ).order_by('payment_method')
    }

    summary = FeeLedgerEngine.build_payment_summary(
        queryset.select_related('student__programme', 'student__department')
    )

    return {
        'total_payments': totals['count'],
        'total_amount': to_money(totals['amount'] or Decimal('0')),
        'by_method': by_method,
        'by_programme': summary['by_programme'],
        'by_department': summary['by_department'],
    }


# =============================================================================
# FEE STRUCTURES
# =============================================================================

@service_action('Failed to create fee structure')
def create_fee_structure(data):
    """
    Create a fee structure.

    ``total_fee`` defaults to the sum of the voteheads when omitted.
    """
    fields = {key: data[key] for key in FEE_STRUCTURE_FIELDS if data.get(key) not in (None, '')}
    for key in VOTEHEAD_FIELDS + ('total_fee',):
        if key in fields:
            fields[key] = to_money(fields[key])

    fee_structure = FeeStructure(**fields)
    if fee_structure.total_fee is None:
        fee_structure.total_fee = fee_structure.component_total

    fee_structure.full_clean()
    fee_structure.save()

    if not fee_structure.components_match_total:
        logger.warning(
            f"Fee structure {fee_structure.pk} total {fee_structure.total_fee} "
            f"differs from voteheads {fee_structure.component_total}"
        )
    logger.info(f"Created fee structure {fee_structure}")

    return ActionResult.ok(fee_structure, message='Fee structure created successfully')


@service_action('Failed to update fee structure')
def update_fee_structure(structure_id, patch):
    """Apply a FeeStructurePatch (or dict) to a fee structure"""
    if isinstance(patch, dict):
        patch = FeeStructurePatch.from_dict(patch)

    for key in VOTEHEAD_FIELDS + ('total_fee',):
        if getattr(patch, key) is not None:
            setattr(patch, key, to_money(getattr(patch, key)))

    fee_structure = _get_fee_structure(structure_id)
    changed = fee_structure.apply_patch(patch)
    logger.info(f"Updated fee structure {fee_structure.pk}: {changed}")

    return ActionResult.ok(fee_structure, message='Fee structure updated successfully')


@service_action('Failed to fetch fee structures', empty_pagination=EMPTY_PAGINATION)
def get_fee_structures(filters=None, page=1, limit=FEE_STRUCTURE_PAGE_SIZE):
    """
    Filters:
        programme_id, academic_year, session, is_active (bool)
    """
    filters = filters or {}
    queryset = FeeStructure.objects.select_related('programme')

    if filters.get('programme_id'):
        queryset = queryset.filter(programme_id=filters['programme_id'])
    if filters.get('academic_year'):
        queryset = queryset.filter(academic_year=filters['academic_year'])
    if filters.get('session'):
        queryset = queryset.filter(session=filters['session'])
    if isinstance(filters.get('is_active'), bool):
        queryset = queryset.filter(is_active=filters['is_active'])

    rows, pagination = slice_page(queryset.order_by('-academic_year', 'session'), page, limit)
    return ActionResult.ok(rows, pagination=pagination)


@service_action('Failed to fetch fee structure')
def get_fee_structure(structure_id):
    return _get_fee_structure(structure_id)


@service_action('Failed to fetch student fee structure')
def get_student_fee_structure(student_id):
    """Active structure for the student's programme, year and session"""
    try:
        student = Student.objects.get(pk=student_id)
    except (Student.DoesNotExist, ValidationError, ValueError):
        raise StudentNotFound()

    return FeeLedgerEngine.get_active_fee_structure(
        student.programme_id, student.academic_year, student.session
    )


@service_action('Failed to delete fee structure')
def delete_fee_structure(structure_id):
    fee_structure = _get_fee_structure(structure_id)
    label = str(fee_structure)
    fee_structure.delete()

    logger.info(f"Deleted fee structure {label}")

    return ActionResult.ok(None, message='Fee structure deleted successfully')


def calculate_total_fees(voteheads):
    """
    Per-term and session totals for a list of voteheads.

    Args:
        voteheads: iterable of dicts with term1, term2, term3

    Returns:
        dict: term1, term2, term3, grand_total (Decimal)

    Example:
        >>> calculate_total_fees([{'term1': 100, 'term2': 100, 'term3': 50}])
        {'term1': Decimal('100.00'), 'term2': Decimal('100.00'),
         'term3': Decimal('50.00'), 'grand_total': Decimal('250.00')}
    """
    totals = {'term1': Decimal('0.00'), 'term2': Decimal('0.00'), 'term3': Decimal('0.00')}
    for votehead in voteheads:
        for term in totals:
            totals[term] += to_money(safe_decimal(votehead.get(term)))

    totals['grand_total'] = totals['term1'] + totals['term2'] + totals['term3']
    return totals
