# fees/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_http_methods
import logging

from core.responses import InvalidRequestBody, error_response, parse_json_body, result_response
from core.results import ActionResult
from utils.utils import parse_filters
from . import services, stats

logger = logging.getLogger(__name__)


def serialize_invoice(invoice):
    return invoice.as_dict()


def serialize_payment(payment):
    return {
        'id': str(payment.id),
        'student_id': str(payment.student_id),
        'admission_number': payment.student.admission_number,
        'student_name': payment.student.invoice_name,
        'academic_year': payment.academic_year,
        'session': payment.session,
        'amount_paid': payment.amount_paid,
        'payment_method': payment.payment_method,
        'transaction_ref': payment.transaction_ref,
        'payment_date': payment.payment_date,
        'status': payment.status,
        'received_by': payment.received_by,
        'notes': payment.notes,
    }


def serialize_fee_structure(fee_structure):
    return {
        'id': str(fee_structure.id),
        'programme_id': str(fee_structure.programme_id),
        'programme': fee_structure.programme.name,
        'academic_year': fee_structure.academic_year,
        'session': fee_structure.session,
        'tuition_fee': fee_structure.tuition_fee,
        'exam_fee': fee_structure.exam_fee,
        'library_fee': fee_structure.library_fee,
        'activity_fee': fee_structure.activity_fee,
        'total_fee': fee_structure.total_fee,
        'components_match_total': fee_structure.components_match_total,
        'is_active': fee_structure.is_active,
    }


def serialize_bulk_result(result):
    return {**result, 'invoices': [invoice.as_dict() for invoice in result['invoices']]}


def serialize_balance(balance):
    return {**balance, 'payments': [serialize_payment(payment) for payment in balance['payments']]}


def serialize_collection_report(report):
    return {**report, 'payments': [serialize_payment(payment) for payment in report['payments']]}


def _json_body(request):
    try:
        return parse_json_body(request), None
    except InvalidRequestBody as e:
        return None, error_response(str(e))


def _to_bool(value):
    if value is None:
        return None
    return value.lower() in ('1', 'true', 'yes')


# =============================================================================
# INVOICES
# =============================================================================

@login_required
@require_http_methods(["GET"])
def student_invoice(request, student_id):
    filters = parse_filters(request, ['academic_year', 'session', 'term'])
    result = services.generate_student_invoice({'student_id': student_id, **filters})
    return result_response(result, serialize_invoice)


@login_required
@require_http_methods(["POST"])
def bulk_invoices(request):
    data, error = _json_body(request)
    if error:
        return error
    return result_response(services.generate_bulk_invoices(data), serialize_bulk_result)


@login_required
@require_http_methods(["GET"])
def student_invoice_history(request, student_id):
    return result_response(services.get_student_invoice_history(student_id), serialize_invoice)


# =============================================================================
# PAYMENTS
# =============================================================================

@login_required
@require_http_methods(["GET"])
def payment_list(request):
    filters = parse_filters(request, [
        'student_id', 'academic_year', 'session', 'payment_method',
        'status', 'start_date', 'end_date', 'page', 'limit',
    ])
    result = services.get_fee_payments(
        filters,
        page=filters['page'] or 1,
        limit=filters['limit'] or services.PAYMENT_PAGE_SIZE,
    )
    return result_response(result, serialize_payment)


@login_required
@require_http_methods(["POST"])
def payment_create(request):
    data, error = _json_body(request)
    if error:
        return error
    data.setdefault('received_by', request.user.get_username())
    return result_response(services.record_fee_payment(data), serialize_payment)


@login_required
@require_http_methods(["POST"])
def payment_status(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    return result_response(services.update_payment_status(pk, data.get('status')), serialize_payment)


@login_required
@require_http_methods(["POST"])
def payment_delete(request, pk):
    return result_response(services.delete_payment(pk))


@login_required
@require_http_methods(["GET"])
def student_balance(request):
    filters = parse_filters(request, ['admission_number'])
    if not filters['admission_number']:
        return error_response("Admission number is required.")
    return result_response(
        services.get_student_fee_balance(filters['admission_number']), serialize_balance
    )


@login_required
@require_http_methods(["GET"])
def payment_statistics(request):
    filters = parse_filters(request, ['academic_year', 'session', 'start_date', 'end_date'])
    return result_response(services.get_payment_statistics(filters))


# =============================================================================
# FEE STRUCTURES
# =============================================================================

@login_required
@require_http_methods(["GET"])
def fee_structure_list(request):
    filters = parse_filters(request, ['programme_id', 'academic_year', 'session', 'is_active', 'page'])
    filters['is_active'] = _to_bool(filters['is_active'])
    result = services.get_fee_structures(filters, page=filters['page'] or 1)
    return result_response(result, serialize_fee_structure)


@login_required
@require_http_methods(["POST"])
def fee_structure_create(request):
    data, error = _json_body(request)
    if error:
        return error
    return result_response(services.create_fee_structure(data), serialize_fee_structure)


@login_required
@require_http_methods(["GET"])
def fee_structure_detail(request, pk):
    return result_response(services.get_fee_structure(pk), serialize_fee_structure)


@login_required
@require_http_methods(["POST"])
def fee_structure_update(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    return result_response(services.update_fee_structure(pk, data), serialize_fee_structure)


@login_required
@require_http_methods(["POST"])
def fee_structure_delete(request, pk):
    return result_response(services.delete_fee_structure(pk))


@login_required
@require_http_methods(["GET"])
def student_fee_structure(request, student_id):
    return result_response(services.get_student_fee_structure(student_id), serialize_fee_structure)


@login_required
@require_http_methods(["POST"])
def calculate_totals(request):
    data, error = _json_body(request)
    if error:
        return error
    voteheads = data.get('voteheads')
    if not isinstance(voteheads, list):
        return error_response("Voteheads must be a list.")
    return result_response(ActionResult.ok(services.calculate_total_fees(voteheads)))


# =============================================================================
# REPORTS
# =============================================================================

REPORT_FILTER_KEYS = [
    'academic_year', 'session', 'department_id', 'programme_id',
    'class_id', 'date_from', 'date_to',
]


@login_required
@require_http_methods(["GET"])
def collection_report(request):
    filters = parse_filters(request, REPORT_FILTER_KEYS)
    return result_response(stats.generate_collection_report(filters), serialize_collection_report)


@login_required
@require_http_methods(["GET"])
def outstanding_fees_report(request):
    filters = parse_filters(request, REPORT_FILTER_KEYS)
    return result_response(stats.generate_outstanding_fees_report(filters))


@login_required
@require_http_methods(["GET"])
def department_financial_summary(request, department_id):
    filters = parse_filters(request, REPORT_FILTER_KEYS)
    return result_response(stats.generate_department_financial_summary(department_id, filters))


@login_required
@require_http_methods(["GET"])
def cash_flow_report(request):
    filters = parse_filters(request, ['date_from', 'date_to'])
    return result_response(stats.generate_cash_flow_report(filters))
