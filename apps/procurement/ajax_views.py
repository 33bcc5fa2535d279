# procurement/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_http_methods
import logging

from core.responses import InvalidRequestBody, error_response, parse_json_body, result_response
from utils.utils import parse_filters
from . import services

logger = logging.getLogger(__name__)


def serialize_procurement_request(procurement):
    return {
        'id': str(procurement.id),
        'request_number': procurement.request_number,
        'requested_by': procurement.requested_by,
        'department': procurement.department,
        'description': procurement.description,
        'estimated_cost': procurement.estimated_cost,
        'priority': procurement.priority,
        'category': procurement.category,
        'justification': procurement.justification,
        'status': procurement.status,
        'status_display': procurement.get_status_display(),
        'approved_by': procurement.approved_by,
        'approved_at': procurement.approved_at,
        'approval_comments': procurement.approval_comments,
        'created_at': procurement.created_at,
    }


def _json_body(request):
    try:
        return parse_json_body(request), None
    except InvalidRequestBody as e:
        return None, error_response(str(e))


def _actor(request):
    return request.user.get_full_name() or request.user.get_username()


# =============================================================================
# LIST / DETAIL
# =============================================================================

@login_required
@require_http_methods(["GET"])
def procurement_list(request):
    filters = parse_filters(request, ['status', 'department', 'priority', 'search', 'page'])
    result = services.get_procurement_requests(filters, page=filters['page'] or 1)
    return result_response(result, serialize_procurement_request)


@login_required
@require_http_methods(["GET"])
def procurement_detail(request, pk):
    return result_response(services.get_procurement_request(pk), serialize_procurement_request)


@login_required
@require_http_methods(["GET"])
def next_request_number(request):
    return result_response(services.generate_request_number())


@login_required
@require_http_methods(["GET"])
def procurement_summary(request):
    filters = parse_filters(request, ['department', 'start_date', 'end_date'])
    return result_response(services.get_procurement_summary(filters))


@login_required
@require_http_methods(["GET"])
def department_budget(request):
    filters = parse_filters(request, ['department', 'year'])
    if not filters['department']:
        return error_response("Department is required.")
    return result_response(
        services.get_department_procurement_budget(filters['department'], filters['year'])
    )


# =============================================================================
# CREATE / UPDATE / DELETE
# =============================================================================

@login_required
@require_http_methods(["POST"])
def procurement_create(request):
    data, error = _json_body(request)
    if error:
        return error
    data.setdefault('requested_by', _actor(request))
    return result_response(services.create_procurement_request(data), serialize_procurement_request)


@login_required
@require_http_methods(["POST"])
def procurement_update(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    return result_response(services.update_procurement_request(pk, data), serialize_procurement_request)


@login_required
@require_http_methods(["POST"])
def procurement_delete(request, pk):
    return result_response(services.delete_procurement_request(pk))


# =============================================================================
# WORKFLOW
# =============================================================================

@login_required
@require_http_methods(["POST"])
def procurement_approve(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    result = services.approve_procurement_request(pk, _actor(request), data.get('comments'))
    return result_response(result, serialize_procurement_request)


@login_required
@require_http_methods(["POST"])
def procurement_reject(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    result = services.reject_procurement_request(pk, _actor(request), data.get('comments'))
    return result_response(result, serialize_procurement_request)


@login_required
@require_http_methods(["POST"])
def procurement_complete(request, pk):
    return result_response(services.complete_procurement_request(pk), serialize_procurement_request)


@login_required
@require_http_methods(["POST"])
def procurement_status(request, pk):
    data, error = _json_body(request)
    if error:
        return error
    result = services.update_procurement_status(
        pk, data.get('status'), _actor(request), data.get('comments')
    )
    return result_response(result, serialize_procurement_request)
