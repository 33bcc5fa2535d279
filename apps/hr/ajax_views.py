# hr/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_http_methods
import logging

from core.responses import InvalidRequestBody, error_response, parse_json_body, result_response
from .services import generate_employee_code, create_tutor, update_tutor

logger = logging.getLogger(__name__)


def serialize_tutor(tutor):
    return {
        'id': str(tutor.id),
        'employee_code': tutor.employee_code,
        'full_name': tutor.get_full_name(),
        'first_name': tutor.first_name,
        'last_name': tutor.last_name,
        'email': tutor.email,
        'phone_number': tutor.phone_number,
        'department_id': str(tutor.department_id) if tutor.department_id else None,
        'specialization': tutor.specialization,
        'is_active': tutor.is_active,
    }


@login_required
@require_http_methods(["GET"])
def next_employee_code(request):
    """Preview the next tutor employee code"""
    return result_response(generate_employee_code())


@login_required
@require_http_methods(["POST"])
def tutor_create(request):
    try:
        data = parse_json_body(request)
    except InvalidRequestBody as e:
        return error_response(str(e))

    return result_response(create_tutor(data), serialize_tutor)


@login_required
@require_http_methods(["POST"])
def tutor_update(request, pk):
    try:
        data = parse_json_body(request)
    except InvalidRequestBody as e:
        return error_response(str(e))

    return result_response(update_tutor(pk, data), serialize_tutor)
