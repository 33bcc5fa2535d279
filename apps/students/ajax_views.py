# students/ajax_views.py

from django.contrib.auth.decorators import login_required
from django.views.decorators.http import require_http_methods
import logging

from core.responses import InvalidRequestBody, error_response, parse_json_body, result_response
from .services import generate_admission_number, create_student

logger = logging.getLogger(__name__)


def serialize_student(student):
    return {
        'id': str(student.id),
        'admission_number': student.admission_number,
        'full_name': student.get_full_name(),
        'first_name': student.first_name,
        'middle_name': student.middle_name,
        'last_name': student.last_name,
        'gender': student.gender,
        'nationality': student.nationality.code if student.nationality else None,
        'email': student.email,
        'phone_number': student.phone_number,
        'academic_year': student.academic_year,
        'session': student.session,
        'department_id': str(student.department_id),
        'programme_id': str(student.programme_id),
        'class_id': str(student.school_class_id) if student.school_class_id else None,
        'academic_status': student.academic_status,
    }


# =============================================================================
# ADMISSION NUMBERS
# =============================================================================

@login_required
@require_http_methods(["GET"])
def next_admission_number(request):
    """Preview the next admission number"""
    return result_response(generate_admission_number())


# =============================================================================
# REGISTRATION
# =============================================================================

@login_required
@require_http_methods(["POST"])
def student_create(request):
    try:
        data = parse_json_body(request)
    except InvalidRequestBody as e:
        return error_response(str(e))

    result = create_student(data)
    return result_response(result, serialize_student)
