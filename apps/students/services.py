# students/services.py

"""
Student registration operations.

All public functions return core.results.ActionResult.
"""

from django.core.exceptions import ValidationError
import logging

from core.results import service_action
from core.sequences import create_with_unique_code
from .models import Student
from .utils import next_admission_number

logger = logging.getLogger(__name__)

STUDENT_FIELDS = (
    'first_name', 'middle_name', 'last_name', 'date_of_birth', 'gender',
    'nationality', 'id_number', 'email', 'phone_number',
    'academic_year', 'session', 'department_id', 'programme_id',
    'school_class_id', 'academic_status',
    'guardian_name', 'guardian_phone', 'guardian_email', 'guardian_relation',
)


@service_action('Failed to generate admission number')
def generate_admission_number():
    """Preview the next admission number (nothing is reserved)"""
    return next_admission_number(preview=True)


@service_action(
    'Failed to create student. Please try again.',
    conflict_message='A student with this information already exists',
)
def create_student(data):
    """
    Register a student.

    Args:
        data (dict): Student fields. ``admission_number`` is optional;
            when omitted the next number in the series is allocated and
            the insert is retried if another request took it first.

    Returns:
        ActionResult with the created Student
    """
    admission_number = (data.get('admission_number') or '').strip()

    if admission_number and Student.objects.filter(admission_number=admission_number).exists():
        raise ValidationError('A student with this admission number already exists')

    id_number = data.get('id_number') or None
    if id_number and Student.objects.filter(id_number=id_number).exists():
        raise ValidationError('A student with this ID number already exists')

    fields = {key: data[key] for key in STUDENT_FIELDS if data.get(key) not in (None, '')}
    fields['id_number'] = id_number

    def _create(code):
        student = Student(admission_number=code, **fields)
        student.full_clean(validate_unique=False)
        student.save()
        return student

    if admission_number:
        student = _create(admission_number)
    else:
        student = create_with_unique_code(next_admission_number, _create)

    logger.info(f"Registered student {student.admission_number} ({student.get_full_name()})")

    return student
