# hr/services.py

"""
Tutor operations. All public functions return core.results.ActionResult.
"""

from django.core.exceptions import ValidationError
import logging

from core.exceptions import TutorNotFound
from core.results import ActionResult, service_action
from core.sequences import create_with_unique_code
from .models import Tutor, TutorPatch
from .utils import next_employee_code

logger = logging.getLogger(__name__)

TUTOR_FIELDS = (
    'first_name', 'last_name', 'email', 'phone_number',
    'department_id', 'specialization', 'is_active',
)


@service_action('Failed to generate employee code')
def generate_employee_code():
    """Preview the next employee code (nothing is reserved)"""
    return next_employee_code(preview=True)


@service_action(
    'Failed to create tutor. Please try again.',
    conflict_message='A tutor with this information already exists',
)
def create_tutor(data):
    """
    Create a tutor.

    ``employee_code`` is optional; when omitted one is allocated.
    """
    employee_code = (data.get('employee_code') or '').strip()

    if employee_code and Tutor.objects.filter(employee_code=employee_code).exists():
        raise ValidationError('A tutor with this employee code already exists')

    email = data.get('email')
    if email and Tutor.objects.filter(email=email).exists():
        raise ValidationError('A tutor with this email already exists')

    fields = {key: data[key] for key in TUTOR_FIELDS if data.get(key) not in (None, '')}

    def _create(code):
        tutor = Tutor(employee_code=code, **fields)
        tutor.full_clean(validate_unique=False)
        tutor.save()
        return tutor

    if employee_code:
        tutor = _create(employee_code)
    else:
        tutor = create_with_unique_code(next_employee_code, _create)

    logger.info(f"Created tutor {tutor.employee_code}")

    return ActionResult.ok(tutor, message='Tutor created successfully')


@service_action(
    'Failed to update tutor. Please try again.',
    conflict_message='A tutor with this information already exists',
)
def update_tutor(tutor_id, patch):
    """
    Apply a TutorPatch (or dict of fields) to a tutor.
    """
    if isinstance(patch, dict):
        patch = TutorPatch.from_dict(patch)

    try:
        tutor = Tutor.objects.get(pk=tutor_id)
    except Tutor.DoesNotExist:
        raise TutorNotFound()

    email = patch.changes().get('email')
    if email and Tutor.objects.filter(email=email).exclude(pk=tutor.pk).exists():
        raise ValidationError('A tutor with this email already exists')

    changed = tutor.apply_patch(patch)
    logger.info(f"Updated tutor {tutor.employee_code}: {changed}")

    return ActionResult.ok(tutor, message='Tutor updated successfully')
