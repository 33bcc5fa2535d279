# hr/utils.py

"""
HR utility functions: employee code format.
"""

from django.conf import settings

from core.sequences import SequentialCodeGenerator

EMPLOYEE_CODE_WIDTH = 4


def get_employee_code_prefix():
    """'KTYC/TUT/'"""
    return f"{settings.INSTITUTION_CODE_PREFIX}/TUT/"


def next_employee_code(preview=False):
    """
    Next tutor employee code.

    Format:
        KTYC/TUT/NNNN

    Returns:
        str: e.g. 'KTYC/TUT/0008' when 'KTYC/TUT/0007' is the highest stored
    """
    from .models import Tutor

    generator = SequentialCodeGenerator(Tutor, 'employee_code')
    build = generator.preview if preview else generator.next
    return build(get_employee_code_prefix(), numeric_group_index=-1, width=EMPLOYEE_CODE_WIDTH)
