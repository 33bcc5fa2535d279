# students/utils.py

from django.conf import settings

from core.sequences import SequentialCodeGenerator, ORDER_NUMERIC
from core.utils import get_century_safe_year_suffix, get_today


# =============================================================================
# ADMISSION NUMBER GENERATION
# =============================================================================

def get_admission_prefix():
    """'KTYC/S/' - institution code plus the student series marker"""
    return f"{settings.INSTITUTION_CODE_PREFIX}/S/"


def next_admission_number(admission_year=None, preview=False):
    """
    Next admission number in the institution-wide series.

    Format:
        KTYC/S/N/YY

    The counter is unpadded and keeps running across years; YY is the
    admission year, not part of the counter. Because the counter has no
    fixed width, the highest stored number is found by parsing every
    matching code (lexicographically 'KTYC/S/9/25' sorts above
    'KTYC/S/10/25').

    Args:
        admission_year (int): Defaults to the current year
        preview (bool): Return the upcoming number without reserving it

    Returns:
        str: e.g. 'KTYC/S/8/25'
    """
    from .models import Student

    year = admission_year or get_today().year
    generator = SequentialCodeGenerator(Student, 'admission_number', ordering=ORDER_NUMERIC)

    build = generator.preview if preview else generator.next
    return build(
        get_admission_prefix(),
        numeric_group_index=0,
        suffix=f"/{get_century_safe_year_suffix(year)}",
    )
