# procurement/utils.py

from core.sequences import SequentialCodeGenerator
from core.utils import get_today

REQUEST_NUMBER_WIDTH = 4


def get_request_number_prefix(year=None):
    """'PR/2025/'"""
    return f"PR/{year or get_today().year}/"


def next_request_number(year=None, preview=False):
    """
    Next procurement request number for the year.

    Format:
        PR/YYYY/NNNN  (restarts at 0001 each year)
    """
    from .models import ProcurementRequest

    generator = SequentialCodeGenerator(ProcurementRequest, 'request_number')
    build = generator.preview if preview else generator.next
    return build(get_request_number_prefix(year), width=REQUEST_NUMBER_WIDTH)
