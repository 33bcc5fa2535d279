# core/utils.py

"""
Core utility functions: dates, money and percentages.

Pure helpers - no database writes.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from django.conf import settings
from django.utils import timezone
import logging

import pycountry

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')


# =============================================================================
# CENTURY-SAFE YEAR UTILITIES
# =============================================================================

def get_century_safe_year_suffix(year):
    """
    Convert year to century-safe format

    Args:
        year (int): Full year (e.g., 2025, 2125)

    Returns:
        str: Century-safe year suffix

    Examples:
        2025 → "25"
        2099 → "99"
        2100 → "A00"
        2125 → "A25"
    """
    if year < 2100:
        return f"{year % 100:02d}"

    # 22nd century and beyond: use letter prefix
    century_offset = year // 100 - 20  # 22nd century = 1, 23rd = 2, ...
    century_letter = chr(ord('A') + century_offset - 1)
    return f"{century_letter}{year % 100:02d}"


def get_today():
    """Current date in the configured TIME_ZONE"""
    return timezone.localdate()


# =============================================================================
# CURRENCY & MONEY
# =============================================================================

def get_base_currency():
    """
    Get the configured ISO 4217 currency code.

    Unknown codes fall back to KES with a warning.
    """
    code = (getattr(settings, 'SCHOOL_CURRENCY', None) or 'KES').upper()
    if pycountry.currencies.get(alpha_3=code) is None:
        logger.warning(f"Unknown currency code '{code}' in settings, using KES")
        return 'KES'
    return code


def get_currency_name(code=None):
    """Human-readable currency name, e.g. 'Kenyan Shilling'"""
    currency = pycountry.currencies.get(alpha_3=code or get_base_currency())
    return currency.name if currency else (code or '')


def safe_decimal(value, default=Decimal('0.00')):
    """
    Safely convert value to Decimal.

    Example:
        >>> safe_decimal("1500.50")
        Decimal('1500.50')
        >>> safe_decimal("invalid")
        Decimal('0.00')
    """
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except (ValueError, TypeError, InvalidOperation):
        return default


def to_money(amount):
    """Quantize to cents using ROUND_HALF_UP"""
    return safe_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def divide_money(amount, parts):
    """
    Split an amount into equal parts, rounded to cents.

    Example:
        >>> divide_money(Decimal('90000'), 3)
        Decimal('30000.00')
    """
    return to_money(safe_decimal(amount) / Decimal(parts))


def format_money(amount, include_symbol=True, currency_code=None):
    """
    Format money amount with thousand separators.

    Example:
        >>> format_money(1500000)           # "KES 1,500,000.00"
        >>> format_money(1500000, False)    # "1,500,000.00"
    """
    formatted = f"{to_money(amount):,.2f}"
    if not include_symbol:
        return formatted
    return f"{currency_code or get_base_currency()} {formatted}"


def calculate_percentage(part, whole, decimal_places=2):
    """
    Calculate percentage with safe division.

    Returns:
        Decimal: Percentage value, 0 if whole is 0

    Example:
        >>> calculate_percentage(75, 100)  # 75.00
    """
    part = safe_decimal(part)
    whole = safe_decimal(whole)

    if whole == 0:
        return Decimal('0.00')

    exponent = Decimal(1).scaleb(-decimal_places)
    return ((part / whole) * 100).quantize(exponent, rounding=ROUND_HALF_UP)
