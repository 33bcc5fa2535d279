# core/sequences.py

"""
Sequential human-readable code generation.

Codes look like ``KTYC/TUT/0007``, ``PR/2025/0004`` or ``KTYC/S/7/25``:
a fixed prefix, a slash-delimited numeric counter and optional trailing
segments. The next code is derived from the highest code already stored
under the same prefix.

Allocation strategies (settings.SEQUENTIAL_CODE_STRATEGY):
- 'optimistic': read the highest stored code and add one. Nothing is
  locked, so two concurrent requests can compute the same code; the
  unique constraint on the target field rejects the second insert.
  Wrap inserts with ``create_with_unique_code`` to retry.
- 'counter': take the next value from a CodeCounter row locked with
  select_for_update. The row is seeded from the highest stored code the
  first time a prefix is used.
"""

import re
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import IntegrityError, transaction

from core.models import CodeCounter

logger = logging.getLogger(__name__)

STRATEGY_OPTIMISTIC = 'optimistic'
STRATEGY_COUNTER = 'counter'
STRATEGIES = (STRATEGY_OPTIMISTIC, STRATEGY_COUNTER)

ORDER_LEXICOGRAPHIC = 'lexicographic'
ORDER_NUMERIC = 'numeric'

_DIGITS = re.compile(r'[0-9]+')


# =============================================================================
# PURE HELPERS
# =============================================================================

def extract_counter(code, prefix, numeric_group_index=0):
    """
    Read the numeric counter from a stored code.

    The part after ``prefix`` is split on '/', and the segment at
    ``numeric_group_index`` must be all digits. Negative indexes count
    from the end.

    Returns:
        int or None: Counter value, or None if the code is malformed

    Examples:
        extract_counter('KTYC/TUT/0007', 'KTYC/TUT/')   → 7
        extract_counter('KTYC/S/12/25', 'KTYC/S/', 0)   → 12
        extract_counter('KTYC/S/X1/25', 'KTYC/S/', 0)   → None
    """
    if not code or not code.startswith(prefix):
        return None

    segments = code[len(prefix):].split('/')
    try:
        segment = segments[numeric_group_index]
    except IndexError:
        return None

    if not _DIGITS.fullmatch(segment):
        return None
    return int(segment)


def format_code(prefix, counter, width=None, suffix=''):
    """
    Build a code from its parts.

    Examples:
        format_code('KTYC/TUT/', 8, width=4)     → 'KTYC/TUT/0008'
        format_code('KTYC/S/', 8, suffix='/25')  → 'KTYC/S/8/25'
    """
    number = f"{counter:0{width}d}" if width else str(counter)
    return f"{prefix}{number}{suffix}"


# =============================================================================
# GENERATOR
# =============================================================================

class SequentialCodeGenerator:
    """
    Derive the next code of a series stored in ``model.<field>``.

    Args:
        model: Django model class holding the codes
        field (str): Name of the unique code field
        ordering (str): How the highest stored code is found
            - 'lexicographic': ORDER BY field DESC LIMIT 1. Correct only
              while the counter has a fixed width.
            - 'numeric': parse every matching code and take the largest
              counter. Use for unpadded series such as admission numbers.
        strategy (str): Allocation strategy; defaults to
            settings.SEQUENTIAL_CODE_STRATEGY

    Example:
        generator = SequentialCodeGenerator(Tutor, 'employee_code')
        generator.next('KTYC/TUT/', width=4)   # 'KTYC/TUT/0008'
    """

    def __init__(self, model, field, ordering=ORDER_LEXICOGRAPHIC, strategy=None):
        if ordering not in (ORDER_LEXICOGRAPHIC, ORDER_NUMERIC):
            raise ValueError(f"Unknown ordering: {ordering}")
        self.model = model
        self.field = field
        self.ordering = ordering
        self.strategy = strategy

    def get_strategy(self):
        strategy = self.strategy or getattr(
            settings, 'SEQUENTIAL_CODE_STRATEGY', STRATEGY_OPTIMISTIC
        )
        if strategy not in STRATEGIES:
            raise ImproperlyConfigured(
                f"SEQUENTIAL_CODE_STRATEGY must be one of {STRATEGIES}, got '{strategy}'"
            )
        return strategy

    def _matching(self, prefix):
        return self.model.objects.filter(**{f"{self.field}__startswith": prefix})

    def highest_counter(self, prefix, numeric_group_index=0):
        """
        Counter of the highest stored code under ``prefix``.

        Returns:
            int or None: None when nothing is stored or the stored code
            cannot be parsed
        """
        if self.ordering == ORDER_NUMERIC:
            codes = list(self._matching(prefix).values_list(self.field, flat=True))
            if not codes:
                return None
            counters = [extract_counter(code, prefix, numeric_group_index) for code in codes]
            counters = [value for value in counters if value is not None]
            if not counters:
                logger.warning(
                    f"No parseable {self.model.__name__}.{self.field} under '{prefix}' "
                    f"({len(codes)} stored); restarting series at 1"
                )
                return None
            return max(counters)

        last_code = (
            self._matching(prefix)
            .order_by(f"-{self.field}")
            .values_list(self.field, flat=True)
            .first()
        )
        if last_code is None:
            return None

        counter = extract_counter(last_code, prefix, numeric_group_index)
        if counter is None:
            logger.warning(
                f"Malformed {self.model.__name__}.{self.field} '{last_code}'; "
                f"restarting series '{prefix}' at 1"
            )
        return counter

    def next_counter(self, prefix, numeric_group_index=0):
        if self.get_strategy() == STRATEGY_COUNTER:
            return self._allocate_from_counter(prefix, numeric_group_index)
        return (self.highest_counter(prefix, numeric_group_index) or 0) + 1

    def preview_counter(self, prefix, numeric_group_index=0):
        """The counter ``next_counter`` would return now; nothing is written"""
        if self.get_strategy() == STRATEGY_COUNTER:
            issued = (
                CodeCounter.objects
                .filter(name=prefix)
                .values_list('value', flat=True)
                .first()
            )
            if issued is not None:
                return issued + 1
        return (self.highest_counter(prefix, numeric_group_index) or 0) + 1

    def _allocate_from_counter(self, prefix, numeric_group_index):
        with transaction.atomic():
            try:
                counter = CodeCounter.objects.select_for_update().get(name=prefix)
            except CodeCounter.DoesNotExist:
                seed = self.highest_counter(prefix, numeric_group_index) or 0
                counter, created = CodeCounter.objects.select_for_update().get_or_create(
                    name=prefix, defaults={'value': seed}
                )
                if created:
                    logger.info(f"Seeded code counter '{prefix}' at {seed}")
            return counter.increment()

    def next(self, prefix, numeric_group_index=0, width=None, suffix=''):
        """
        Next code in the series.

        Args:
            prefix (str): Storage filter and leading part of the code
            numeric_group_index (int): Which '/'-segment after the prefix
                holds the counter
            width (int): Zero-padding width, None for unpadded
            suffix (str): Fixed trailing segments, e.g. '/25'

        Returns:
            str: The next code. Malformed stored data restarts the series
            at 1 rather than raising.
        """
        counter = self.next_counter(prefix, numeric_group_index)
        return format_code(prefix, counter, width=width, suffix=suffix)

    def preview(self, prefix, numeric_group_index=0, width=None, suffix=''):
        """
        Code the next allocation would produce, without reserving it.

        Under the 'counter' strategy ``next`` consumes a value, so screens
        that only display the upcoming code call this instead.
        """
        counter = self.preview_counter(prefix, numeric_group_index)
        return format_code(prefix, counter, width=width, suffix=suffix)


# =============================================================================
# UNIQUE-CONSTRAINT RETRY
# =============================================================================

def create_with_unique_code(generate, create, attempts=3):
    """
    Generate a code and insert the record, retrying on duplicate codes.

    Each attempt runs in its own savepoint so a failed insert does not
    poison an enclosing transaction.

    Args:
        generate: callable() -> str
        create: callable(code) -> model instance
        attempts (int): Maximum number of inserts to try

    Returns:
        The created instance

    Raises:
        IntegrityError: If every attempt collides
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error = None
    for attempt in range(1, attempts + 1):
        code = generate()
        try:
            with transaction.atomic():
                return create(code)
        except IntegrityError as e:
            last_error = e
            logger.warning(f"Code '{code}' already taken (attempt {attempt}/{attempts})")

    raise last_error
