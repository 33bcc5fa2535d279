# core/models.py

"""
Core models shared by all apps.
"""

from django.db import models
from django.db.models import F
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# =============================================================================
# CODE COUNTER
# =============================================================================

class CodeCounter(BaseModel):
    """
    Last issued value of a sequential code series.

    Only used by the 'counter' allocation strategy. One row per code
    prefix (e.g. 'KTYC/TUT/', 'PR/2025/'); the row is locked with
    select_for_update while the next value is taken.
    """

    name = models.CharField("Series Name", max_length=100, unique=True)
    value = models.PositiveIntegerField("Last Issued Value", default=0)

    class Meta:
        verbose_name = "Code Counter"
        verbose_name_plural = "Code Counters"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} → {self.value}"

    def increment(self):
        """Atomically bump the counter and return the new value."""
        CodeCounter.objects.filter(pk=self.pk).update(value=F('value') + 1)
        self.refresh_from_db(fields=['value'])
        return self.value
