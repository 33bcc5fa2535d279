# hr/models.py

from django.db import models
import logging

from utils.models import BaseModel
from core.patches import SparsePatch

logger = logging.getLogger(__name__)


# =============================================================================
# TUTOR
# =============================================================================

class Tutor(BaseModel):
    """Teaching staff member"""

    employee_code = models.CharField(
        "Employee Code",
        max_length=30,
        unique=True,
        db_index=True
    )
    first_name = models.CharField("First Name", max_length=50)
    last_name = models.CharField("Last Name", max_length=50)
    email = models.EmailField("Email", unique=True)
    phone_number = models.CharField("Phone Number", max_length=20, blank=True)
    department = models.ForeignKey(
        'academics.Department',
        verbose_name="Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tutors'
    )
    specialization = models.CharField("Specialization", max_length=150, blank=True)
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Tutor"
        verbose_name_plural = "Tutors"
        ordering = ['employee_code']

    def __str__(self):
        return f"{self.employee_code} - {self.get_full_name()}"

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"


class TutorPatch(SparsePatch):
    fields = (
        'first_name', 'last_name', 'email', 'phone_number',
        'department_id', 'specialization', 'is_active',
    )
