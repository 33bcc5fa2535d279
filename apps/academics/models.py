# academics/models.py

"""
Academic structure: departments, programmes and classes.
"""

from django.db import models
from django.core.validators import MinValueValidator
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


SESSION_CHOICES = [
    ('SEPT_DEC', 'September - December'),
    ('JAN_APRIL', 'January - April'),
    ('MAY_AUGUST', 'May - August'),
]


def get_session_name(session):
    """'SEPT_DEC' → 'September - December'; unknown codes pass through"""
    return dict(SESSION_CHOICES).get(session, session)


# =============================================================================
# DEPARTMENT
# =============================================================================

class Department(BaseModel):
    """Academic department (Engineering, ICT, Hospitality...)"""

    name = models.CharField("Department Name", max_length=100, unique=True)
    code = models.CharField("Department Code", max_length=10, unique=True, db_index=True)
    description = models.TextField("Description", blank=True)
    head_of_department = models.CharField("Head of Department", max_length=150, blank=True)
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Department"
        verbose_name_plural = "Departments"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


# =============================================================================
# PROGRAMME
# =============================================================================

class Programme(BaseModel):
    """Course of study offered by a department; fee structures hang off it"""

    LEVEL_CHOICES = [
        ('ARTISAN', 'Artisan'),
        ('CERTIFICATE', 'Certificate'),
        ('DIPLOMA', 'Diploma'),
        ('HIGHER_DIPLOMA', 'Higher Diploma'),
    ]

    name = models.CharField("Programme Name", max_length=150)
    code = models.CharField("Programme Code", max_length=20, unique=True, db_index=True)
    department = models.ForeignKey(
        Department,
        verbose_name="Department",
        on_delete=models.PROTECT,
        related_name='programmes'
    )
    level = models.CharField("Level", max_length=20, choices=LEVEL_CHOICES, default='DIPLOMA')
    duration_months = models.PositiveIntegerField(
        "Duration (Months)",
        default=24,
        validators=[MinValueValidator(1)]
    )
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Programme"
        verbose_name_plural = "Programmes"
        ordering = ['department__name', 'name']

    def __str__(self):
        return f"{self.name} ({self.code})"


# =============================================================================
# CLASS
# =============================================================================

class SchoolClass(BaseModel):
    """A cohort of students taking a programme in a given intake"""

    name = models.CharField("Class Name", max_length=100)
    code = models.CharField("Class Code", max_length=30, unique=True, db_index=True)
    programme = models.ForeignKey(
        Programme,
        verbose_name="Programme",
        on_delete=models.PROTECT,
        related_name='classes'
    )
    department = models.ForeignKey(
        Department,
        verbose_name="Department",
        on_delete=models.PROTECT,
        related_name='classes'
    )
    academic_year = models.CharField("Academic Year", max_length=9, db_index=True)
    session = models.CharField("Session", max_length=12, choices=SESSION_CHOICES)
    capacity = models.PositiveIntegerField("Capacity", default=40)
    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        ordering = ['-academic_year', 'name']

    def __str__(self):
        return f"{self.name} ({self.academic_year})"
