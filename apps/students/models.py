# students/models.py

from django.db import models
from django_countries.fields import CountryField
from utils.models import BaseModel
from academics.models import SESSION_CHOICES

import logging

logger = logging.getLogger(__name__)


# =============================================================================
# STUDENT MODEL
# =============================================================================

class Student(BaseModel):
    """Core model for student information"""

    # -------------------------------------------------------------------------
    # CHOICE FIELDS
    # -------------------------------------------------------------------------

    GENDER_CHOICES = (
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
    )

    ACADEMIC_STATUS_CHOICES = (
        ('ACTIVE', 'Active'),
        ('SUSPENDED', 'Suspended'),
        ('GRADUATED', 'Graduated'),
        ('WITHDRAWN', 'Withdrawn'),
        ('DEFERRED', 'Deferred'),
    )

    # -------------------------------------------------------------------------
    # IDENTIFICATION & BASIC INFORMATION
    # -------------------------------------------------------------------------

    admission_number = models.CharField(
        "Admission Number",
        max_length=30,
        unique=True,
        db_index=True
    )
    id_number = models.CharField(
        "National ID Number",
        max_length=30,
        unique=True,
        null=True,
        blank=True
    )

    # Personal information
    first_name = models.CharField("First Name", max_length=50)
    middle_name = models.CharField("Middle Name", max_length=50, blank=True)
    last_name = models.CharField("Last Name", max_length=50)
    date_of_birth = models.DateField("Date of Birth", null=True, blank=True)
    gender = models.CharField("Gender", max_length=6, choices=GENDER_CHOICES)
    nationality = CountryField("Nationality", default='KE')

    # Contact
    email = models.EmailField("Email", blank=True, null=True)
    phone_number = models.CharField("Phone Number", max_length=20, blank=True, null=True)

    # -------------------------------------------------------------------------
    # ACADEMIC INFORMATION
    # -------------------------------------------------------------------------

    academic_year = models.CharField("Academic Year", max_length=9, db_index=True)
    session = models.CharField("Session", max_length=12, choices=SESSION_CHOICES, db_index=True)
    department = models.ForeignKey(
        'academics.Department',
        verbose_name="Department",
        on_delete=models.PROTECT,
        related_name='students'
    )
    programme = models.ForeignKey(
        'academics.Programme',
        verbose_name="Programme",
        on_delete=models.PROTECT,
        related_name='students'
    )
    school_class = models.ForeignKey(
        'academics.SchoolClass',
        verbose_name="Class",
        on_delete=models.PROTECT,
        related_name='students'
    )
    academic_status = models.CharField(
        "Academic Status",
        max_length=10,
        choices=ACADEMIC_STATUS_CHOICES,
        default='ACTIVE',
        db_index=True
    )

    # -------------------------------------------------------------------------
    # GUARDIAN
    # -------------------------------------------------------------------------

    guardian_name = models.CharField("Guardian Name", max_length=150, blank=True, null=True)
    guardian_phone = models.CharField("Guardian Phone", max_length=20, blank=True, null=True)
    guardian_email = models.EmailField("Guardian Email", blank=True, null=True)
    guardian_relation = models.CharField("Guardian Relation", max_length=50, blank=True, null=True)

    class Meta:
        verbose_name = "Student"
        verbose_name_plural = "Students"
        ordering = ['admission_number']

    def __str__(self):
        return f"{self.admission_number} - {self.get_full_name()}"

    def get_full_name(self):
        """Get student's full name"""
        if self.middle_name:
            return f"{self.first_name} {self.middle_name} {self.last_name}"
        return f"{self.first_name} {self.last_name}"

    @property
    def invoice_name(self):
        """Name as printed on invoices (first and last only)"""
        return f"{self.first_name} {self.last_name}"
