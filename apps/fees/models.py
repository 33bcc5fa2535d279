# fees/models.py

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel
from academics.models import SESSION_CHOICES
from core.patches import SparsePatch

logger = logging.getLogger(__name__)

TERM_CHOICES = [
    ('TERM1', 'Term 1'),
    ('TERM2', 'Term 2'),
    ('TERM3', 'Term 3'),
]

# Fee structures are priced per session and billed in equal thirds
TERMS_PER_SESSION = 3


# =============================================================================
# FEE STRUCTURE
# =============================================================================

class FeeStructure(BaseModel):
    """
    Session fees for one programme, broken into voteheads.

    ``total_fee`` is expected to equal the sum of the voteheads but this is
    not enforced; see ``components_match_total``.
    """

    programme = models.ForeignKey(
        'academics.Programme',
        verbose_name="Programme",
        on_delete=models.CASCADE,
        related_name='fee_structures'
    )
    academic_year = models.CharField("Academic Year", max_length=9, db_index=True)
    session = models.CharField("Session", max_length=12, choices=SESSION_CHOICES, db_index=True)

    # -------------------------------------------------------------------------
    # VOTEHEADS
    # -------------------------------------------------------------------------

    tuition_fee = models.DecimalField(
        "Tuition Fee",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    exam_fee = models.DecimalField(
        "Examination Fee", max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    library_fee = models.DecimalField(
        "Library Fee", max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    activity_fee = models.DecimalField(
        "Activity Fee", max_digits=12, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    total_fee = models.DecimalField(
        "Total Fee",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Fee for the whole session (all three terms)"
    )

    is_active = models.BooleanField("Active", default=True, db_index=True)

    class Meta:
        verbose_name = "Fee Structure"
        verbose_name_plural = "Fee Structures"
        ordering = ['-academic_year', 'session']
        indexes = [
            models.Index(fields=['programme', 'academic_year', 'session']),
        ]

    def __str__(self):
        return f"{self.programme} - {self.academic_year} {self.get_session_display()}"

    @property
    def component_total(self):
        return sum(
            (value or Decimal('0.00') for value in (
                self.tuition_fee, self.exam_fee, self.library_fee, self.activity_fee
            )),
            Decimal('0.00')
        )

    @property
    def components_match_total(self):
        return self.component_total == self.total_fee


class FeeStructurePatch(SparsePatch):
    fields = (
        'academic_year', 'session', 'tuition_fee', 'exam_fee',
        'library_fee', 'activity_fee', 'total_fee', 'is_active',
    )


# =============================================================================
# FEE PAYMENT
# =============================================================================

class FeePayment(BaseModel):
    """Payment made by a student towards a session's fees"""

    PAYMENT_METHOD_CHOICES = [
        ('CASH', 'Cash'),
        ('MPESA', 'M-Pesa'),
        ('BANK_TRANSFER', 'Bank Transfer'),
        ('CARD', 'Card'),
    ]

    PAYMENT_STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('COMPLETED', 'Completed'),
        ('FAILED', 'Failed'),
        ('REFUNDED', 'Refunded'),
    ]

    student = models.ForeignKey(
        'students.Student',
        verbose_name="Student",
        on_delete=models.CASCADE,
        related_name='fee_payments'
    )
    academic_year = models.CharField("Academic Year", max_length=9, db_index=True)
    session = models.CharField("Session", max_length=12, choices=SESSION_CHOICES, db_index=True)

    # -------------------------------------------------------------------------
    # PAYMENT DETAILS
    # -------------------------------------------------------------------------

    amount_paid = models.DecimalField(
        "Amount Paid",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField("Payment Method", max_length=15, choices=PAYMENT_METHOD_CHOICES)
    transaction_ref = models.CharField("Transaction Reference", max_length=100, unique=True)
    payment_date = models.DateTimeField("Payment Date", db_index=True)
    status = models.CharField(
        "Status",
        max_length=10,
        choices=PAYMENT_STATUS_CHOICES,
        default='COMPLETED',
        db_index=True
    )
    received_by = models.CharField("Received By", max_length=150, blank=True)
    notes = models.TextField("Notes", blank=True)

    class Meta:
        verbose_name = "Fee Payment"
        verbose_name_plural = "Fee Payments"
        ordering = ['-payment_date']
        indexes = [
            models.Index(fields=['student', 'academic_year', 'session', 'status']),
        ]

    def __str__(self):
        return f"{self.transaction_ref} - {self.amount_paid}"
