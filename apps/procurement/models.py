# procurement/models.py

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel
from core.patches import SparsePatch

logger = logging.getLogger(__name__)


# =============================================================================
# PROCUREMENT REQUEST
# =============================================================================

class ProcurementRequest(BaseModel):
    """Departmental purchase request moving through an approval workflow"""

    STATUS_CHOICES = [
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('REJECTED', 'Rejected'),
        ('IN_PROGRESS', 'In Progress'),
        ('COMPLETED', 'Completed'),
    ]

    PRIORITY_CHOICES = [
        ('LOW', 'Low'),
        ('MEDIUM', 'Medium'),
        ('HIGH', 'High'),
        ('URGENT', 'Urgent'),
    ]

    # Allowed status moves; COMPLETED and REJECTED are final
    STATUS_TRANSITIONS = {
        'PENDING': {'APPROVED', 'REJECTED'},
        'APPROVED': {'IN_PROGRESS', 'COMPLETED', 'REJECTED'},
        'IN_PROGRESS': {'COMPLETED'},
        'REJECTED': set(),
        'COMPLETED': set(),
    }

    # -------------------------------------------------------------------------
    # IDENTIFICATION
    # -------------------------------------------------------------------------

    request_number = models.CharField(
        "Request Number",
        max_length=30,
        unique=True,
        db_index=True
    )
    requested_by = models.CharField("Requested By", max_length=150)
    department = models.CharField(
        "Department",
        max_length=100,
        db_index=True,
        help_text="Department name as entered on the request"
    )

    # -------------------------------------------------------------------------
    # DETAILS
    # -------------------------------------------------------------------------

    description = models.TextField("Description")
    estimated_cost = models.DecimalField(
        "Estimated Cost",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    priority = models.CharField("Priority", max_length=6, choices=PRIORITY_CHOICES, default='MEDIUM')
    category = models.CharField("Category", max_length=100, blank=True)
    justification = models.TextField("Justification", blank=True)

    # -------------------------------------------------------------------------
    # APPROVAL
    # -------------------------------------------------------------------------

    status = models.CharField(
        "Status",
        max_length=12,
        choices=STATUS_CHOICES,
        default='PENDING',
        db_index=True
    )
    approved_by = models.CharField("Approved / Rejected By", max_length=150, blank=True)
    approved_at = models.DateTimeField("Decision Date", null=True, blank=True)
    approval_comments = models.TextField("Approval Comments", blank=True)

    class Meta:
        verbose_name = "Procurement Request"
        verbose_name_plural = "Procurement Requests"
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.request_number} - {self.department}"

    def can_transition_to(self, status):
        return status in self.STATUS_TRANSITIONS.get(self.status, set())


class ProcurementRequestPatch(SparsePatch):
    fields = ('department', 'description', 'estimated_cost', 'priority', 'category', 'justification')
