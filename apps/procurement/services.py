# procurement/services.py

"""
Procurement request workflow.

    PENDING -> APPROVED -> IN_PROGRESS -> COMPLETED
    PENDING or APPROVED -> REJECTED

All public functions return core.results.ActionResult.
"""

from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db.models import Q, Sum, Count
from django.utils import timezone
import logging

from core.exceptions import ProcurementRequestNotFound
from core.results import ActionResult, service_action
from core.sequences import create_with_unique_code
from core.utils import safe_decimal, to_money
from utils.utils import slice_page
from .models import ProcurementRequest, ProcurementRequestPatch
from .utils import next_request_number

logger = logging.getLogger(__name__)

REQUEST_PAGE_SIZE = 50

EMPTY_PAGINATION = {'total': 0, 'total_pages': 0, 'current_page': 1}


def _get_request(request_id):
    try:
        return ProcurementRequest.objects.get(pk=request_id)
    except (ProcurementRequest.DoesNotExist, ValidationError, ValueError):
        raise ProcurementRequestNotFound()


# =============================================================================
# CREATE / UPDATE
# =============================================================================

@service_action('Failed to generate request number')
def generate_request_number(year=None):
    """Preview the next request number (nothing is reserved)"""
    return next_request_number(year, preview=True)


@service_action(
    'Failed to create procurement request. Please try again.',
    conflict_message='A procurement request with this number already exists',
)
def create_procurement_request(data):
    """
    Submit a procurement request. New requests always start PENDING.

    Args:
        data (dict): requested_by, department, description,
            estimated_cost, and optionally priority, category,
            justification
    """
    estimated_cost = safe_decimal(data.get('estimated_cost'))
    if estimated_cost <= 0:
        raise ValidationError('Estimated cost must be greater than zero')

    def _create(code):
        procurement = ProcurementRequest(
            request_number=code,
            requested_by=data.get('requested_by') or '',
            department=data.get('department') or '',
            description=data.get('description') or '',
            estimated_cost=to_money(estimated_cost),
            priority=data.get('priority') or 'MEDIUM',
            category=data.get('category') or '',
            justification=data.get('justification') or '',
            status='PENDING',
        )
        procurement.full_clean(validate_unique=False)
        procurement.save()
        return procurement

    procurement = create_with_unique_code(next_request_number, _create)
    logger.info(
        f"Procurement request {procurement.request_number} submitted by "
        f"{procurement.requested_by} ({procurement.department})"
    )

    return ActionResult.ok(procurement, message='Procurement request created successfully')


@service_action('Failed to update procurement request')
def update_procurement_request(request_id, patch):
    """Apply a ProcurementRequestPatch (or dict) to a PENDING request"""
    if isinstance(patch, dict):
        patch = ProcurementRequestPatch.from_dict(patch)

    procurement = _get_request(request_id)
    if procurement.status != 'PENDING':
        raise ValidationError('Can only edit pending requests')

    if patch.estimated_cost is not None:
        patch.estimated_cost = to_money(patch.estimated_cost)
        if patch.estimated_cost <= 0:
            raise ValidationError('Estimated cost must be greater than zero')

    changed = procurement.apply_patch(patch)
    logger.info(f"Updated procurement request {procurement.request_number}: {changed}")

    return ActionResult.ok(procurement, message='Procurement request updated successfully')


# =============================================================================
# WORKFLOW
# =============================================================================

def _transition(procurement, status, actor=None, comments=None):
    if not procurement.can_transition_to(status):
        raise ValidationError(
            f"Cannot change request from {procurement.get_status_display()} "
            f"to {dict(ProcurementRequest.STATUS_CHOICES)[status]}"
        )

    previous = procurement.status
    procurement.status = status
    update_fields = ['status']

    if status in ('APPROVED', 'REJECTED'):
        procurement.approved_by = actor or ''
        procurement.approved_at = timezone.now()
        procurement.approval_comments = comments or ''
        update_fields += ['approved_by', 'approved_at', 'approval_comments']

    procurement.save(update_fields=update_fields)
    logger.info(f"Procurement request {procurement.request_number}: {previous} -> {status}")
    return procurement


@service_action('Failed to approve procurement request')
def approve_procurement_request(request_id, approved_by, comments=None):
    procurement = _transition(_get_request(request_id), 'APPROVED', approved_by, comments)
    return ActionResult.ok(procurement, message='Procurement request approved successfully')


@service_action('Failed to reject procurement request')
def reject_procurement_request(request_id, rejected_by, comments=None):
    procurement = _transition(_get_request(request_id), 'REJECTED', rejected_by, comments)
    return ActionResult.ok(procurement, message='Procurement request rejected')


@service_action('Failed to complete procurement request')
def complete_procurement_request(request_id):
    procurement = _transition(_get_request(request_id), 'COMPLETED')
    return ActionResult.ok(procurement, message='Procurement request marked as completed')


@service_action('Failed to update procurement status')
def update_procurement_status(request_id, status, actor=None, comments=None):
    """Generic status move, validated against STATUS_TRANSITIONS"""
    if status not in dict(ProcurementRequest.STATUS_CHOICES):
        raise ValidationError(f"Invalid status: {status}")

    procurement = _transition(_get_request(request_id), status, actor, comments)
    return ActionResult.ok(procurement, message='Procurement status updated successfully')


@service_action('Failed to delete procurement request')
def delete_procurement_request(request_id):
    procurement = _get_request(request_id)
    if procurement.status != 'PENDING':
        raise ValidationError('Can only delete pending requests')

    request_number = procurement.request_number
    procurement.delete()
    logger.info(f"Deleted procurement request {request_number}")

    return ActionResult.ok(None, message='Procurement request deleted successfully')


# =============================================================================
# QUERIES
# =============================================================================

@service_action('Failed to fetch procurement request')
def get_procurement_request(request_id):
    return _get_request(request_id)


@service_action('Failed to fetch procurement requests', empty_pagination=EMPTY_PAGINATION)
def get_procurement_requests(filters=None, page=1, limit=REQUEST_PAGE_SIZE):
    """
    List requests, newest first.

    Filters:
        status, department, priority, search (request number,
        description or requester)
    """
    filters = filters or {}
    queryset = ProcurementRequest.objects.all()

    if filters.get('status'):
        queryset = queryset.filter(status=filters['status'])
    if filters.get('department'):
        queryset = queryset.filter(department=filters['department'])
    if filters.get('priority'):
        queryset = queryset.filter(priority=filters['priority'])
    if filters.get('search'):
        term = filters['search']
        queryset = queryset.filter(
            Q(request_number__icontains=term) |
            Q(description__icontains=term) |
            Q(requested_by__icontains=term)
        )

    rows, pagination = slice_page(queryset.order_by('-created_at'), page, limit)
    return ActionResult.ok(rows, pagination=pagination)


@service_action('Failed to fetch procurement summary')
def get_procurement_summary(filters=None):
    """
    Totals across requests.

    Returns:
        dict: {
            'total': int,
            'total_value': Decimal,
            'by_status': {status: {'count', 'value'}},
            'by_department': {department: {'count', 'value'}},
        }
    """
    filters = filters or {}
    queryset = ProcurementRequest.objects.all()
    if filters.get('department'):
        queryset = queryset.filter(department=filters['department'])
    if filters.get('start_date'):
        queryset = queryset.filter(created_at__date__gte=filters['start_date'])
    if filters.get('end_date'):
        queryset = queryset.filter(created_at__date__lte=filters['end_date'])

    totals = queryset.aggregate(total=Count('id'), value=Sum('estimated_cost'))

    by_status = {
        row['status']: {'count': row['count'], 'value': to_money(row['value'])}
        for row in queryset.values('status').annotate(count=Count('id'), value=Sum('estimated_cost'))
    }
    by_department = {
        row['department']: {'count': row['count'], 'value': to_money(row['value'])}
        for row in queryset.values('department').annotate(count=Count('id'), value=Sum('estimated_cost'))
    }

    return {
        'total': totals['total'],
        'total_value': to_money(totals['value'] or Decimal('0')),
        'by_status': by_status,
        'by_department': by_department,
    }


@service_action('Failed to fetch department budget')
def get_department_procurement_budget(department, year=None):
    """
    Spending position of one department.

    Approved, in-progress and completed requests count as committed;
    pending requests are reported separately.
    """
    queryset = ProcurementRequest.objects.filter(department=department)
    if year:
        queryset = queryset.filter(created_at__year=int(year))

    def _total(statuses):
        value = queryset.filter(status__in=statuses).aggregate(value=Sum('estimated_cost'))['value']
        return to_money(value or Decimal('0'))

    return {
        'department': department,
        'committed': _total(['APPROVED', 'IN_PROGRESS', 'COMPLETED']),
        'spent': _total(['COMPLETED']),
        'pending': _total(['PENDING']),
        'request_count': queryset.count(),
    }
