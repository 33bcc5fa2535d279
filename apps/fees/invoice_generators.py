# fees/invoice_generators.py

"""
Term invoice generation for college fees.

Invoices are derived on demand from a programme's FeeStructure and the
student's COMPLETED payments. Nothing is persisted.

The term amount is a third of the session fee. Payments are summed across
the whole session (not the term), so a student who paid the full session
up front shows a negative balance on each term invoice.
"""

from decimal import Decimal
from datetime import timedelta
import logging

from django.core.exceptions import ValidationError
from django.db.models import Sum

from core.exceptions import StudentNotFound, NoActiveFeeStructure
from core.utils import divide_money, get_today, to_money
from fees.models import FeeStructure, FeePayment, TERM_CHOICES, TERMS_PER_SESSION
from students.models import Student

logger = logging.getLogger(__name__)

INVOICE_DUE_DAYS = 30

# Optional voteheads in invoice order: (FeeStructure field, line description)
OPTIONAL_VOTEHEADS = (
    ('exam_fee', 'Examination Fee'),
    ('library_fee', 'Library Fee'),
    ('activity_fee', 'Activity Fee'),
)


def get_invoice_number(academic_year, admission_number, term):
    """'INV/2025/2026/KTYC/S/7/25/TERM1'"""
    return f"INV/{academic_year}/{admission_number}/{term}"


# =============================================================================
# INVOICE
# =============================================================================

class InvoiceItem:
    """One votehead line"""

    def __init__(self, votehead, amount):
        self.votehead = votehead
        self.amount = amount

    def as_dict(self):
        return {'votehead': self.votehead, 'amount': self.amount}

    def __repr__(self):
        return f"<InvoiceItem {self.votehead} {self.amount}>"


class Invoice:
    """A student's bill for one term"""

    def __init__(self, invoice_number, student, academic_year, session, term,
                 items, subtotal, total_paid, invoice_date, due_date):
        self.invoice_number = invoice_number
        self.student = student
        self.academic_year = academic_year
        self.session = session
        self.term = term
        self.items = items
        self.subtotal = subtotal
        self.total_paid = total_paid
        self.invoice_date = invoice_date
        self.due_date = due_date

    @property
    def balance(self):
        return self.subtotal - self.total_paid

    @property
    def is_settled(self):
        return self.balance <= 0

    def get_student_details(self):
        student = self.student
        return {
            'id': str(student.pk),
            'name': student.invoice_name,
            'admission_number': student.admission_number,
            'programme': student.programme.name,
            'department': student.department.name,
            'class': student.school_class.name if student.school_class else None,
            'email': student.email,
            'phone': student.phone_number,
        }

    def as_dict(self):
        return {
            'invoice_number': self.invoice_number,
            'student': self.get_student_details(),
            'academic_year': self.academic_year,
            'session': self.session,
            'term': self.term,
            'items': [item.as_dict() for item in self.items],
            'subtotal': self.subtotal,
            'total_paid': self.total_paid,
            'balance': self.balance,
            'invoice_date': self.invoice_date,
            'due_date': self.due_date,
        }

    def __repr__(self):
        return f"<Invoice {self.invoice_number} balance={self.balance}>"


# =============================================================================
# FEE LEDGER ENGINE
# =============================================================================

class FeeLedgerEngine:
    """Builds term invoices and payment summaries"""

    @staticmethod
    def get_active_fee_structure(programme_id, academic_year, session):
        """
        Active structure for a programme in a session.

        More than one active structure is not prevented; the most recently
        updated wins.

        Raises:
            NoActiveFeeStructure
        """
        fee_structure = (
            FeeStructure.objects
            .filter(
                programme_id=programme_id,
                academic_year=academic_year,
                session=session,
                is_active=True,
            )
            .order_by('-updated_at')
            .first()
        )
        if fee_structure is None:
            raise NoActiveFeeStructure()
        return fee_structure

    @staticmethod
    def get_total_paid(student, academic_year, session):
        """Sum of COMPLETED payments for the whole session"""
        total = FeePayment.objects.filter(
            student=student,
            academic_year=academic_year,
            session=session,
            status='COMPLETED',
        ).aggregate(total=Sum('amount_paid'))['total']
        return to_money(total or Decimal('0'))

    @staticmethod
    def build_items(fee_structure):
        """
        Per-term voteheads. Tuition is always billed; the optional
        voteheads only when set and non-zero.
        """
        items = [InvoiceItem('Tuition Fees', divide_money(fee_structure.tuition_fee, TERMS_PER_SESSION))]

        for field, description in OPTIONAL_VOTEHEADS:
            amount = getattr(fee_structure, field)
            if amount:
                items.append(InvoiceItem(description, divide_money(amount, TERMS_PER_SESSION)))

        return items

    @staticmethod
    def build_invoice(student_id, academic_year, session, term, invoice_date=None):
        """
        Build a student's invoice for one term.

        Args:
            student_id: Student primary key
            academic_year (str): e.g. '2025/2026'
            session (str): SEPT_DEC | JAN_APRIL | MAY_AUGUST
            term (str): TERM1 | TERM2 | TERM3
            invoice_date (date): Defaults to today

        Returns:
            Invoice

        Raises:
            ValidationError: Unknown term
            StudentNotFound
            NoActiveFeeStructure
        """
        if term not in dict(TERM_CHOICES):
            raise ValidationError(f"Invalid term: {term}")

        try:
            student = Student.objects.select_related(
                'programme', 'department', 'school_class'
            ).get(pk=student_id)
        except (Student.DoesNotExist, ValidationError, ValueError):
            raise StudentNotFound()

        fee_structure = FeeLedgerEngine.get_active_fee_structure(
            student.programme_id, academic_year, session
        )

        if not fee_structure.components_match_total:
            logger.warning(
                f"Fee structure {fee_structure.pk}: voteheads sum to "
                f"{fee_structure.component_total}, total_fee is {fee_structure.total_fee}"
            )

        subtotal = divide_money(fee_structure.total_fee, TERMS_PER_SESSION)
        total_paid = FeeLedgerEngine.get_total_paid(student, academic_year, session)
        invoice_date = invoice_date or get_today()

        return Invoice(
            invoice_number=get_invoice_number(academic_year, student.admission_number, term),
            student=student,
            academic_year=academic_year,
            session=session,
            term=term,
            items=FeeLedgerEngine.build_items(fee_structure),
            subtotal=subtotal,
            total_paid=total_paid,
            invoice_date=invoice_date,
            due_date=invoice_date + timedelta(days=INVOICE_DUE_DAYS),
        )

    @staticmethod
    def build_bulk_invoices(academic_year, session, term, class_id=None,
                            programme_id=None, department_id=None, invoice_date=None):
        """
        Invoice every ACTIVE student matching the filters.

        A failure for one student is recorded and the batch continues.

        Returns:
            dict: {
                'total': int,
                'successful': int,
                'failed': int,
                'invoices': [Invoice],
                'failures': [{'student_id', 'admission_number', 'error'}],
            }
        """
        if term not in dict(TERM_CHOICES):
            raise ValidationError(f"Invalid term: {term}")

        students = Student.objects.filter(
            academic_year=academic_year,
            session=session,
            academic_status='ACTIVE',
        )
        if class_id:
            students = students.filter(school_class_id=class_id)
        if programme_id:
            students = students.filter(programme_id=programme_id)
        if department_id:
            students = students.filter(department_id=department_id)

        invoices = []
        failures = []

        for student in students.order_by('admission_number'):
            try:
                invoices.append(FeeLedgerEngine.build_invoice(
                    student.pk, academic_year, session, term, invoice_date=invoice_date
                ))
            except Exception as e:
                if isinstance(e, (StudentNotFound, NoActiveFeeStructure, ValidationError)):
                    logger.info(f"Skipped invoice for {student.admission_number}: {e}")
                else:
                    logger.exception(f"Invoice generation failed for {student.admission_number}")
                failures.append({
                    'student_id': str(student.pk),
                    'admission_number': student.admission_number,
                    'error': str(e),
                })

        logger.info(
            f"Bulk invoicing {academic_year} {session} {term}: "
            f"{len(invoices)} generated, {len(failures)} failed"
        )

        return {
            'total': len(invoices) + len(failures),
            'successful': len(invoices),
            'failed': len(failures),
            'invoices': invoices,
            'failures': failures,
        }

    @staticmethod
    def build_invoice_history(student_id, invoice_date=None):
        """
        All three term invoices for the student's own year and session.
        Terms that cannot be invoiced are left out.
        """
        try:
            student = Student.objects.get(pk=student_id)
        except (Student.DoesNotExist, ValidationError, ValueError):
            raise StudentNotFound()

        invoices = []
        for term, _label in TERM_CHOICES:
            try:
                invoices.append(FeeLedgerEngine.build_invoice(
                    student.pk, student.academic_year, student.session, term,
                    invoice_date=invoice_date
                ))
            except NoActiveFeeStructure:
                logger.info(f"No fee structure for {student.admission_number} {term}")

        return invoices

    @staticmethod
    def build_payment_summary(payments):
        """
        Reduce payments to totals.

        Args:
            payments: iterable of FeePayment with student, programme and
                department loaded

        Returns:
            dict: {
                'total_payments': int,
                'total_amount': Decimal,
                'by_method': {method: {'count', 'amount'}},
                'by_programme': {programme name: {'count', 'amount'}},
                'by_department': {department name: {'count', 'amount'}},
            }
        """
        summary = {
            'total_payments': 0,
            'total_amount': Decimal('0.00'),
            'by_method': {},
            'by_programme': {},
            'by_department': {},
        }

        def _add(bucket, key, amount):
            entry = bucket.setdefault(key, {'count': 0, 'amount': Decimal('0.00')})
            entry['count'] += 1
            entry['amount'] += amount

        for payment in payments:
            amount = to_money(payment.amount_paid)
            summary['total_payments'] += 1
            summary['total_amount'] += amount
            _add(summary['by_method'], payment.payment_method, amount)
            _add(summary['by_programme'], payment.student.programme.name, amount)
            _add(summary['by_department'], payment.student.department.name, amount)

        return summary
