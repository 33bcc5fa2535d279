# management/commands/generate_term_invoices.py

"""
Generate term invoices for all ACTIVE students in a session.

USAGE EXAMPLES:
===============

# 1. Every active student in the session
python manage.py generate_term_invoices --academic-year 2025/2026 --session SEPT_DEC --term TERM1

# 2. One class only
python manage.py generate_term_invoices --academic-year 2025/2026 --session SEPT_DEC --term TERM2 --class <uuid>

# 3. List each invoice and failure
python manage.py generate_term_invoices --academic-year 2025/2026 --session SEPT_DEC --term TERM1 --details
"""

from django.core.management.base import BaseCommand, CommandError
import logging

from academics.models import SESSION_CHOICES
from core.utils import format_money
from fees.models import TERM_CHOICES
from fees.services import generate_bulk_invoices

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Generate term invoices for active students'

    def add_arguments(self, parser):
        parser.add_argument('--academic-year', required=True, help='e.g. 2025/2026')
        parser.add_argument(
            '--session', required=True, choices=[code for code, _ in SESSION_CHOICES]
        )
        parser.add_argument(
            '--term', required=True, choices=[code for code, _ in TERM_CHOICES]
        )
        parser.add_argument('--class', dest='class_id', default=None, help='Class ID')
        parser.add_argument('--programme', dest='programme_id', default=None, help='Programme ID')
        parser.add_argument('--department', dest='department_id', default=None, help='Department ID')
        parser.add_argument(
            '--details', action='store_true',
            help='Print every invoice and failure'
        )

    def handle(self, *args, **options):
        result = generate_bulk_invoices({
            'academic_year': options['academic_year'],
            'session': options['session'],
            'term': options['term'],
            'class_id': options['class_id'],
            'programme_id': options['programme_id'],
            'department_id': options['department_id'],
        })

        if not result:
            raise CommandError(result.error)

        summary = result.data

        if options['details']:
            for invoice in summary['invoices']:
                self.stdout.write(
                    f"  {invoice.invoice_number}  {format_money(invoice.subtotal)}  "
                    f"balance {format_money(invoice.balance)}"
                )
            for failure in summary['failures']:
                self.stdout.write(self.style.WARNING(
                    f"  {failure['admission_number']}: {failure['error']}"
                ))

        if summary['total'] == 0:
            self.stdout.write(self.style.WARNING('No active students matched.'))
            return

        self.stdout.write(self.style.SUCCESS(
            f"Invoices: {summary['total']} students, "
            f"{summary['successful']} generated, {summary['failed']} failed"
        ))
