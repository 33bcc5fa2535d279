# tests/test_commands.py

from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.results import ActionResult
from tests.conftest import ACADEMIC_YEAR, SESSION


def run(*args, **options):
    out = StringIO()
    call_command('generate_term_invoices', *args, stdout=out, **options)
    return out.getvalue()


@pytest.mark.django_db
def test_generates_invoices(make_student, fee_structure):
    make_student()
    make_student()

    output = run(academic_year=ACADEMIC_YEAR, session=SESSION, term='TERM1')

    assert 'Invoices: 2 students, 2 generated, 0 failed' in output


@pytest.mark.django_db
def test_details_lists_invoices_and_failures(make_student, make_fee_structure, school_class):
    from academics.models import Programme, SchoolClass

    make_fee_structure()
    billed = make_student()
    other_programme = Programme.objects.create(
        name='Certificate in Plumbing', code='CPL', department=school_class.department
    )
    other_class = SchoolClass.objects.create(
        name='CPL Sept 2025',
        code='CPL-S25',
        programme=other_programme,
        department=school_class.department,
        academic_year=ACADEMIC_YEAR,
        session=SESSION,
    )
    unbilled = make_student(programme=other_programme, school_class=other_class)

    output = run(academic_year=ACADEMIC_YEAR, session=SESSION, term='TERM3', details=True)

    assert f"INV/{ACADEMIC_YEAR}/{billed.admission_number}/TERM3" in output
    assert 'KES 30,000.00' in output
    assert f"{unbilled.admission_number}: No active fee structure found" in output
    assert '2 students, 1 generated, 1 failed' in output


@pytest.mark.django_db
def test_no_students():
    output = run(academic_year=ACADEMIC_YEAR, session=SESSION, term='TERM1')

    assert 'No active students matched.' in output


@pytest.mark.django_db
def test_rejects_unknown_term():
    with pytest.raises(CommandError):
        run(academic_year=ACADEMIC_YEAR, session=SESSION, term='TERM4')


@pytest.mark.django_db
def test_service_failure_raises_command_error():
    failure = ActionResult.fail('Failed to generate bulk invoices')

    with mock.patch(
        'fees.management.commands.generate_term_invoices.generate_bulk_invoices',
        return_value=failure,
    ):
        with pytest.raises(CommandError, match='Failed to generate bulk invoices'):
            run(academic_year=ACADEMIC_YEAR, session=SESSION, term='TERM1')
