# core/exceptions.py

"""
Domain exceptions shared across apps.

Services raise these; the ``service_action`` boundary in core/results.py
turns them into failed results carrying the exception message.
"""


class NotFoundError(LookupError):
    """Base class for records that a service needed but could not find"""

    default_message = "Record not found"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class StudentNotFound(NotFoundError):
    default_message = "Student not found"


class NoActiveFeeStructure(NotFoundError):
    default_message = "No active fee structure found"


class FeeStructureNotFound(NotFoundError):
    default_message = "Fee structure not found"


class PaymentNotFound(NotFoundError):
    default_message = "Payment not found"


class TutorNotFound(NotFoundError):
    default_message = "Tutor not found"


class DepartmentNotFound(NotFoundError):
    default_message = "Department not found"


class ProcurementRequestNotFound(NotFoundError):
    default_message = "Procurement request not found"
