# core/results.py

"""
Uniform result envelope for consumer-facing operations.

Every operation exposed to views, reports and management commands returns
an ActionResult. Serialized form:

    {
        'success': bool,
        'data': ...,                # on success
        'error': str,               # on failure
        'message': str,             # optional
        'pagination': {             # list operations only
            'total': int,
            'total_pages': int,
            'current_page': int,
        },
    }

The original exception is kept on ``cause`` for logging and tests; it is
never serialized.
"""

from functools import wraps
import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError

from core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ActionResult:
    """Outcome of a service operation"""

    def __init__(self, success, data=None, error=None, message=None,
                 pagination=None, cause=None):
        self.success = success
        self.data = data
        self.error = error
        self.message = message
        self.pagination = pagination
        self.cause = cause

    @classmethod
    def ok(cls, data=None, message=None, pagination=None):
        return cls(True, data=data, message=message, pagination=pagination)

    @classmethod
    def fail(cls, error, cause=None, pagination=None):
        return cls(False, error=error, cause=cause, pagination=pagination)

    @property
    def is_not_found(self):
        return isinstance(self.cause, NotFoundError)

    @property
    def is_invalid(self):
        return isinstance(self.cause, ValidationError)

    def to_dict(self):
        payload = {'success': self.success}
        if self.success:
            payload['data'] = self.data
        else:
            payload['error'] = self.error
        if self.message:
            payload['message'] = self.message
        if self.pagination is not None:
            payload['pagination'] = self.pagination
        return payload

    def __bool__(self):
        return self.success

    def __repr__(self):
        if self.success:
            return f"<ActionResult success data={type(self.data).__name__}>"
        return f"<ActionResult failure error={self.error!r}>"


def validation_message(exc):
    """Flatten a Django ValidationError into one user-facing string"""
    if hasattr(exc, 'message_dict'):
        parts = []
        for field, messages in exc.message_dict.items():
            label = '' if field == '__all__' else f"{field}: "
            parts.extend(f"{label}{message}" for message in messages)
        return '; '.join(parts)
    return '; '.join(exc.messages)


def service_action(failure_message, conflict_message=None, empty_pagination=None):
    """
    Decorator that makes a function a consumer-facing operation.

    The wrapped function returns its payload (or an ActionResult). Raised
    exceptions are converted:
        - NotFoundError   -> its own message
        - ValidationError -> flattened validation messages
        - IntegrityError  -> conflict_message (or failure_message)
        - anything else   -> failure_message

    Args:
        failure_message (str): Generic "Failed to ..." text
        conflict_message (str): Text for uniqueness-constraint violations
        empty_pagination (dict): Pagination to attach to failures of
            list operations

    Example:
        @service_action('Failed to fetch payment')
        def get_fee_payment(payment_id):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except NotFoundError as e:
                logger.info(f"{func.__name__}: {e}")
                return ActionResult.fail(str(e), cause=e, pagination=empty_pagination)
            except ValidationError as e:
                logger.warning(f"{func.__name__} rejected input: {e}")
                return ActionResult.fail(validation_message(e), cause=e, pagination=empty_pagination)
            except IntegrityError as e:
                logger.warning(f"{func.__name__} hit a constraint violation: {e}")
                return ActionResult.fail(
                    conflict_message or failure_message, cause=e, pagination=empty_pagination
                )
            except Exception as e:
                logger.exception(f"{func.__name__} failed")
                return ActionResult.fail(failure_message, cause=e, pagination=empty_pagination)

            if isinstance(result, ActionResult):
                return result
            return ActionResult.ok(result)
        return wrapper
    return decorator
