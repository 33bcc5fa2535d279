# core/responses.py

"""
JSON helpers for ajax views.
"""

from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse
import json
import logging

logger = logging.getLogger(__name__)


class InvalidRequestBody(ValueError):
    pass


def parse_json_body(request):
    """
    Decode a JSON object request body.

    Raises:
        InvalidRequestBody: Body is not a JSON object
    """
    try:
        data = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidRequestBody("Invalid JSON data.")
    if not isinstance(data, dict):
        raise InvalidRequestBody("Expected a JSON object.")
    return data


def get_status_code(result):
    if result.success:
        return 200
    if result.is_not_found:
        return 404
    if result.is_invalid:
        return 400
    return 500


def result_response(result, serialize=None):
    """
    Render an ActionResult as JsonResponse.

    Args:
        result: ActionResult
        serialize: callable applied to ``result.data`` on success. Lists
            are serialized item by item.

    Status codes: 200 success, 400 invalid input, 404 missing record,
    500 anything else.
    """
    payload = result.to_dict()
    if result.success and serialize is not None and result.data is not None:
        if isinstance(result.data, list):
            payload['data'] = [serialize(item) for item in result.data]
        else:
            payload['data'] = serialize(result.data)

    return JsonResponse(payload, status=get_status_code(result), encoder=DjangoJSONEncoder)


def error_response(message, status=400):
    return JsonResponse({'success': False, 'error': message}, status=status)
