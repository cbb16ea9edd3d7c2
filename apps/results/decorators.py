import json
import logging
from functools import wraps

from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse

from results.exceptions import InvalidInput, ResultError

logger = logging.getLogger(__name__)

STAFF_GROUPS = ("System Admin", "Controller")
MARKS_GROUPS = ("System Admin", "Controller", "Teacher")


def json_response(data, status=200):
    return JsonResponse(data, status=status, encoder=DjangoJSONEncoder, safe=False)


def is_staff_member(user) -> bool:
    if not user.is_authenticated:
        return False
    return user.is_superuser or user.groups.filter(name__in=STAFF_GROUPS).exists()


def group_required(*group_names: str):
    """Require that the logged-in user belongs to at least one of the given groups.

    Superusers always pass. Answers with JSON instead of redirecting.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            user = request.user
            if not user.is_authenticated:
                return json_response({"status": 401, "message": "Authentication required"}, status=401)

            if user.is_superuser or not group_names:
                return view_func(request, *args, **kwargs)

            if user.groups.filter(name__in=group_names).exists():
                return view_func(request, *args, **kwargs)

            return json_response(
                {"status": 403, "message": "You do not have permission to perform this action."},
                status=403,
            )

        return _wrapped

    return decorator


def read_json(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidInput("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def api_view(view_func):
    """Turn a ResultError raised by the view into a {"status", "message"} response."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ResultError as exc:
            if exc.status >= 500:
                logger.error("%s %s failed: %s", request.method, request.path, exc.message)
            return json_response(exc.as_dict(), status=exc.status)

    return _wrapped
