"""
API authentication decorators.

The React front end talks JSON, so unauthenticated or unauthorised calls get
a JSON 401/403 instead of a redirect to a login page.
"""
from functools import wraps
from django.http import JsonResponse

from .models import is_owner


def login_required_json(view_func):
    """Require an authenticated session."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'message': 'Authentication required'}, status=401)
        return view_func(request, *args, **kwargs)
    return wrapper


def owner_required(view_func):
    """Require an authenticated user with the Owner role."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'message': 'Authentication required'}, status=401)
        if not is_owner(request.user):
            return JsonResponse({'message': 'Owner access required'}, status=403)
        return view_func(request, *args, **kwargs)
    return wrapper
