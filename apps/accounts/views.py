"""
Account views: registration, session login/logout, password reset.
All endpoints speak JSON.
"""
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model, login, logout
from django.contrib.auth.tokens import default_token_generator
from django.db import transaction
from django.http import JsonResponse
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from django.views.decorators.http import require_POST

from apps.core.http import request_data
from apps.notifications.apps import get_notifier
from apps.notifications.emails import send_password_reset_email, send_welcome_email

from .forms import PasswordResetConfirmForm, RegistrationForm
from .models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()


def _user_payload(user):
    profile = getattr(user, 'profile', None)
    return {
        'id': user.pk,
        'username': user.get_username(),
        'email': user.email,
        'fullName': user.get_full_name(),
        'role': profile.role if profile else None,
        'phone': profile.phone if profile else '',
    }


@require_POST
def register(request):
    form = RegistrationForm(request_data(request))
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    data = form.cleaned_data
    with transaction.atomic():
        user = User.objects.create_user(
            username=data['username'],
            email=data['email'],
            password=data['password'],
            first_name=data['full_name'],
        )
        Profile.objects.create(user=user, role=data['role'], phone=data['phone'])

    try:
        send_welcome_email(get_notifier(), user.email, user.first_name or user.username, data['role'])
    except Exception as exc:
        # Registration stands even when the mail server is down
        logger.exception('Welcome email failed for %s: %s', user.email, exc)

    logger.info('Registered %s as %s', user.username, data['role'])
    return JsonResponse(_user_payload(user), status=201)


@require_POST
def login_view(request):
    data = request_data(request)
    user = authenticate(
        request,
        username=(data.get('username') or '').strip(),
        password=data.get('password') or '',
    )
    if user is None:
        return JsonResponse({'message': 'Invalid username or password'}, status=400)

    login(request, user)
    return JsonResponse(_user_payload(user))


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({'message': 'Logged out'})


@require_POST
def password_reset_request(request):
    """
    Email a reset link if the address belongs to an active user.
    The response is the same either way so addresses cannot be probed.
    """
    email = (request_data(request).get('email') or '').strip()
    user = User.objects.filter(email__iexact=email, is_active=True).first() if email else None

    if user is not None:
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        reset_url = f"{settings.FRONTEND_URL}/reset-password/{uid}/{token}"
        try:
            send_password_reset_email(get_notifier(), user.email,
                                      user.get_full_name() or user.username, reset_url)
        except Exception as exc:
            logger.exception('Password reset email failed for %s: %s', user.email, exc)

    return JsonResponse({'message': 'If the email is registered, a reset link has been sent'})


@require_POST
def password_reset_confirm(request):
    form = PasswordResetConfirmForm(request_data(request))
    if not form.is_valid():
        return JsonResponse({'errors': form.errors}, status=400)

    try:
        user = User.objects.get(pk=force_str(urlsafe_base64_decode(form.cleaned_data['uid'])))
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    if user is None or not default_token_generator.check_token(user, form.cleaned_data['token']):
        return JsonResponse({'message': 'Reset link is invalid or has expired'}, status=400)

    user.set_password(form.cleaned_data['new_password'])
    user.save(update_fields=['password'])
    logger.info('Password reset for %s', user.username)
    return JsonResponse({'message': 'Password has been reset'})
