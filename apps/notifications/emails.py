"""
Email notification service for the Boarding House system.

EmailNotifier is built once at startup (NotificationsConfig.ready) and handed
to callers explicitly; nothing here holds a module-level connection.

Public API:
  EmailNotifier.send(to, subject, text, html=None, ...)
  send_welcome_email(notifier, to, name, role)
  send_password_reset_email(notifier, to, name, reset_url)
  send_payment_confirmation(notifier, payment)
"""
import logging
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from apps.accounts.models import Role

logger = logging.getLogger(__name__)


def _as_list(value):
    if not value:
        return []
    if isinstance(value, str):
        return [addr.strip() for addr in value.split(',') if addr.strip()]
    return list(value)


class EmailNotifier:
    """
    Thin wrapper over Django's mail backend.

    `connection` is any Django email backend instance; when None a new
    connection is opened per message from EMAIL_BACKEND.
    """

    def __init__(self, from_email: str, connection=None):
        self.from_email = from_email
        self.connection = connection

    @classmethod
    def from_settings(cls):
        sender = f"{settings.EMAIL_FROM_NAME} <{settings.DEFAULT_FROM_EMAIL}>"
        return cls(from_email=sender)

    def send(self, to, subject: str, text: str, html: str = None, from_email: str = None,
             cc=None, bcc=None, attachments=None) -> int:
        """
        Send one multipart message. `to`, `cc` and `bcc` accept a list or a
        comma-separated string. `attachments` is a list of
        (filename, content, mimetype) tuples. Errors propagate.
        """
        msg = EmailMultiAlternatives(
            subject=subject,
            body=text,
            from_email=from_email or self.from_email,
            to=_as_list(to),
            cc=_as_list(cc),
            bcc=_as_list(bcc),
            connection=self.connection,
        )
        if html:
            msg.attach_alternative(html, 'text/html')
        for filename, content, mimetype in attachments or []:
            msg.attach(filename, content, mimetype)

        sent = msg.send(fail_silently=False)
        logger.info('Email "%s" sent to %s', subject, ', '.join(msg.to))
        return sent

    def send_template(self, to, subject: str, template: str, context: dict, **kwargs) -> int:
        """Render `<template>.txt` and `<template>.html` and send both parts."""
        text_body = render_to_string(f'{template}.txt', context)
        html_body = render_to_string(f'{template}.html', context)
        return self.send(to, subject, text_body, html_body, **kwargs)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def send_welcome_email(notifier: EmailNotifier, to: str, name: str, role: str) -> int:
    """Triggered: successful registration."""
    role_text = 'chủ trọ' if role == Role.OWNER else 'người thuê trọ'
    return notifier.send_template(
        to,
        subject=f'Chào mừng bạn đến với {settings.EMAIL_FROM_NAME}',
        template='emails/welcome',
        context={'name': name, 'role_text': role_text, 'site_name': settings.EMAIL_FROM_NAME},
    )


def send_password_reset_email(notifier: EmailNotifier, to: str, name: str, reset_url: str) -> int:
    """Triggered: password reset request. The link expires with PASSWORD_RESET_TIMEOUT."""
    return notifier.send_template(
        to,
        subject='Đặt lại mật khẩu của bạn',
        template='emails/password_reset',
        context={
            'name': name,
            'reset_url': reset_url,
            'expires_minutes': settings.PASSWORD_RESET_TIMEOUT // 60,
            'site_name': settings.EMAIL_FROM_NAME,
        },
    )


def send_payment_confirmation(notifier: EmailNotifier, payment) -> int:
    """
    Triggered: a payment has just moved to Completed.
    Skipped (returns 0) when the payer has no email address.
    """
    user = payment.user
    if not user.email:
        logger.warning('Payment email skipped: no address for user %s (txn %s)',
                       user.pk, payment.transaction_code)
        return 0

    bill = payment.bill
    return notifier.send_template(
        user.email,
        subject=f'Thanh toán thành công - {payment.transaction_code}',
        template='emails/payment_completed',
        context={
            'name': user.get_full_name() or user.get_username(),
            'transaction_code': payment.transaction_code,
            'amount': payment.total_amount,
            'payment_date': payment.payment_date,
            'room_number': bill.room.room_number,
            'billing_month': bill.billing_month,
            'site_name': settings.EMAIL_FROM_NAME,
        },
    )
