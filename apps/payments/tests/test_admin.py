import re

import pytest
from django.urls import reverse

from apps.payments.models import Payment, PaymentMethod, PaymentStatus, PaymentStatusLog

pytestmark = pytest.mark.django_db


def test_payment_without_code_gets_one(bill, tenant):
    payment = Payment.objects.create(
        bill=bill, user=tenant, total_amount=500_000, payment_method=PaymentMethod.CASH,
    )
    assert re.fullmatch(r'VNP\d{14}[0-9a-f]{8}', payment.transaction_code)


def test_cash_received_action_completes_and_logs(admin_client, pending_payment, make_payment):
    done = make_payment(status=PaymentStatus.COMPLETED)

    response = admin_client.post(reverse('admin:payments_payment_changelist'), {
        'action': 'mark_cash_received',
        '_selected_action': [str(pending_payment.pk), str(done.pk)],
    })

    assert response.status_code == 302
    pending_payment.refresh_from_db()
    assert pending_payment.status == PaymentStatus.COMPLETED
    assert pending_payment.payment_date is not None

    log = PaymentStatusLog.objects.get(payment=pending_payment)
    assert log.source == 'admin'
    assert not PaymentStatusLog.objects.filter(payment=done).exists()


def test_add_form_defaults_to_cash(admin_client):
    response = admin_client.get(reverse('admin:payments_payment_add'))
    assert response.status_code == 200
    assert response.context['adminform'].form.initial['payment_method'] == PaymentMethod.CASH
