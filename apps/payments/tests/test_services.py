"""
tests for apps/payments/services.py: checkout, return verification, querydr reconciliation.
"""
import re
import uuid
from datetime import date
from unittest import mock
from urllib.parse import parse_qsl, urlparse

import pytest
import requests
from django.conf import settings

from apps.payments import services, vnpay
from apps.payments.exceptions import (
    BillNotFoundError,
    CheckoutError,
    InvalidAmountError,
    PaymentValidationError,
)
from apps.payments.models import Payment, PaymentStatus, PaymentStatusLog
from apps.rooms.models import Contract, Room

pytestmark = pytest.mark.django_db


def _url_params(url):
    return dict(parse_qsl(urlparse(url).query))


class TestCreateVnpayPayment:
    def test_amount_is_sent_times_100(self, bill, tenant, contract):
        result = services.create_vnpay_payment(bill.pk, tenant.pk, contract.pk, 1_800_000, '10.0.0.7')
        assert _url_params(result.payment_url)['vnp_Amount'] == '180000000'

    def test_creates_pending_payment_for_returned_code(self, bill, tenant, contract):
        result = services.create_vnpay_payment(bill.pk, tenant.pk, contract.pk, 1_800_000, '10.0.0.7')

        payment = Payment.objects.get(transaction_code=result.transaction_code)
        assert payment.pk == result.payment.pk
        assert payment.status == PaymentStatus.PENDING
        assert payment.total_amount == 1_800_000
        assert payment.payment_method == 'Online Payment'
        assert payment.payment_date is None
        assert payment.contract_id == contract.pk

    def test_url_params_are_signed(self, bill, tenant):
        result = services.create_vnpay_payment(bill.pk, tenant.pk, None, 1_800_000, '10.0.0.7')
        params = _url_params(result.payment_url)

        data = vnpay.verify(params, settings.VNP_HASH_SECRET)
        assert data['vnp_Command'] == 'pay'
        assert data['vnp_TmnCode'] == settings.VNP_TMN_CODE
        assert data['vnp_TxnRef'] == result.transaction_code
        assert data['vnp_IpAddr'] == '10.0.0.7'
        assert data['vnp_ReturnUrl'] == settings.VNP_RETURN_URL
        assert data['vnp_OrderInfo'] == 'Thanh toan hoa don tien phong P101'
        assert re.fullmatch(r'\d{14}', data['vnp_CreateDate'])

    def test_transaction_code_format_and_uniqueness(self, bill, tenant):
        codes = {
            services.create_vnpay_payment(bill.pk, tenant.pk, None, 500_000, '10.0.0.7').transaction_code
            for _ in range(5)
        }
        assert len(codes) == 5
        for code in codes:
            assert re.fullmatch(r'VNP\d{14}[0-9a-f]{8}', code)

    def test_defaults_to_bill_total(self, bill, tenant):
        result = services.create_vnpay_payment(bill.pk, tenant.pk, None, None, '10.0.0.7')
        assert result.payment.total_amount == bill.total_amount

    def test_decimal_string_amount(self, bill, tenant):
        result = services.create_vnpay_payment(bill.pk, tenant.pk, None, '1800000.00', '10.0.0.7')
        assert result.payment.total_amount == 1_800_000

    def test_unknown_bill(self, tenant):
        with pytest.raises(BillNotFoundError):
            services.create_vnpay_payment(uuid.uuid4(), tenant.pk, None, 1000, '10.0.0.7')
        assert not Payment.objects.exists()

    def test_malformed_bill_id(self, tenant):
        with pytest.raises(BillNotFoundError):
            services.create_vnpay_payment('not-a-uuid', tenant.pk, None, 1000, '10.0.0.7')

    @pytest.mark.parametrize('amount', [0, -1000, '12.5', 'abc', 'NaN', 10 ** 20, services.MAX_AMOUNT_VND + 1])
    def test_invalid_amount(self, bill, tenant, amount):
        with pytest.raises(InvalidAmountError):
            services.create_vnpay_payment(bill.pk, tenant.pk, None, amount, '10.0.0.7')
        assert not Payment.objects.exists()

    def test_unknown_contract(self, bill, tenant):
        with pytest.raises(PaymentValidationError):
            services.create_vnpay_payment(bill.pk, tenant.pk, uuid.uuid4(), 1000, '10.0.0.7')

    def test_malformed_contract_id(self, bill, tenant):
        with pytest.raises(PaymentValidationError):
            services.create_vnpay_payment(bill.pk, tenant.pk, 'abc', 1000, '10.0.0.7')
        assert not Payment.objects.exists()

    def test_contract_for_another_room(self, bill, tenant, owner, boarding_house):
        other_room = Room.objects.create(
            boarding_house=boarding_house, landlord=owner, room_number='P102', price=2_000_000,
        )
        other_contract = Contract.objects.create(
            room=other_room, tenant=tenant, start_date=date(2026, 1, 1), monthly_rent=2_000_000,
        )
        with pytest.raises(PaymentValidationError, match='does not cover'):
            services.create_vnpay_payment(bill.pk, tenant.pk, other_contract.pk, 1000, '10.0.0.7')
        assert not Payment.objects.exists()

    def test_bill_of_another_tenant(self, bill, owner):
        with pytest.raises(BillNotFoundError):
            services.create_vnpay_payment(bill.pk, owner.pk, None, 1000, '10.0.0.7')
        assert not Payment.objects.exists()

    def test_largest_amount_is_accepted(self, bill, tenant):
        result = services.create_vnpay_payment(
            bill.pk, tenant.pk, None, services.MAX_AMOUNT_VND, '10.0.0.7',
        )
        assert int(_url_params(result.payment_url)['vnp_Amount']) == services.MAX_AMOUNT_VND * 100
        assert int(_url_params(result.payment_url)['vnp_Amount']) < 2 ** 63

    def test_missing_merchant_code_leaves_no_payment(self, bill, tenant, settings):
        settings.VNP_TMN_CODE = ''

        with pytest.raises(CheckoutError, match='tmn_code'):
            services.create_vnpay_payment(bill.pk, tenant.pk, None, 1000, '10.0.0.7')
        assert not Payment.objects.exists()


class TestProcessVnpayReturn:
    def test_success_completes_pending_payment(self, pending_payment, signed_return):
        result = services.process_vnpay_return(signed_return(pending_payment, '00'))

        pending_payment.refresh_from_db()
        assert result.code == '00'
        assert result.message == 'Transaction successful'
        assert result.payment_id == pending_payment.pk
        assert result.completed_now
        assert pending_payment.status == PaymentStatus.COMPLETED
        assert pending_payment.payment_date is not None

    def test_user_cancelled_fails_payment(self, pending_payment, signed_return):
        result = services.process_vnpay_return(signed_return(pending_payment, '24'))

        pending_payment.refresh_from_db()
        assert result.code == '24'
        assert result.message == 'Transaction failed'
        assert result.payment_id == pending_payment.pk
        assert pending_payment.status == PaymentStatus.FAILED
        assert pending_payment.payment_date is None

    def test_tampered_signature_touches_nothing(self, pending_payment, signed_return):
        params = signed_return(pending_payment, '00')
        params['vnp_SecureHash'] = params['vnp_SecureHash'][:-1] + (
            'a' if params['vnp_SecureHash'][-1] != 'a' else 'b'
        )
        before = Payment.objects.get(pk=pending_payment.pk).updated_at

        result = services.process_vnpay_return(params)

        pending_payment.refresh_from_db()
        assert result.code == '97'
        assert result.message == 'Invalid signature'
        assert result.payment_id is None
        assert pending_payment.status == PaymentStatus.PENDING
        assert pending_payment.updated_at == before
        assert not PaymentStatusLog.objects.exists()

    def test_unknown_transaction(self, pending_payment, signed_return):
        pending_payment.transaction_code = 'VNP00000000000000deadbeef'
        result = services.process_vnpay_return(signed_return(pending_payment, '00'))
        assert result.code == '01'
        assert result.message == 'Transaction not found'

    def test_replay_is_idempotent(self, pending_payment, signed_return):
        params = signed_return(pending_payment, '00')
        first = services.process_vnpay_return(dict(params))
        pending_payment.refresh_from_db()
        paid_at = pending_payment.payment_date

        second = services.process_vnpay_return(dict(params))
        pending_payment.refresh_from_db()

        assert first.code == second.code == '00'
        assert second.message == 'Transaction already processed'
        assert not second.completed_now
        assert pending_payment.payment_date == paid_at
        assert pending_payment.status_logs.count() == 1

    def test_failure_after_completion_does_not_downgrade(self, pending_payment, signed_return):
        services.process_vnpay_return(signed_return(pending_payment, '00'))
        result = services.process_vnpay_return(signed_return(pending_payment, '24'))

        pending_payment.refresh_from_db()
        assert result.code == '00'
        assert pending_payment.status == PaymentStatus.COMPLETED

    def test_does_not_mutate_caller_params(self, pending_payment, signed_return):
        params = signed_return(pending_payment, '00')
        services.process_vnpay_return(params)
        assert 'vnp_SecureHash' in params

    def test_transition_is_logged(self, pending_payment, signed_return):
        services.process_vnpay_return(signed_return(pending_payment, '24'))
        log = PaymentStatusLog.objects.get(payment=pending_payment)
        assert (log.from_status, log.to_status) == (PaymentStatus.PENDING, PaymentStatus.FAILED)
        assert log.source == 'return'
        assert log.response_code == '24'


class TestCheckVnpayTransaction:
    def test_unknown_code_makes_no_call_and_no_record(self, db):
        with mock.patch('apps.payments.vnpay.requests.post') as post:
            result = services.check_vnpay_transaction('VNP00000000000000deadbeef')

        assert result.code == '01'
        assert result.message == 'Transaction not found'
        post.assert_not_called()
        assert not Payment.objects.exists()

    def test_remote_success_completes_pending(self, pending_payment, gateway_response):
        gateway_response('00', 'Giao dich thanh cong')
        result = services.check_vnpay_transaction(pending_payment.transaction_code)

        pending_payment.refresh_from_db()
        assert result.code == '00'
        assert result.message == 'Giao dich thanh cong'
        assert result.payment_id == pending_payment.pk
        assert result.completed_now
        assert pending_payment.status == PaymentStatus.COMPLETED
        assert pending_payment.payment_date is not None

    def test_remote_success_recovers_failed(self, make_payment, gateway_response):
        payment = make_payment(status=PaymentStatus.FAILED)
        gateway_response('00')
        services.check_vnpay_transaction(payment.transaction_code)

        payment.refresh_from_db()
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.payment_date is not None

    def test_remote_failure_fails_pending(self, pending_payment, gateway_response):
        gateway_response('91', 'Khong tim thay giao dich')
        result = services.check_vnpay_transaction(pending_payment.transaction_code)

        pending_payment.refresh_from_db()
        assert result.code == '91'
        assert result.message == 'Khong tim thay giao dich'
        assert pending_payment.status == PaymentStatus.FAILED

    def test_completed_is_never_downgraded(self, pending_payment, signed_return, gateway_response):
        services.process_vnpay_return(signed_return(pending_payment, '00'))
        pending_payment.refresh_from_db()
        paid_at = pending_payment.payment_date

        gateway_response('91', 'Khong tim thay giao dich')
        result = services.check_vnpay_transaction(pending_payment.transaction_code)

        pending_payment.refresh_from_db()
        assert result.code == '91'
        assert pending_payment.status == PaymentStatus.COMPLETED
        assert pending_payment.payment_date == paid_at

    def test_network_error_leaves_payment_untouched(self, pending_payment):
        with mock.patch('apps.payments.vnpay.requests.post',
                        side_effect=requests.Timeout('slow')):
            result = services.check_vnpay_transaction(pending_payment.transaction_code)

        pending_payment.refresh_from_db()
        assert result.code == '99'
        assert result.message == 'System error'
        assert pending_payment.status == PaymentStatus.PENDING
        assert not PaymentStatusLog.objects.exists()

    def test_http_error_leaves_payment_untouched(self, pending_payment):
        with mock.patch('apps.payments.vnpay.requests.post') as post:
            post.return_value.raise_for_status.side_effect = requests.HTTPError('502')
            result = services.check_vnpay_transaction(pending_payment.transaction_code)

        pending_payment.refresh_from_db()
        assert result.code == '99'
        assert pending_payment.status == PaymentStatus.PENDING

    def test_query_is_signed_querydr(self, pending_payment, gateway_response):
        post = gateway_response('00')
        services.check_vnpay_transaction(pending_payment.transaction_code)

        body = post.call_args.kwargs['data']
        data = vnpay.verify(body, settings.VNP_HASH_SECRET)
        assert data['vnp_Command'] == 'querydr'
        assert data['vnp_TxnRef'] == pending_payment.transaction_code
        assert data['vnp_OrderInfo'] == f'Kiem tra giao dich {pending_payment.transaction_code}'
