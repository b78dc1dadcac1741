"""
Shared pytest fixtures: accounts, a boarding house with one rented room,
a bill for that room, and helpers for gateway-signed parameters.
"""
from datetime import date
from unittest import mock

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model

from apps.accounts.models import Profile, Role
from apps.bills.models import Bill
from apps.payments import vnpay
from apps.payments.models import Payment, PaymentStatus, generate_transaction_code
from apps.rooms.models import BoardingHouse, Contract, Room

User = get_user_model()


def _make_user(username, role, email=None):
    user = User.objects.create_user(
        username=username,
        email=email if email is not None else f'{username}@example.com',
        password='s3cret-pass-123',
        first_name=username.title(),
    )
    Profile.objects.create(user=user, role=role)
    return user


@pytest.fixture
def owner(db):
    return _make_user('owner', Role.OWNER)


@pytest.fixture
def other_owner(db):
    return _make_user('other_owner', Role.OWNER)


@pytest.fixture
def tenant(db):
    return _make_user('tenant', Role.TENANT)


@pytest.fixture
def boarding_house(owner):
    return BoardingHouse.objects.create(landlord=owner, name='Nhà trọ Hoa Sen', address='12 Nguyễn Trãi')


@pytest.fixture
def room(owner, boarding_house):
    return Room.objects.create(
        boarding_house=boarding_house, landlord=owner, room_number='P101', price=1_800_000,
    )


@pytest.fixture
def contract(room, tenant):
    return Contract.objects.create(
        room=room, tenant=tenant, start_date=date(2026, 1, 1), monthly_rent=1_800_000,
    )


@pytest.fixture
def bill(room, tenant, contract):
    return Bill.objects.create(
        room=room, tenant=tenant, contract=contract,
        billing_month=date(2026, 10, 1), room_charge=1_800_000,
    )


@pytest.fixture
def make_payment(bill, tenant):
    def _make(status=PaymentStatus.PENDING, amount=1_800_000):
        return Payment.objects.create(
            bill=bill, user=tenant, total_amount=amount, status=status,
            transaction_code=generate_transaction_code(),
        )
    return _make


@pytest.fixture
def pending_payment(make_payment):
    return make_payment()


@pytest.fixture
def signed_return():
    """Build a gateway return parameter set signed with the test hash secret."""
    def _signed(payment, response_code='00', **extra):
        params = {
            'vnp_Amount': str(payment.total_amount * 100),
            'vnp_BankCode': 'NCB',
            'vnp_OrderInfo': 'Thanh toan hoa don tien phong P101',
            'vnp_PayDate': '20261019103000',
            'vnp_ResponseCode': response_code,
            'vnp_TmnCode': settings.VNP_TMN_CODE,
            'vnp_TransactionNo': '14123456',
            'vnp_TransactionStatus': response_code,
            'vnp_TxnRef': payment.transaction_code,
        }
        params.update(extra)
        params['vnp_SecureHash'] = vnpay.sign(params, settings.VNP_HASH_SECRET)
        return params
    return _signed


@pytest.fixture
def gateway_response():
    """Patch the querydr HTTP call; returns a factory that sets the JSON body."""
    with mock.patch('apps.payments.vnpay.requests.post') as post:
        def _respond(code='00', message='Success'):
            post.return_value.json.return_value = {'vnp_ResponseCode': code, 'vnp_Message': message}
            post.return_value.raise_for_status.return_value = None
            return post
        yield _respond
