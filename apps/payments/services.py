"""
Payment service: pure business logic, no HTTP/request awareness.

Public API:
  create_vnpay_payment(bill_id, user_id, contract_id, total_amount, ip_address)
  process_vnpay_return(params)
  check_vnpay_transaction(transaction_code)

create_vnpay_payment raises PaymentValidationError subclasses for bad input
and CheckoutError when a valid request cannot be recorded or signed.
process_vnpay_return and check_vnpay_transaction never raise for business
outcomes: they return a GatewayResult whose code the gateway-facing views
hand back as-is.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from apps.bills.models import Bill
from apps.rooms.models import Contract

from . import vnpay
from .exceptions import (
    BillNotFoundError,
    CheckoutError,
    GatewayError,
    InvalidAmountError,
    PaymentNotFoundError,
    PaymentValidationError,
    SignatureMismatchError,
)
from .models import Payment, PaymentMethod, PaymentStatus, generate_transaction_code

logger = logging.getLogger(__name__)

CODE_SUCCESS = '00'
CODE_NOT_FOUND = '01'
CODE_INVALID_SIGNATURE = '97'
CODE_SYSTEM_ERROR = '99'

# vnp_Amount (VND x100) must still fit a signed 64-bit integer
MAX_AMOUNT_VND = (2 ** 63 - 1) // 100


@dataclass(frozen=True)
class CheckoutResult:
    payment_url: str
    transaction_code: str
    payment: Payment


@dataclass(frozen=True)
class GatewayResult:
    code: str
    message: str
    payment_id: Optional[UUID] = None
    # True only when this call moved the payment to Completed
    completed_now: bool = False

    @property
    def is_success(self):
        return self.code == CODE_SUCCESS

    def as_dict(self) -> dict:
        return {
            'code': self.code,
            'message': self.message,
            'paymentId': str(self.payment_id) if self.payment_id else None,
        }


# ── Helpers ──────────────────────────────────────────────────────────────────

def _to_vnd(amount) -> int:
    """Accept int/str/Decimal amounts; VND has no minor unit so fractions are rejected."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if not value.is_finite() or value <= 0 or value != value.to_integral_value():
        raise InvalidAmountError(f"Amount must be a positive whole number of VND, got {amount!r}")
    if value > MAX_AMOUNT_VND:
        raise InvalidAmountError(f"Amount exceeds the maximum of {MAX_AMOUNT_VND} VND, got {amount!r}")
    return int(value)


def _get_bill(bill_id, user_id) -> Bill:
    """The bill, if it exists and is billed to the paying user."""
    try:
        return Bill.objects.select_related('room').get(pk=bill_id, tenant_id=user_id)
    except (Bill.DoesNotExist, ValidationError, ValueError):
        raise BillNotFoundError(f"Bill {bill_id} does not exist")


def _get_contract(contract_id, bill) -> Optional[Contract]:
    if not contract_id:
        return None
    try:
        contract = Contract.objects.filter(pk=contract_id).first()
    except (ValidationError, ValueError):
        contract = None
    if contract is None:
        raise PaymentValidationError(f"Contract {contract_id} does not exist")
    if contract.room_id != bill.room_id:
        raise PaymentValidationError(f"Contract {contract_id} does not cover the billed room")
    return contract


def _get_payment(transaction_code) -> Payment:
    payment = None
    if transaction_code:
        payment = Payment.objects.filter(transaction_code=transaction_code).first()
    if payment is None:
        raise PaymentNotFoundError(f"No payment with transaction code {transaction_code!r}")
    return payment


# ── Payment Request Builder ──────────────────────────────────────────────────

def create_vnpay_payment(bill_id, user_id, contract_id, total_amount, ip_address,
                         client: vnpay.VNPayClient = None) -> CheckoutResult:
    """
    Persist a Pending Payment for the bill and build the signed VNPay
    redirect URL. The returned transaction code identifies that Payment.
    `total_amount` is in VND; None charges the bill's full total.

    The Payment row and the signed URL are produced together: if signing
    fails (e.g. missing merchant settings) no Pending Payment is left behind
    and CheckoutError is raised.
    """
    client = client or vnpay.VNPayClient.from_settings()
    bill = _get_bill(bill_id, user_id)
    # No explicit amount means the whole bill
    if total_amount is None or total_amount == '':
        total_amount = bill.total_amount
    amount = _to_vnd(total_amount)
    contract = _get_contract(contract_id, bill)

    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                bill=bill,
                user_id=user_id,
                contract=contract,
                payment_method=PaymentMethod.ONLINE,
                total_amount=amount,
                status=PaymentStatus.PENDING,
                transaction_code=generate_transaction_code(),
            )
            pay_request = vnpay.PayRequest(
                tmn_code=client.tmn_code,
                txn_ref=payment.transaction_code,
                amount=amount,
                order_info=f"Thanh toan hoa don tien phong {bill.room.room_number}",
                return_url=client.return_url,
                ip_addr=ip_address or '127.0.0.1',
                create_date=vnpay.format_vnp_datetime(payment.created_at),
            )
            payment_url = client.build_payment_url(pay_request)
    except ValueError as exc:
        logger.error('Checkout for bill %s could not be signed: %s', bill.pk, exc)
        raise CheckoutError(f"Payment request could not be built: {exc}") from exc
    except DatabaseError as exc:
        logger.exception('Checkout for bill %s could not be stored: %s', bill.pk, exc)
        raise CheckoutError("Payment could not be recorded") from exc

    logger.info('Checkout started: bill=%s payment=%s txn=%s amount=%s',
                bill.pk, payment.pk, payment.transaction_code, amount)
    return CheckoutResult(payment_url=payment_url, transaction_code=payment.transaction_code,
                          payment=payment)


# ── Return/Callback Verifier ─────────────────────────────────────────────────

def process_vnpay_return(params: dict, client: vnpay.VNPayClient = None) -> GatewayResult:
    """
    Verify a gateway redirect and apply its outcome to the Payment.

    Codes: '97' bad signature (nothing touched), '01' unknown transaction,
    '00' success (also for replays on an already Completed payment),
    the gateway's own code on failure, '99' store failure.
    """
    client = client or vnpay.VNPayClient.from_settings()
    try:
        data = client.verify(dict(params))
    except SignatureMismatchError as exc:
        logger.warning('VNPay return rejected: %s', exc)
        return GatewayResult(CODE_INVALID_SIGNATURE, 'Invalid signature')

    response_code = data.get('vnp_ResponseCode', '')
    try:
        payment = _get_payment(data.get('vnp_TxnRef'))

        if payment.is_completed:
            logger.info('VNPay return for %s ignored: already completed', payment.transaction_code)
            return GatewayResult(CODE_SUCCESS, 'Transaction already processed', payment.pk)

        if response_code == CODE_SUCCESS:
            payment.mark_completed(source='return', response_code=response_code)
            logger.info('Payment %s completed via return', payment.transaction_code)
            return GatewayResult(CODE_SUCCESS, 'Transaction successful', payment.pk,
                                 completed_now=True)

        payment.mark_failed(source='return', response_code=response_code)
        logger.info('Payment %s failed via return (code %s)', payment.transaction_code, response_code)
        return GatewayResult(response_code, 'Transaction failed', payment.pk)

    except PaymentNotFoundError as exc:
        logger.warning('VNPay return: %s', exc)
        return GatewayResult(CODE_NOT_FOUND, 'Transaction not found')
    except DatabaseError as exc:
        logger.exception('VNPay return processing error: %s', exc)
        return GatewayResult(CODE_SYSTEM_ERROR, 'System error')


# ── Transaction Status Poller ────────────────────────────────────────────────

def check_vnpay_transaction(transaction_code: str, client: vnpay.VNPayClient = None,
                            ip_address: str = '127.0.0.1') -> GatewayResult:
    """
    Ask VNPay for the authoritative status of a transaction and reconcile.
    Remote '00' completes the payment (even a Failed one); any other code
    fails it unless it is already Completed.
    """
    client = client or vnpay.VNPayClient.from_settings()
    try:
        payment = _get_payment(transaction_code)
    except PaymentNotFoundError as exc:
        logger.warning('VNPay query: %s', exc)
        return GatewayResult(CODE_NOT_FOUND, 'Transaction not found')

    query = vnpay.QueryRequest(
        tmn_code=client.tmn_code,
        txn_ref=payment.transaction_code,
        order_info=f"Kiem tra giao dich {payment.transaction_code}",
        transaction_date=vnpay.format_vnp_datetime(payment.created_at),
        create_date=vnpay.format_vnp_datetime(),
        ip_addr=ip_address,
    )
    try:
        remote = client.query(query)
    except GatewayError as exc:
        logger.warning('VNPay query error, payment %s left %s: %s',
                       payment.transaction_code, payment.status, exc)
        return GatewayResult(CODE_SYSTEM_ERROR, 'System error', payment.pk)

    remote_code = str(remote.get('vnp_ResponseCode', ''))
    remote_message = remote.get('vnp_Message', '')
    try:
        if remote_code == CODE_SUCCESS:
            completed_now = payment.mark_completed(source='querydr', response_code=remote_code)
        else:
            completed_now = False
            payment.mark_failed(source='querydr', response_code=remote_code)
    except DatabaseError as exc:
        logger.exception('VNPay query reconciliation error: %s', exc)
        return GatewayResult(CODE_SYSTEM_ERROR, 'System error', payment.pk)

    logger.info('Payment %s reconciled via querydr: remote=%s local=%s',
                payment.transaction_code, remote_code, payment.status)
    return GatewayResult(remote_code, remote_message, payment.pk, completed_now=completed_now)
