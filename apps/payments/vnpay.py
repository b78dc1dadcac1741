"""
VNPay gateway primitives: parameter signing, typed request records, and a
small client for the redirect URL and the querydr API.

Signing scheme (both directions, must match the gateway bit for bit):
  1. drop parameters whose value is None or ''   (0 is kept)
  2. sort keys by their UTF-8 bytes
  3. join as key=value&key=value, values NOT url-escaped
  4. HMAC-SHA512 with the merchant hash secret, lowercase hex

This module knows nothing about Payments or the database.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.utils import timezone

from .exceptions import GatewayError, SignatureMismatchError

logger = logging.getLogger(__name__)

VNP_VERSION = '2.1.0'
SECURE_HASH_FIELD = 'vnp_SecureHash'
SECURE_HASH_FIELDS = (SECURE_HASH_FIELD, 'vnp_SecureHashType')


# ─────────────────────────────────────────────────────────────────────────────
# Signature codec
# ─────────────────────────────────────────────────────────────────────────────

def _is_empty(value) -> bool:
    return value is None or value == ''


def canonicalize(params: dict) -> str:
    """Sorted, filtered, unencoded query string that gets signed."""
    keys = sorted(
        (key for key, value in params.items() if not _is_empty(value)),
        key=lambda key: key.encode('utf-8'),
    )
    return '&'.join(f'{key}={params[key]}' for key in keys)


def sign(params: dict, secret: str) -> str:
    message = canonicalize(params).encode('utf-8')
    return hmac.new(key=secret.encode('utf-8'), msg=message, digestmod=hashlib.sha512).hexdigest()


def split_signature(params: dict):
    """Return (params without the secure-hash fields, provided signature)."""
    data = {key: value for key, value in params.items() if key not in SECURE_HASH_FIELDS}
    return data, params.get(SECURE_HASH_FIELD) or ''


def verify(params: dict, secret: str) -> dict:
    """
    Check the vnp_SecureHash carried inside `params`.
    Returns the parameters minus the hash fields; raises SignatureMismatchError.
    """
    data, provided = split_signature(params)
    computed = sign(data, secret)
    if not provided or not hmac.compare_digest(computed.encode('utf-8'), provided.encode('utf-8')):
        raise SignatureMismatchError(f"Signature mismatch for txn {data.get('vnp_TxnRef')!r}")
    return data


def format_vnp_datetime(value=None) -> str:
    """yyyyMMddHHmmss in the server's local time zone (GMT+7 in production)."""
    return f"{timezone.localtime(value or timezone.now()):%Y%m%d%H%M%S}"


# ─────────────────────────────────────────────────────────────────────────────
# Typed request records
# ─────────────────────────────────────────────────────────────────────────────

def _require(**fields):
    missing = [name for name, value in fields.items() if _is_empty(value)]
    if missing:
        raise ValueError(f"Missing required VNPay field(s): {', '.join(missing)}")


@dataclass(frozen=True)
class PayRequest:
    """Parameters of a `pay` redirect. `amount` is in VND; the gateway wants it x100."""
    tmn_code: str
    txn_ref: str
    amount: int
    order_info: str
    return_url: str
    ip_addr: str
    create_date: str
    locale: str = 'vn'
    currency: str = 'VND'
    order_type: str = 'billpayment'
    version: str = VNP_VERSION

    def __post_init__(self):
        _require(tmn_code=self.tmn_code, txn_ref=self.txn_ref, order_info=self.order_info,
                 return_url=self.return_url, ip_addr=self.ip_addr, create_date=self.create_date)
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
            raise ValueError(f"amount must be a positive integer, got {self.amount!r}")

    def to_params(self) -> dict:
        return {
            'vnp_Version':    self.version,
            'vnp_Command':    'pay',
            'vnp_TmnCode':    self.tmn_code,
            'vnp_Locale':     self.locale,
            'vnp_CurrCode':   self.currency,
            'vnp_TxnRef':     self.txn_ref,
            'vnp_OrderInfo':  self.order_info,
            'vnp_OrderType':  self.order_type,
            'vnp_Amount':     self.amount * 100,
            'vnp_ReturnUrl':  self.return_url,
            'vnp_IpAddr':     self.ip_addr,
            'vnp_CreateDate': self.create_date,
        }


@dataclass(frozen=True)
class QueryRequest:
    """Parameters of a `querydr` transaction-status lookup."""
    tmn_code: str
    txn_ref: str
    order_info: str
    transaction_date: str
    create_date: str
    ip_addr: str = '127.0.0.1'
    version: str = VNP_VERSION

    def __post_init__(self):
        _require(tmn_code=self.tmn_code, txn_ref=self.txn_ref, order_info=self.order_info,
                 transaction_date=self.transaction_date, create_date=self.create_date,
                 ip_addr=self.ip_addr)

    def to_params(self) -> dict:
        return {
            'vnp_Version':         self.version,
            'vnp_Command':         'querydr',
            'vnp_TmnCode':         self.tmn_code,
            'vnp_TxnRef':          self.txn_ref,
            'vnp_OrderInfo':       self.order_info,
            'vnp_TransactionDate': self.transaction_date,
            'vnp_CreateDate':      self.create_date,
            'vnp_IpAddr':          self.ip_addr,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Client
# ─────────────────────────────────────────────────────────────────────────────

class VNPayClient:
    def __init__(self, tmn_code, hash_secret, payment_url, return_url, api_url, timeout=10):
        self.tmn_code = tmn_code
        self.hash_secret = hash_secret
        self.payment_url = payment_url
        self.return_url = return_url
        self.api_url = api_url
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            tmn_code=settings.VNP_TMN_CODE,
            hash_secret=settings.VNP_HASH_SECRET,
            payment_url=settings.VNP_URL,
            return_url=settings.VNP_RETURN_URL,
            api_url=settings.VNP_API_URL,
            timeout=settings.VNP_API_TIMEOUT,
        )

    def signed_params(self, params: dict) -> dict:
        """Canonical parameters with vnp_SecureHash appended."""
        signed = {key: value for key, value in params.items() if not _is_empty(value)}
        signed[SECURE_HASH_FIELD] = sign(signed, self.hash_secret)
        return signed

    def build_payment_url(self, pay_request: PayRequest) -> str:
        signed = self.signed_params(pay_request.to_params())
        ordered = sorted(signed.items(), key=lambda item: item[0].encode('utf-8'))
        # Hash goes last; percent-encoding here is transport only, the gateway
        # decodes before recomputing the signature over the raw values.
        ordered.sort(key=lambda item: item[0] == SECURE_HASH_FIELD)
        return f"{self.payment_url}?{urlencode(ordered)}"

    def verify(self, params: dict) -> dict:
        return verify(params, self.hash_secret)

    def query(self, query_request: QueryRequest) -> dict:
        """POST a signed querydr request. Raises GatewayError on any transport or parse failure."""
        body = self.signed_params(query_request.to_params())
        try:
            response = requests.post(self.api_url, data=body, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise GatewayError(f"VNPay query failed for {query_request.txn_ref}: {exc}") from exc
        except ValueError as exc:
            raise GatewayError(f"VNPay query returned non-JSON body for {query_request.txn_ref}") from exc

        if not isinstance(payload, dict):
            raise GatewayError(f"Unexpected VNPay query payload for {query_request.txn_ref}")
        logger.info('VNPay querydr %s → %s', query_request.txn_ref, payload.get('vnp_ResponseCode'))
        return payload
