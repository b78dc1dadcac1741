"""
Payment views for the Boarding House system.

Flow:
  1. create_payment   → Pending Payment + signed VNPay URL → front end redirects the browser
  2. vnpay_return     → VNPay redirects the payer back here → verify → Completed / Failed
  3. check_payment    → on-demand querydr when the return never arrived
  4. receipt views    → HTML / PDF receipt for Completed payments

The gateway-facing endpoints (2, 3) always answer 200 with a structured
{code, message, paymentId} body, whatever the business outcome.
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, render
from django.template.loader import get_template
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from xhtml2pdf import pisa

from apps.accounts.decorators import login_required_json
from apps.core.http import client_ip, request_data
from apps.notifications.apps import get_notifier
from apps.notifications.emails import send_payment_confirmation

from . import services
from .exceptions import BillNotFoundError, CheckoutError, PaymentValidationError
from .models import Payment
from .receipts import get_receipt_context

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _notify_completed(result):
    """Email the payer once, on the call that actually completed the payment."""
    if not result.completed_now:
        return
    try:
        payment = Payment.objects.select_related('user', 'bill__room').get(pk=result.payment_id)
        send_payment_confirmation(get_notifier(), payment)
    except Exception as exc:
        # Mail trouble must never change what we tell the gateway
        logger.exception('Payment confirmation email failed for %s: %s', result.payment_id, exc)


def _can_view(user, payment) -> bool:
    return user.pk in (payment.user_id, payment.bill.room.landlord_id) or user.is_staff


def _completed_payment_or_error(request, payment_id):
    payment = get_object_or_404(
        Payment.objects.select_related('user', 'bill__room__boarding_house'),
        pk=payment_id,
    )
    if not _can_view(request.user, payment):
        return None, JsonResponse({'message': 'Access denied'}, status=403)
    if not payment.is_completed:
        return None, JsonResponse(
            {'message': 'Receipt is only available for completed payments'}, status=400,
        )
    return payment, None


# ─────────────────────────────────────────────────────────────────────────────
# Checkout
# ─────────────────────────────────────────────────────────────────────────────

@require_POST
@login_required_json
def create_payment(request):
    """Body: billId, contractId (optional), totalAmount (VND, optional)."""
    data = request_data(request)
    try:
        result = services.create_vnpay_payment(
            bill_id=data.get('billId'),
            user_id=request.user.pk,
            contract_id=data.get('contractId'),
            total_amount=data.get('totalAmount'),
            ip_address=client_ip(request),
        )
    except BillNotFoundError as exc:
        return JsonResponse({'message': str(exc)}, status=404)
    except PaymentValidationError as exc:
        return JsonResponse({'message': str(exc)}, status=400)
    except CheckoutError as exc:
        return JsonResponse({'message': str(exc)}, status=503)

    return JsonResponse({
        'paymentUrl': result.payment_url,
        'transactionCode': result.transaction_code,
    }, status=201)


# ─────────────────────────────────────────────────────────────────────────────
# VNPay return (browser redirect from the gateway)
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_GET
def vnpay_return(request):
    try:
        result = services.process_vnpay_return(request.GET.dict())
    except Exception as exc:
        logger.exception('Fatal error in vnpay_return: %s', exc)
        result = services.GatewayResult(services.CODE_SYSTEM_ERROR, 'System error')

    _notify_completed(result)
    return JsonResponse(result.as_dict())


# ─────────────────────────────────────────────────────────────────────────────
# Status check (querydr)
# ─────────────────────────────────────────────────────────────────────────────

@require_POST
@login_required_json
def check_payment(request, transaction_code):
    payment = (
        Payment.objects.select_related('bill__room')
        .filter(transaction_code=transaction_code)
        .first()
    )
    if payment is not None and not _can_view(request.user, payment):
        # Someone else's transaction reads as unknown
        return JsonResponse(
            services.GatewayResult(services.CODE_NOT_FOUND, 'Transaction not found').as_dict()
        )

    try:
        result = services.check_vnpay_transaction(transaction_code)
    except Exception as exc:
        logger.exception('Fatal error checking transaction %s: %s', transaction_code, exc)
        result = services.GatewayResult(services.CODE_SYSTEM_ERROR, 'System error')

    _notify_completed(result)
    return JsonResponse(result.as_dict())


# ─────────────────────────────────────────────────────────────────────────────
# Receipts
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@login_required_json
def view_receipt(request, payment_id):
    payment, error = _completed_payment_or_error(request, payment_id)
    if error:
        return error
    return render(request, 'payments/receipt.html', get_receipt_context(payment))


@require_GET
@login_required_json
def download_receipt_pdf(request, payment_id):
    payment, error = _completed_payment_or_error(request, payment_id)
    if error:
        return error

    html = get_template('payments/receipt_pdf.html').render(get_receipt_context(payment))

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="receipt_{payment.transaction_code}.pdf"'

    pisa_status = pisa.CreatePDF(html, dest=response)
    if pisa_status.err:
        logger.error('PDF rendering failed for payment %s', payment.pk)
        return JsonResponse({'message': 'Could not render receipt PDF'}, status=500)

    return response
