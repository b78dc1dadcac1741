"""
Receipt data logic for completed payments.
Prepares context for payments/receipt.html and payments/receipt_pdf.html.
"""
from django.conf import settings


def get_receipt_context(payment):
    bill = payment.bill
    room = bill.room
    user = payment.user
    house = room.boarding_house

    return {
        'payment': payment,
        'business': {
            'name': settings.EMAIL_FROM_NAME,
            'email': settings.DEFAULT_FROM_EMAIL,
            'boarding_house': house.name if house else '',
            'address': house.address if house else '',
        },
        'payer': {
            'name': user.get_full_name() or user.get_username(),
            'email': user.email,
        },
        'transaction': {
            'code': payment.transaction_code,
            'method': payment.get_payment_method_display(),
            'date': payment.payment_date,
            'status': payment.get_status_display(),
        },
        'bill': {
            'room_number': room.room_number,
            'billing_month': bill.billing_month,
            'room_charge': bill.room_charge,
            'electricity_charge': bill.electricity_charge,
            'water_charge': bill.water_charge,
            'service_charge': bill.service_charge,
            'total': bill.total_amount,
        },
        'financials': {
            'paid': payment.total_amount,
            'balance': max(0, bill.total_amount - payment.total_amount),
            'currency': 'VND',
        },
    }
