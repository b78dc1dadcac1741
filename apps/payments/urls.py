from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    # Front end starts checkout, gets back the signed VNPay URL
    path('vnpay/create/', views.create_payment, name='create'),

    # VNPay redirects the payer here after paying (success or cancel)
    path('vnpay-return/', views.vnpay_return, name='vnpay_return'),

    # Manual status reconciliation via querydr
    path('vnpay/check/<str:transaction_code>/', views.check_payment, name='check'),

    # Receipts for completed payments
    path('<uuid:payment_id>/receipt/', views.view_receipt, name='receipt'),
    path('<uuid:payment_id>/receipt.pdf', views.download_receipt_pdf, name='receipt_pdf'),
]
