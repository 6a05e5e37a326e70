# payments/urls.py
"""
Mounted at /api/store/payment/ via backend/urls.py.
"""

from django.urls import path

from payments.views.verify import PaymentVerifyView
from payments.views.webhook import PaystackWebhookView

urlpatterns = [
    path("verify/", PaymentVerifyView.as_view(), name="payment-verify"),
    path("webhook/", PaystackWebhookView.as_view(), name="payment-webhook"),
]
