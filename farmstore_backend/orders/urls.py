# orders/urls.py
"""
Mounted at /api/store/ (customer) via backend/urls.py.
"""

from django.urls import path

from orders.views.checkout import CheckoutView
from orders.views.customer_orders import (
    CustomerOrderDetailView,
    CustomerOrderListView,
    OrderPayView,
)

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="store-checkout"),
    path("orders/", CustomerOrderListView.as_view(), name="store-orders"),
    path("orders/<uuid:order_id>/", CustomerOrderDetailView.as_view(), name="store-order-detail"),
    path("orders/<uuid:order_id>/pay/", OrderPayView.as_view(), name="store-order-pay"),
]
