# orders/admin_urls.py
"""
Mounted at /api/admin/store/ via backend/urls.py.
"""

from django.urls import path

from orders.views.admin_orders import (
    AdminOrderDetailView,
    AdminOrderListView,
    AdminOrderStatsView,
)

urlpatterns = [
    path("orders/", AdminOrderListView.as_view(), name="admin-orders"),
    path("orders/<uuid:order_id>/", AdminOrderDetailView.as_view(), name="admin-order-detail"),
    path("stats/", AdminOrderStatsView.as_view(), name="admin-order-stats"),
]
