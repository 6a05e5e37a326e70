# payments/admin_urls.py

from django.urls import path

from payments.views.admin_transactions import AdminTransactionListView

urlpatterns = [
    path("transactions/", AdminTransactionListView.as_view(), name="admin-transactions"),
]
