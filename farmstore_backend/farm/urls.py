# farm/urls.py

from django.urls import path

from farm.views import AdminSyncInventoryView

urlpatterns = [
    path("sync-inventory/", AdminSyncInventoryView.as_view(), name="admin-sync-inventory"),
]
