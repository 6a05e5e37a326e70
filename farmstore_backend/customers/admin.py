# customers/admin.py

"""
CUSTOMERS ADMIN REGISTRATION

Registers the Customer (AUTH_USER_MODEL) and saved addresses.
Purchase counters are read-only: payment confirmation owns them.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from customers.models import Customer, CustomerAddress


class CustomerAddressInline(admin.TabularInline):
    model = CustomerAddress
    extra = 0


@admin.register(Customer)
class CustomerAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "first_name", "last_name", "order_count", "total_spent", "is_staff", "is_active")
    list_filter = ("is_staff", "is_active", "is_verified")
    search_fields = ("email", "first_name", "last_name", "phone")
    readonly_fields = ("order_count", "total_spent", "date_joined", "last_login")
    inlines = [CustomerAddressInline]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("first_name", "last_name", "phone", "is_verified")}),
        ("Purchases", {"fields": ("order_count", "total_spent")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Dates", {"fields": ("date_joined", "last_login")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "email",
                    "password1",
                    "password2",
                    "is_staff",
                    "is_active",
                ),
            },
        ),
    )
