"""
PATH: customers/models/customer.py

STOREFRONT CUSTOMER MODEL

- Email is the login identity (SimpleJWT obtains tokens against it).
- Staff accounts (is_staff=True) operate the admin order endpoints.
- order_count / total_spent are denormalized counters, only ever moved
  with F() increments by payment confirmation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone

phone_validator = RegexValidator(
    regex=r"^[\d+\-\s()]{7,20}$",
    message="Please provide a valid phone number",
)


# ---------------- CUSTOMER MANAGER ----------------
class CustomerManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        email = self.normalize_email((email or "").strip())
        if not email:
            raise ValueError("Customers must have an email address")

        extra_fields.setdefault("is_active", True)

        customer = self.model(email=email, **extra_fields)

        if password:
            customer.set_password(password)
        else:
            customer.set_unusable_password()

        customer.full_clean(exclude=["password"])
        customer.save(using=self._db)
        return customer

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True")

        return self.create_user(email=email, password=password, **extra_fields)


# ---------------- CUSTOMER MODEL ----------------
class Customer(AbstractBaseUser, PermissionsMixin):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)

    first_name = models.CharField(max_length=100, blank=True, default="")
    last_name = models.CharField(max_length=100, blank=True, default="")
    phone = models.CharField(
        max_length=20, blank=True, default="", validators=[phone_validator]
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)

    # Purchase counters (moved only by payment confirmation)
    order_count = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-date_joined"]
        indexes = [
            models.Index(fields=["is_active"], name="customers_c_is_acti_6f1d2a_idx"),
            models.Index(fields=["date_joined"], name="customers_c_date_jo_b83c41_idx"),
        ]

    def clean(self):
        if self.email:
            self.email = self.__class__.objects.normalize_email(self.email).strip().lower()
        if not self.email:
            raise ValidationError({"email": "email is required"})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return self.full_name or self.email
