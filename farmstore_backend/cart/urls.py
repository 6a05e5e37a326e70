# cart/urls.py

from django.urls import path

from cart.views import CartView

urlpatterns = [
    path("cart/", CartView.as_view(), name="store-cart"),
]
