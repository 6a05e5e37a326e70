# cart/views.py

"""
CART API (CUSTOMER)

/api/store/cart/
- GET    -> cart (refreshed: stale lines dropped, re-priced, clamped)
- POST   {product_id, quantity}      -> add (merges with an existing line)
- PUT    {product_id, quantity}      -> set quantity (<= 0 removes)
- DELETE {product_id} | {clear: true} -> remove line / empty cart
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.models import Cart
from cart.serializers import (
    CartAddSerializer,
    CartRemoveSerializer,
    CartSerializer,
    CartUpdateSerializer,
)
from cart.services.cart_service import (
    CartError,
    InsufficientStockError,
    ProductUnavailableError,
    add_item,
    clear_cart,
    get_cart,
    refresh_cart,
    remove_item,
    update_item_quantity,
)


def _cart_response(customer, *, http_status=status.HTTP_200_OK, changes=None):
    cart = Cart.objects.prefetch_related("items__product").get(pk=get_cart(customer).pk)
    body = CartSerializer(cart).data
    if changes:
        body["changes"] = changes
    return Response(body, status=http_status)


def _error(e: CartError):
    body = {"detail": str(e)}
    if isinstance(e, InsufficientStockError):
        body["available"] = e.available
    if isinstance(e, ProductUnavailableError):
        return Response(body, status=status.HTTP_404_NOT_FOUND)
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


class CartView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser]

    @extend_schema(tags=["Store"], responses={200: CartSerializer})
    def get(self, request, *args, **kwargs):
        result = refresh_cart(request.user)
        return _cart_response(request.user, changes=result.changes)

    @extend_schema(
        tags=["Store"],
        request=CartAddSerializer,
        responses={
            201: CartSerializer,
            400: OpenApiResponse(description="Invalid quantity or insufficient stock"),
            404: OpenApiResponse(description="Product not available"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = CartAddSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            add_item(
                customer=request.user,
                product_id=s.validated_data["product_id"],
                quantity=s.validated_data["quantity"],
            )
        except CartError as e:
            return _error(e)

        return _cart_response(request.user, http_status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Store"], request=CartUpdateSerializer, responses={200: CartSerializer})
    def put(self, request, *args, **kwargs):
        s = CartUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            update_item_quantity(
                customer=request.user,
                product_id=s.validated_data["product_id"],
                quantity=s.validated_data["quantity"],
            )
        except CartError as e:
            return _error(e)

        return _cart_response(request.user)

    @extend_schema(tags=["Store"], request=CartRemoveSerializer, responses={200: CartSerializer})
    def delete(self, request, *args, **kwargs):
        s = CartRemoveSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        if s.validated_data.get("clear"):
            clear_cart(customer=request.user)
        else:
            remove_item(customer=request.user, product_id=s.validated_data["product_id"])

        return _cart_response(request.user)
