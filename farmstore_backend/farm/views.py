# farm/views.py

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from farm.client import FarmAPIError
from farm.services.stock_sync import sync_stock_from_farm


class AdminSyncInventoryView(APIView):
    """POST /api/admin/store/sync-inventory/"""

    permission_classes = [IsAdminUser]

    @extend_schema(
        tags=["Admin"],
        request=None,
        responses={
            200: OpenApiResponse(description="Stock cache resynced"),
            502: OpenApiResponse(description="Farm manager unreachable"),
        },
    )
    def post(self, request, *args, **kwargs):
        try:
            result = sync_stock_from_farm()
        except FarmAPIError as e:
            return Response(
                {"detail": f"Farm API error: {e}"},
                status=status.HTTP_502_BAD_GATEWAY,
            )

        return Response(
            {
                "message": f"Stock synchronized for {result.updated_count} product(s)",
                "updated_count": result.updated_count,
                "total_checked": result.total_checked,
            },
            status=status.HTTP_200_OK,
        )
