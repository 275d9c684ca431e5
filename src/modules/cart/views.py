"""Cart API views.

All routes act on the authenticated user's own cart; every mutating call
answers with the refreshed cart.
"""

from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.cart.dtos import AddCartLineDTO, ColorDTO
from modules.cart.repositories import CartDjangoRepository
from modules.cart.serializers import (
    AddCartLineSerializer,
    CartSerializer,
    UpdateCartLineSerializer,
)
from modules.cart.services import CartService
from modules.products.repositories import ProductDjangoRepository


class CartViewSet(ViewSet):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def _cart_response(self, request: Request, status_code: int = status.HTTP_200_OK) -> Response:
        summary = self._service.get_cart(request.user.pk)
        return Response(CartSerializer(summary).data, status=status_code)

    @extend_schema(responses=CartSerializer)
    def retrieve_cart(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        return self._cart_response(request)

    @extend_schema(request=AddCartLineSerializer, responses={201: CartSerializer})
    def add_line(self, request: Request) -> Response:
        """POST /api/v1/cart/"""
        serializer = AddCartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = AddCartLineDTO(
            product_id=data["product_id"],
            quantity=data["quantity"],
            size=data["size"],
            color=ColorDTO(**data["color"]) if data.get("color") else None,
        )
        self._service.add_line(request.user.pk, dto)
        return self._cart_response(request, status.HTTP_201_CREATED)

    @extend_schema(responses={204: None})
    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        self._service.clear(request.user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=UpdateCartLineSerializer, responses=CartSerializer)
    def update_line(self, request: Request, line_id: UUID) -> Response:
        """PATCH /api/v1/cart/lines/{line_id}/"""
        serializer = UpdateCartLineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self._service.update_line(
            request.user.pk, line_id, serializer.validated_data["quantity"]
        )
        return self._cart_response(request)

    @extend_schema(responses=CartSerializer)
    def remove_line(self, request: Request, line_id: UUID) -> Response:
        """DELETE /api/v1/cart/lines/{line_id}/"""
        self._service.remove_line(request.user.pk, line_id)
        return self._cart_response(request)
