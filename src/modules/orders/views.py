"""Order API views.

Exposes ``CheckoutService`` and ``OrderService`` via HTTP using DRF
ViewSets.  Domain exceptions propagate to the project exception handler;
views never build error responses themselves.
"""

from __future__ import annotations

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.cart.repositories import CartDjangoRepository
from modules.core.identity import Actor
from modules.core.pagination import PageLimitPagination
from modules.core.permissions import IsOperator
from modules.orders.dtos import CheckoutDTO, ShippingAddressDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    ChangeStatusSerializer,
    CheckoutSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from modules.orders.services import CheckoutService, OrderService
from modules.products.repositories import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """Customer-facing order endpoints.

    Does **not** extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        order_repository = OrderDjangoRepository()
        self._checkout = CheckoutService(
            order_repository=order_repository,
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        self._service = OrderService(order_repository=order_repository)

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "checkout"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    @extend_schema(request=CheckoutSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/ (checkout)"""
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = CheckoutDTO(
            shipping_address=ShippingAddressDTO(**data["shipping_address"]),
            delivery_option=data["delivery_option"],
            payment_method=data["payment_method"],
            notes=data.get("notes", ""),
        )
        order = self._checkout.checkout(request.user.pk, dto)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=OrderListSerializer(many=True))
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self._service.list_user_orders(Actor.from_user(request.user))
        paginator = PageLimitPagination()
        page = paginator.paginate_queryset(queryset, request)
        return paginator.get_paginated_response(OrderListSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk, Actor.from_user(request.user))
        return Response(OrderSerializer(order).data)

    @extend_schema(request=CancelOrderSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Cancels the caller's own order and releases its stock.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.cancel_order(
            pk,
            Actor.from_user(request.user),
            notes=serializer.validated_data["notes"],
        )
        return Response(OrderSerializer(order).data)


class AdminOrderViewSet(GenericViewSet):
    """Operator order administration."""

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsOperator]
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(order_repository=OrderDjangoRepository())

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return self._service.list_orders(Actor.from_user(self.request.user))

    @extend_schema(responses=OrderListSerializer(many=True))
    def list(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/?status=&search=&page=&limit="""
        queryset = self.filter_queryset(self.get_queryset())
        paginator = PageLimitPagination(page_size=settings.ADMIN_ORDER_PAGE_SIZE)
        page = paginator.paginate_queryset(queryset, request)
        return paginator.get_paginated_response(OrderListSerializer(page, many=True).data)

    @extend_schema(request=ChangeStatusSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/admin/orders/{pk}/status/"""
        serializer = ChangeStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = self._service.change_status(
            pk,
            data["status"],
            Actor.from_user(request.user),
            notes=data["notes"],
        )
        return Response(OrderSerializer(order).data)

    @extend_schema(responses={204: None})
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/admin/orders/{pk}/"""
        self._service.delete_order(pk, Actor.from_user(request.user))
        return Response(status=status.HTTP_204_NO_CONTENT)
