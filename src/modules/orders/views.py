"""Order API views.

Exposes ``OrderService`` via a DRF ViewSet.  Domain errors propagate to
``api_exception_handler``; the view never catches them.  Customers act
on their own orders; status, estimated time, active orders and
statistics require staff.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.notifications import get_order_notifier
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    OrderInputSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatisticsSerializer,
    UpdateEstimatedTimeSerializer,
    UpdateStatusSerializer,
    UpdateTipSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.promotions.repositories.django_repository import PromotionDjangoRepository

STAFF_ACTIONS = {"set_status", "estimated_time", "active", "statistics"}


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories.  Does **not** extend
    ``ModelViewSet``: writes go through the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            promotion_repository=PromotionDjangoRepository(),
            notifier=get_order_notifier(),
        )

    def get_permissions(self):
        if self.action in STAFF_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        if self.action == "create":
            self.throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            self.throttle_scope = "order_listing"
        else:
            self.throttle_scope = None
        return super().get_throttles()

    def get_queryset(self):
        """Staff see every order; customers only their own."""
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        queryset = Order.objects.select_related("user")
        if not self.request.user.is_staff:
            queryset = queryset.filter(user=self.request.user)
        return queryset

    # ------------------------------------------------------------------
    # Customer operations
    # ------------------------------------------------------------------

    @extend_schema(request=OrderInputSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = OrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateOrderDTO.model_validate(serializer.to_dto_payload())

        order = self._service.create_order(dto, request.user)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrderInputSerializer, responses={200: OrderSerializer})
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/ (replaces items and tip)."""
        serializer = OrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderDTO.model_validate(serializer.to_dto_payload())

        order = self._service.update_order(pk, dto, request.user)
        return Response(OrderSerializer(order).data)

    @extend_schema(request=UpdateTipSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["patch"])
    def tip(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/tip/"""
        serializer = UpdateTipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_tip(pk, serializer.validated_data["tip"], request.user)
        return Response(OrderSerializer(order).data)

    @extend_schema(request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        order = self._service.cancel_order(pk, request.user)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(responses={200: OrderListSerializer(many=True)})
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/?status=&start_date=&end_date=

        Filtering is handled by ``OrderFilter``; results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OrderListSerializer(page, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/ (owner or staff)."""
        order = self._service.get_order(pk, request.user)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Staff operations
    # ------------------------------------------------------------------

    @extend_schema(request=UpdateStatusSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/status/"""
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_status(pk, serializer.validated_data["status"])
        return Response(OrderSerializer(order).data)

    @extend_schema(request=UpdateEstimatedTimeSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["patch"], url_path="estimated-time")
    def estimated_time(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/estimated-time/"""
        serializer = UpdateEstimatedTimeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_estimated_time(pk, serializer.validated_data["estimated_time"])
        return Response(OrderSerializer(order).data)

    @extend_schema(responses={200: OrderListSerializer(many=True)})
    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        """GET /api/v1/orders/active/ (PENDING and IN_PREPARATION, oldest first)."""
        return Response(OrderListSerializer(self._service.list_active_orders(), many=True).data)

    @extend_schema(responses={200: OrderStatisticsSerializer})
    @action(detail=False, methods=["get"])
    def statistics(self, request: Request) -> Response:
        """GET /api/v1/orders/statistics/"""
        stats = self._service.statistics()
        return Response(OrderStatisticsSerializer(stats.model_dump()).data)
