"""Promotion API views.

Exposes ``PromotionService`` via a DRF ViewSet.  Domain errors propagate
to ``api_exception_handler``, which maps them onto HTTP statuses.
Reads are open to any authenticated user; writes require staff.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.core.storage import DjangoImageStorage
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.promotions.dtos import CreatePromotionDTO, UpdatePromotionDTO, WeeklyRuleDTO
from modules.promotions.filters import PromotionFilter
from modules.promotions.models import Promotion
from modules.promotions.repositories.django_repository import PromotionDjangoRepository
from modules.promotions.serializers import (
    CreatePromotionSerializer,
    PromotionDetailSerializer,
    PromotionImageSerializer,
    PromotionSummarySerializer,
    SweepResultSerializer,
    UpdatePromotionSerializer,
)
from modules.promotions.services import PromotionService
from shared.domain.clock import SystemClock

STAFF_ACTIONS = {
    "create",
    "partial_update",
    "destroy",
    "toggle_active",
    "upload_image",
    "expired",
    "deactivate_expired",
}


class PromotionViewSet(GenericViewSet):
    """ViewSet for Promotion operations.

    Does **not** extend ``ModelViewSet``: writes go through the
    service/repository layer.
    """

    queryset = Promotion.objects.prefetch_related("products", "weekly_rules")
    serializer_class = PromotionDetailSerializer
    filterset_class = PromotionFilter
    ordering_fields = ["created_at", "price", "name"]
    ordering = ["-created_at"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._clock = SystemClock()
        self._service = PromotionService(
            promotion_repository=PromotionDjangoRepository(),
            product_repository=ProductDjangoRepository(),
            image_storage=DjangoImageStorage(),
            clock=self._clock,
        )

    def get_permissions(self):
        if self.action in STAFF_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["now"] = self._clock.now()
        return context

    def _detail(self, promotion: Promotion, status_code: int = status.HTTP_200_OK) -> Response:
        return Response(PromotionDetailSerializer(promotion, context=self.get_serializer_context()).data, status=status_code)

    def _summaries(self, promotions) -> Response:
        serializer = PromotionSummarySerializer(promotions, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    # ------------------------------------------------------------------
    # Create / Update / Delete
    # ------------------------------------------------------------------

    @extend_schema(request=CreatePromotionSerializer, responses={201: PromotionDetailSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/promotions/"""
        serializer = CreatePromotionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = CreatePromotionDTO(
            name=data["name"],
            description=data.get("description", ""),
            price=data["price"],
            type=data["type"],
            starts_at=data.get("starts_at"),
            ends_at=data.get("ends_at"),
            product_ids=data.get("product_ids", []),
            weekly_rules=[WeeklyRuleDTO(**rule) for rule in data.get("weekly_rules", [])],
        )
        promotion = self._service.create_promotion(dto)
        return self._detail(promotion, status.HTTP_201_CREATED)

    @extend_schema(request=UpdatePromotionSerializer, responses={200: PromotionDetailSerializer})
    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/promotions/{pk}/ (only supplied fields change)."""
        serializer = UpdatePromotionSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        if "weekly_rules" in data:
            data["weekly_rules"] = [WeeklyRuleDTO(**rule) for rule in data["weekly_rules"]]
        promotion = self._service.update_promotion(pk, UpdatePromotionDTO(**data))
        return self._detail(promotion)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/promotions/{pk}/ (inactive promotions only)."""
        self._service.delete_promotion(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: PromotionDetailSerializer})
    @action(detail=True, methods=["post"], url_path="toggle-active")
    def toggle_active(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/promotions/{pk}/toggle-active/"""
        return self._detail(self._service.toggle_active(pk))

    @extend_schema(request=PromotionImageSerializer, responses={200: PromotionDetailSerializer})
    @action(
        detail=True,
        methods=["post"],
        url_path="image",
        parser_classes=[MultiPartParser, FormParser],
    )
    def upload_image(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/promotions/{pk}/image/ (multipart, field ``image``)."""
        serializer = PromotionImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        promotion = self._service.upload_image(pk, serializer.validated_data["image"])
        return self._detail(promotion)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @extend_schema(responses={200: PromotionSummarySerializer(many=True)})
    def list(self, request: Request) -> Response:
        """GET /api/v1/promotions/?type=&active=&name=&ordering="""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = PromotionSummarySerializer(page, many=True, context=self.get_serializer_context())
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/promotions/{pk}/"""
        return self._detail(self._service.get_promotion(pk))

    @extend_schema(responses={200: PromotionSummarySerializer(many=True)})
    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/v1/promotions/search/?name= (active promotions only)."""
        return self._summaries(self._service.search_by_name(request.query_params.get("name", "")))

    @extend_schema(responses={200: PromotionSummarySerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="currently-valid")
    def currently_valid(self, request: Request) -> Response:
        """GET /api/v1/promotions/currently-valid/"""
        return self._summaries(self._service.list_currently_valid())

    @extend_schema(responses={200: PromotionSummarySerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"by-product/(?P<product_id>[^/.]+)")
    def by_product(self, request: Request, product_id: str | None = None) -> Response:
        """GET /api/v1/promotions/by-product/{product_id}/"""
        return self._summaries(self._service.list_active_by_product(product_id))

    @extend_schema(responses={200: PromotionSummarySerializer(many=True)})
    @action(detail=False, methods=["get"])
    def expired(self, request: Request) -> Response:
        """GET /api/v1/promotions/expired/"""
        return self._summaries(self._service.list_expired())

    @extend_schema(request=None, responses={200: SweepResultSerializer})
    @action(detail=False, methods=["post"], url_path="deactivate-expired")
    def deactivate_expired(self, request: Request) -> Response:
        """POST /api/v1/promotions/deactivate-expired/ (runs the sweep now)."""
        return Response({"deactivated": self._service.deactivate_expired()})
