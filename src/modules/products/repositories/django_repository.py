"""Django ORM implementation of the Product repository.

Methods return ``None`` (or skip unknown ids) instead of raising; the
service layer decides how a missing product becomes a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_many_by_ids(self, ids: Iterable[Any]) -> List[Product]:
        try:
            return list(Product.objects.filter(id__in=list(ids)))
        except (ValueError, ValidationError):
            return []

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        deleted, _ = Product.objects.filter(id=id).delete()
        if deleted:
            logger.info("product.deleted", product_id=str(id))
        return bool(deleted)
