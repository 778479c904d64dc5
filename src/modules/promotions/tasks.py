"""Celery tasks for the promotions module."""

from __future__ import annotations

import structlog
from celery import shared_task

from modules.core.storage import DjangoImageStorage
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.promotions.repositories.django_repository import PromotionDjangoRepository
from modules.promotions.services import PromotionService

logger = structlog.get_logger(__name__)


def build_promotion_service() -> PromotionService:
    return PromotionService(
        promotion_repository=PromotionDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        image_storage=DjangoImageStorage(),
    )


@shared_task(name="promotions.deactivate_expired")
def deactivate_expired_promotions() -> int:
    """Daily sweep: deactivate TEMPORARY promotions whose end date has passed."""
    deactivated = build_promotion_service().deactivate_expired()
    logger.info("promotion.expiry_task_finished", deactivated=deactivated)
    return deactivated
