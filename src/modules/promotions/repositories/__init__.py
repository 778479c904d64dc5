"""Promotion repositories package."""

from modules.promotions.repositories.django_repository import PromotionDjangoRepository
from modules.promotions.repositories.interfaces import IPromotionRepository

__all__ = ["IPromotionRepository", "PromotionDjangoRepository"]
