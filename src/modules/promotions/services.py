"""Promotion service layer (Use Cases).

Orchestrates the promotion lifecycle.  Validation runs first and raises
before any state is touched; write operations are atomic.

Business rules enforced:
- A promotion references at least one existing product.
- TEMPORARY: both dates, ``starts_at <= ends_at``, ``ends_at`` not in the
  past, no weekly rules.
- RECURRING: at least one weekly rule, no dates, no overlapping windows
  on the same day (back-to-back windows are allowed).
- ``type`` is immutable; dates change only on TEMPORARY promotions and
  weekly rules only on RECURRING ones.
- Names are unique among active promotions (case-insensitive).
- An expired TEMPORARY promotion cannot be activated; toggling an active
  expired one deactivates it.
- Only inactive promotions can be deleted.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

import structlog
from django.core.files.base import File
from django.db import DatabaseError, transaction

from modules.products.exceptions import ProductsNotFound
from modules.promotions.constants import (
    IMAGE_ALLOWED_CONTENT_TYPES,
    IMAGE_MAX_SIZE_BYTES,
    IMAGE_UPLOAD_FOLDER,
    PromotionType,
)
from modules.promotions.dtos import CreatePromotionDTO, UpdatePromotionDTO
from modules.promotions.exceptions import (
    DuplicatePromotionName,
    InvalidPromotionImage,
    InvalidRecurringPromotion,
    InvalidTemporaryPromotion,
    PromotionCannotBeDeleted,
    PromotionExpired,
    PromotionMustHaveProducts,
    PromotionNotFound,
    PromotionTypeMismatch,
)
from modules.promotions.scheduling import TimeWindow, WeeklyRuleSet
from modules.promotions.validation import (
    check_create_recurring,
    check_create_temporary,
    check_products,
    check_temporary_dates,
    check_update_recurring,
    check_update_type_scope,
)
from modules.promotions.validity import is_expired
from shared.domain.clock import Clock, SystemClock, local_today

if TYPE_CHECKING:
    from modules.core.storage import IImageStorage
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository
    from modules.promotions.dtos import WeeklyRuleDTO
    from modules.promotions.models import Promotion
    from modules.promotions.repositories.interfaces import IPromotionRepository

logger = structlog.get_logger(__name__)


class PromotionService:
    """Application service for Promotion use-cases.

    Receives repositories, the image storage and the clock via
    constructor injection.
    """

    def __init__(
        self,
        promotion_repository: IPromotionRepository,
        product_repository: IProductRepository,
        image_storage: IImageStorage,
        clock: Optional[Clock] = None,
    ) -> None:
        self._promotion_repo = promotion_repository
        self._product_repo = product_repository
        self._storage = image_storage
        self._clock = clock or SystemClock()

    def today(self) -> date:
        return local_today(self._clock)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_promotion(self, dto: CreatePromotionDTO) -> Promotion:
        """Create a promotion after validating products and type rules.

        Raises:
            PromotionMustHaveProducts: no product ids supplied.
            ProductsNotFound: some product ids do not resolve.
            InvalidTemporaryPromotion / InvalidRecurringPromotion: type rules.
            InvalidTimeWindow / ConflictingWeeklyRules: weekly rule checks.
            DuplicatePromotionName: an active promotion has the same name.
        """
        log = logger.bind(promotion_type=dto.type, name=dto.name)

        check_products(dto.product_ids).raise_if_failed(PromotionMustHaveProducts)
        products = self._resolve_products(dto.product_ids)

        rule_set = _rule_set(dto.weekly_rules)
        if dto.type == PromotionType.TEMPORARY:
            check_create_temporary(dto, self.today()).raise_if_failed(InvalidTemporaryPromotion)
        else:
            check_create_recurring(dto).raise_if_failed(InvalidRecurringPromotion)
            rule_set.validate()

        if self._promotion_repo.exists_active_with_name(dto.name):
            raise DuplicatePromotionName(dto.name)

        promotion = self._promotion_repo.create(
            {
                "name": dto.name,
                "description": dto.description,
                "price": dto.price,
                "type": dto.type,
                "is_active": True,
                "starts_at": dto.starts_at,
                "ends_at": dto.ends_at,
                "products": products,
                "weekly_rules": list(rule_set),
            }
        )
        log.info("promotion.created", promotion_id=str(promotion.id))
        return promotion

    @transaction.atomic
    def update_promotion(self, promotion_id: Any, dto: UpdatePromotionDTO) -> Promotion:
        """Apply a partial update; only supplied fields change.

        Every check runs before the first mutation so a rejected update
        leaves the promotion untouched.
        """
        promotion = self._get_for_update(promotion_id)
        log = logger.bind(promotion_id=str(promotion.id))
        today = self.today()

        check_update_type_scope(dto, promotion.type).raise_if_failed(PromotionTypeMismatch)

        activating = bool(dto.supplied("active") and dto.active and not promotion.is_active)
        name = dto.name if dto.supplied("name") else promotion.name
        if (dto.supplied("name") or activating) and self._promotion_repo.exists_active_with_name(
            name, exclude_id=promotion.id
        ):
            raise DuplicatePromotionName(name)

        starts_at = dto.starts_at if dto.supplied("starts_at") else promotion.starts_at
        ends_at = dto.ends_at if dto.supplied("ends_at") else promotion.ends_at
        if dto.supplied("starts_at") or dto.supplied("ends_at"):
            check_temporary_dates(
                starts_at,
                ends_at,
                today if dto.supplied("ends_at") else None,
                require_both=False,
            ).raise_if_failed(InvalidTemporaryPromotion)

        if activating:
            if is_expired(promotion_type=promotion.type, ends_at=ends_at, today=today):
                raise PromotionExpired(promotion.id)

        products: Optional[List[Product]] = None
        if "product_ids" in dto.model_fields_set:
            check_products(dto.product_ids).raise_if_failed(PromotionMustHaveProducts)
            products = self._resolve_products(dto.product_ids)

        rule_set: Optional[WeeklyRuleSet] = None
        if dto.supplied("weekly_rules"):
            check_update_recurring(dto).raise_if_failed(InvalidRecurringPromotion)
            rule_set = _rule_set(dto.weekly_rules)
            rule_set.validate()

        changed: List[str] = []
        for field_name in ("name", "description", "price"):
            if dto.supplied(field_name):
                setattr(promotion, field_name, getattr(dto, field_name))
                changed.append(field_name)
        if dto.supplied("starts_at") or dto.supplied("ends_at"):
            promotion.starts_at, promotion.ends_at = starts_at, ends_at
            changed += ["starts_at", "ends_at"]
        if dto.supplied("active"):
            promotion.is_active = dto.active
            changed.append("is_active")

        self._promotion_repo.save(promotion)
        if products is not None:
            self._promotion_repo.set_products(promotion, products)
            changed.append("products")
        if rule_set is not None:
            self._promotion_repo.replace_weekly_rules(promotion, rule_set)
            changed.append("weekly_rules")

        log.info("promotion.updated", fields=changed)
        return self._promotion_repo.get_by_id(promotion.id) or promotion

    @transaction.atomic
    def toggle_active(self, promotion_id: Any) -> Promotion:
        """Flip ``is_active``.

        An expired TEMPORARY promotion can only go to inactive: if it is
        active it is deactivated, otherwise ``PromotionExpired`` is raised.
        Activation fails with ``DuplicatePromotionName`` while another
        active promotion uses the same name.
        """
        promotion = self._get_for_update(promotion_id)
        log = logger.bind(promotion_id=str(promotion.id), was_active=promotion.is_active)

        if is_expired(promotion_type=promotion.type, ends_at=promotion.ends_at, today=self.today()):
            if not promotion.is_active:
                log.warning("promotion.activation_rejected_expired")
                raise PromotionExpired(promotion.id)
            promotion.is_active = False
            log.info("promotion.expired_deactivated")
        elif promotion.is_active:
            promotion.is_active = False
        else:
            if self._promotion_repo.exists_active_with_name(promotion.name, exclude_id=promotion.id):
                raise DuplicatePromotionName(promotion.name)
            promotion.is_active = True

        self._promotion_repo.save(promotion, update_fields=["is_active"])
        log.info("promotion.toggled", is_active=promotion.is_active)
        return self._promotion_repo.get_by_id(promotion.id) or promotion

    @transaction.atomic
    def delete_promotion(self, promotion_id: Any) -> None:
        """Delete an inactive promotion; its image is removed after commit."""
        promotion = self._get_for_update(promotion_id)
        if promotion.is_active:
            raise PromotionCannotBeDeleted(
                f"Promotion {promotion.id} is active; deactivate it before deleting."
            )

        image_url = promotion.image_url
        self._promotion_repo.delete(promotion.id)
        logger.info("promotion.deleted", promotion_id=str(promotion.id))

        if image_url:
            transaction.on_commit(lambda: self._storage.delete(image_url))

    @transaction.atomic
    def upload_image(self, promotion_id: Any, upload: File) -> Promotion:
        """Store a new image and persist its URL; the previous file goes after commit."""
        _check_image(upload)
        promotion = self._get_for_update(promotion_id)

        previous_url = promotion.image_url
        promotion.image_url = self._storage.save(upload, IMAGE_UPLOAD_FOLDER, promotion.name)
        self._promotion_repo.save(promotion, update_fields=["image_url"])
        logger.info("promotion.image_uploaded", promotion_id=str(promotion.id))

        if previous_url:
            transaction.on_commit(lambda: self._storage.delete(previous_url))
        return self._promotion_repo.get_by_id(promotion.id) or promotion

    def deactivate_expired(self) -> int:
        """Deactivate every active TEMPORARY promotion whose ``ends_at`` passed.

        Each promotion is saved on its own; if a save fails the sweep stops,
        keeps what was already deactivated and reports how many it processed.
        """
        today = self.today()
        expired = self._promotion_repo.list_expired(today, active_only=True)
        log = logger.bind(today=today.isoformat(), candidates=len(expired))

        deactivated = 0
        for promotion in expired:
            promotion.is_active = False
            try:
                self._promotion_repo.save(promotion, update_fields=["is_active"])
            except DatabaseError as exc:
                log.error(
                    "promotion.expiry_sweep_failed",
                    promotion_id=str(promotion.id),
                    processed=deactivated,
                    error=str(exc),
                )
                break
            deactivated += 1
            log.info("promotion.deactivated", promotion_id=str(promotion.id))

        log.info("promotion.expiry_sweep_completed", deactivated=deactivated)
        return deactivated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_promotion(self, promotion_id: Any) -> Promotion:
        promotion = self._promotion_repo.get_by_id(promotion_id)
        if not promotion:
            raise PromotionNotFound(promotion_id)
        return promotion

    def search_by_name(self, name: str) -> List[Promotion]:
        return self._promotion_repo.search_active_by_name(name)

    def list_currently_valid(self) -> List[Promotion]:
        return self._promotion_repo.list_currently_valid(self.today())

    def list_active_by_product(self, product_id: Any) -> List[Promotion]:
        return self._promotion_repo.list_active_by_product(product_id)

    def list_expired(self) -> List[Promotion]:
        return self._promotion_repo.list_expired(self.today())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_for_update(self, promotion_id: Any) -> Promotion:
        promotion = self._promotion_repo.get_for_update(promotion_id)
        if not promotion:
            raise PromotionNotFound(promotion_id)
        return promotion

    def _resolve_products(self, product_ids: Iterable[Any]) -> List[Product]:
        wanted = {str(product_id) for product_id in product_ids}
        products = self._product_repo.get_many_by_ids(wanted)
        missing = wanted - {str(product.id) for product in products}
        if missing:
            raise ProductsNotFound(missing)
        return products


def _rule_set(rules: Optional[Iterable[WeeklyRuleDTO]]) -> WeeklyRuleSet:
    return WeeklyRuleSet(
        TimeWindow(day=str(rule.day_of_week), start=rule.start_time, end=rule.end_time)
        for rule in rules or ()
    )


def _check_image(upload: File) -> None:
    content_type = getattr(upload, "content_type", None)
    if content_type not in IMAGE_ALLOWED_CONTENT_TYPES:
        raise InvalidPromotionImage(
            f"Unsupported image type '{content_type}'. Allowed: {', '.join(sorted(IMAGE_ALLOWED_CONTENT_TYPES))}."
        )
    if upload.size is None or upload.size <= 0:
        raise InvalidPromotionImage("The image file is empty.")
    if upload.size > IMAGE_MAX_SIZE_BYTES:
        raise InvalidPromotionImage("The image exceeds the 5 MB limit.")
