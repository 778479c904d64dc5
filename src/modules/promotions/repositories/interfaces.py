"""Promotion repository interface.

Extends ``IRepository[Promotion]`` with the look-ups the promotion
lifecycle needs.  Owned weekly rules are replaced explicitly through
``replace_weekly_rules`` (delete-then-insert), never by cascading saves.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import date
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.promotions.models import Promotion
    from modules.promotions.scheduling import TimeWindow


class IPromotionRepository(IRepository["Promotion"]):
    """Repository contract for the Promotion aggregate (promotion + weekly rules)."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> "Promotion":
        """Create a promotion with its products and weekly rules atomically.

        ``data`` keys: the scalar fields of ``Promotion`` plus ``products``
        (list of ``Product``) and ``weekly_rules`` (iterable of ``TimeWindow``).
        """

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional["Promotion"]:
        """Retrieve a promotion with a row-level lock; ``None`` if missing."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List["Promotion"]:
        """List promotions, newest first, with optional ORM filters."""

    @abstractmethod
    def save(self, entity: "Promotion", update_fields: Optional[Sequence[str]] = None) -> "Promotion":
        """Persist scalar fields of the promotion."""

    @abstractmethod
    def set_products(self, promotion: "Promotion", products: Iterable["Product"]) -> None:
        """Replace the promotion's product set."""

    @abstractmethod
    def replace_weekly_rules(self, promotion: "Promotion", windows: Iterable["TimeWindow"]) -> None:
        """Delete every weekly rule of *promotion*, then insert *windows*."""

    @abstractmethod
    def exists_active_with_name(self, name: str, exclude_id: Any = None) -> bool:
        """Case-insensitive name check among active promotions."""

    @abstractmethod
    def search_active_by_name(self, name: str) -> List["Promotion"]:
        """Active promotions whose name contains *name* (case-insensitive)."""

    @abstractmethod
    def list_currently_valid(self, today: date) -> List["Promotion"]:
        """Active promotions valid on *today* at day granularity."""

    @abstractmethod
    def list_active_by_product(self, product_id: Any) -> List["Promotion"]:
        """Active promotions that include the given product."""

    @abstractmethod
    def list_expired(self, today: date, active_only: bool = False) -> List["Promotion"]:
        """TEMPORARY promotions whose ``ends_at`` is before *today*."""
