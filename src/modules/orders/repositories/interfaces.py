"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the order lifecycle
needs: atomic creation with items, explicit item replacement
(delete-then-insert), row locking and the statistics queries.

The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root (order + items)."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> "Order":
        """Create an order with its items atomically.

        ``data`` holds the ``Order`` fields plus ``items``: a list of dicts
        with ``item_type``, ``product``, ``promotion``, ``item_name``,
        ``quantity``, ``unit_price`` and ``line_total``.
        """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional["Order"]:
        """Retrieve an order with its user and items."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional["Order"]:
        """Retrieve an order with a row-level lock; ``None`` if missing."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List["Order"]:
        """List orders, newest first, with optional ORM filters."""

    @abstractmethod
    def save(self, entity: "Order", update_fields: Optional[Sequence[str]] = None) -> "Order":
        """Persist scalar fields of the order."""

    @abstractmethod
    def replace_items(self, order: "Order", items: List[Dict[str, Any]]) -> None:
        """Delete every item of *order*, then insert *items*."""

    @abstractmethod
    def count_active_for_user(self, user_id: Any) -> int:
        """Number of the user's orders in PENDING or IN_PREPARATION."""

    @abstractmethod
    def list_active(self) -> List["Order"]:
        """Every order in PENDING or IN_PREPARATION, oldest first."""

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]:
        """Order count per status (statuses without orders are omitted)."""

    @abstractmethod
    def delivered_revenue(self) -> Decimal:
        """Sum of ``total`` over DELIVERED orders."""
