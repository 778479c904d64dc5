"""Product repository interface.

Read-side contract used by the promotion and order services to resolve
product references.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List["Product"]:
        """List products with optional filters."""

    @abstractmethod
    def get_many_by_ids(self, ids: Iterable[Any]) -> List["Product"]:
        """Return the products whose id is in *ids*; unknown ids are skipped."""
