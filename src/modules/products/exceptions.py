"""Product lookup errors raised to promotion and order services."""

from __future__ import annotations

from typing import Iterable

from shared.domain.errors import NotFound


class ProductsNotFound(NotFound):
    """One or more referenced products do not exist."""

    code = "products_not_found"

    def __init__(self, missing_ids: Iterable[object]) -> None:
        self.missing_ids = sorted(str(product_id) for product_id in missing_ids)
        super().__init__(f"Products not found: {', '.join(self.missing_ids)}")
