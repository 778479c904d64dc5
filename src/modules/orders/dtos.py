"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2, immutable
(``frozen=True``).

An order item is a tagged union on ``type``: a PRODUCT item carries
``product_id`` and a PROMOTION item carries ``promotion_id``, so an item
can never reference both or neither.

Emptiness of ``items`` and the sign of ``tip`` are business rules and
are checked by ``OrderService``, which raises domain errors for them.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class ProductItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["PRODUCT"] = "PRODUCT"
    product_id: UUID
    quantity: int = Field(ge=1)


class PromotionItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["PROMOTION"] = "PROMOTION"
    promotion_id: UUID
    quantity: int = Field(ge=1)


OrderItemDTO = Annotated[Union[ProductItemDTO, PromotionItemDTO], Field(discriminator="type")]


class CreateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: List[OrderItemDTO] = Field(default_factory=list)
    tip: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)


class UpdateOrderDTO(CreateOrderDTO):
    """Full replacement of items and tip."""


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderStatisticsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_orders: int
    active_orders: int
    by_status: Dict[str, int]
    delivered_revenue: Decimal
