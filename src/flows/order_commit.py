"""
Single-line order placement.

A browsing screen turns the selected product + SKU into an OrderDraft, parks it
in the DraftRegistry and hands only the draft id to the commit view. The view
drives an OrderCommitFlow, which owns the quantity, validation and the
create-order call.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from api import calls
from api.transport import ApiError, TransportError
from utils.logger import get_logger

_logger = get_logger(__name__)

# seconds the commit view shows an entry error before going back
ENTRY_ERROR_DELAY = 3.0

ORDER_TYPE_PURCHASE = 1
ORDER_STATUS_NEW = 1


@dataclass(frozen=True)
class OrderDraft:
    product_id: int
    product_name: str
    sku_id: int
    sku_code: str
    price: int  # unit price in fen
    stock: int
    merchant_id: Optional[int]
    draft_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class DraftRegistry:
    """Short-lived drafts, looked up by id instead of travelling with the view."""

    def __init__(self) -> None:
        self._drafts: Dict[str, OrderDraft] = {}

    def create(self, **fields) -> str:
        draft = OrderDraft(**fields)
        self._drafts[draft.draft_id] = draft
        return draft.draft_id

    def get(self, draft_id: Optional[str]) -> Optional[OrderDraft]:
        if draft_id is None:
            return None
        return self._drafts.get(draft_id)

    def discard(self, draft_id: Optional[str]) -> None:
        self._drafts.pop(draft_id, None)

    def __len__(self) -> int:
        return len(self._drafts)


class CommitPhase(Enum):
    ERROR = "error"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


CreateOrder = Callable[[Dict[str, Any]], Awaitable[str]]


class OrderCommitFlow:
    def __init__(
        self,
        draft: Optional[OrderDraft],
        create_order: CreateOrder = calls.create_order,
    ) -> None:
        self.draft = draft
        self._create_order = create_order
        self.quantity = 1
        self.error = ""
        self.order_id: Optional[str] = None

        if draft is None or not draft.product_id or not draft.sku_id:
            self.phase = CommitPhase.ERROR
            self.error = "Order details are missing. Open this page from a product SKU."
        else:
            self.phase = CommitPhase.EDITING

    @property
    def total_price(self) -> int:
        if self.draft is None:
            return 0
        return self.draft.price * self.quantity

    @property
    def remaining_stock(self) -> int:
        if self.draft is None:
            return 0
        return self.draft.stock - self.quantity

    @property
    def can_increment(self) -> bool:
        return (
            self.phase == CommitPhase.EDITING
            and self.draft is not None
            and self.quantity < self.draft.stock
        )

    @property
    def can_decrement(self) -> bool:
        return self.phase == CommitPhase.EDITING and self.quantity > 1

    def increment(self) -> bool:
        if self.phase != CommitPhase.EDITING:
            return False
        if self.quantity >= self.draft.stock:
            self.error = f"You can buy at most {self.draft.stock} of this item."
            return False
        self.quantity += 1
        self.error = ""
        return True

    def decrement(self) -> bool:
        if self.phase != CommitPhase.EDITING:
            return False
        if self.quantity <= 1:
            self.error = "Quantity cannot be less than 1."
            return False
        self.quantity -= 1
        self.error = ""
        return True

    def validate(self) -> str:
        """Return an error message, or "" if the draft can be submitted."""
        draft = self.draft
        if (
            draft is None
            or not draft.product_id
            or not draft.sku_id
            or not draft.merchant_id
        ):
            return "Order details are incomplete, cannot create the order."
        if self.quantity < 1 or self.quantity > draft.stock:
            return f"Quantity must be between 1 and {draft.stock}."
        return ""

    def build_request(self) -> Dict[str, Any]:
        draft = self.draft
        return {
            "type": ORDER_TYPE_PURCHASE,
            "status": ORDER_STATUS_NEW,
            "resp_user_id": draft.merchant_id,
            "items": [
                {
                    "product_id": draft.product_id,
                    "sku_id": draft.sku_id,
                    "count": self.quantity,
                    "price": draft.price,
                    "ext": {
                        "merchantId": str(draft.merchant_id),
                        "skuCode": draft.sku_code,
                        "productName": draft.product_name,
                    },
                }
            ],
            "ext": {"orderType": str(ORDER_TYPE_PURCHASE)},
        }

    async def submit(self) -> Optional[str]:
        """
        Validate and create the order.
        Returns the new order id, or None with self.error set.
        """
        if self.phase != CommitPhase.EDITING:
            return None

        self.error = self.validate()
        if self.error:
            return None

        self.phase = CommitPhase.SUBMITTING
        try:
            order_id = await self._create_order(self.build_request())
        except ApiError as e:
            self.error = f"Order creation failed: {e.msg or 'unknown error'}"
            self.phase = CommitPhase.EDITING
            return None
        except TransportError:
            self.error = "Order creation failed: network error, please try again."
            self.phase = CommitPhase.EDITING
            return None

        if not order_id:
            self.error = "Order creation failed: unknown error"
            self.phase = CommitPhase.EDITING
            return None

        _logger.info(f"Order {order_id} created for SKU {self.draft.sku_id}.")
        self.order_id = order_id
        self.phase = CommitPhase.SUBMITTED
        return order_id
