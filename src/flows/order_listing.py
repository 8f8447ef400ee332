from __future__ import annotations

from enum import IntEnum
from typing import Awaitable, Callable, List, Optional

from api import calls
from api.models import Order, OrderIdPage
from api.transport import ApiError, TransportError
from utils.pure import page_count
from utils.token import ROLE_CUSTOMER

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
PAGE_SIZE_CHOICES = (10, 20, 50, 100)

ORDER_STATUS_TEXT = {
    0: "Pending",
    1: "Accepted",
    2: "Completed",
    3: "Cancelled",
}


class QueryOrderIdType(IntEnum):
    REQ_USER = 1  # orders the caller initiated
    RESP_USER = 2  # orders addressed to the caller


def query_type_for_role(user_type: Optional[int]) -> QueryOrderIdType:
    """Customers list what they placed, everybody else what they received."""
    if user_type == ROLE_CUSTOMER:
        return QueryOrderIdType.REQ_USER
    return QueryOrderIdType.RESP_USER


def describe_query_type(query_type: QueryOrderIdType) -> str:
    if query_type == QueryOrderIdType.REQ_USER:
        return "My Orders (placed by me)"
    return "My Orders (received by me)"


def clamp_page(page: Optional[int]) -> int:
    if page is None or page < 1:
        return DEFAULT_PAGE
    return page


def clamp_page_size(page_size: Optional[int]) -> int:
    if page_size is None or page_size < 1:
        return DEFAULT_PAGE_SIZE
    return min(page_size, MAX_PAGE_SIZE)


def order_status_text(status: int) -> str:
    return ORDER_STATUS_TEXT.get(status, f"Unknown status ({status})")


QueryIds = Callable[[int, int, int, int], Awaitable[OrderIdPage]]
QueryInfo = Callable[[str], Awaitable[Optional[Order]]]


class OrderListing:
    """
    Paged list of order ids for one user plus the detail of the selected one.

    The id list and the detail are fetched independently, each with its own
    loading flag, so a failed detail fetch never disturbs the list.
    """

    def __init__(
        self,
        user_id: int,
        user_type: Optional[int],
        query_ids: QueryIds = calls.query_order_ids,
        query_info: QueryInfo = calls.query_order_info,
    ) -> None:
        self.user_id = max(user_id or 0, 0)
        self.query_type = query_type_for_role(user_type)
        self._query_ids = query_ids
        self._query_info = query_info

        self.page = DEFAULT_PAGE
        self.page_size = DEFAULT_PAGE_SIZE
        self.total = 0
        self.order_ids: List[str] = []
        self.list_loading = False
        self.list_error = ""

        self.selected_id: Optional[str] = None
        self.detail: Optional[Order] = None
        self.detail_loading = False
        self.detail_error = ""

    @property
    def description(self) -> str:
        return describe_query_type(self.query_type)

    @property
    def page_count(self) -> int:
        return page_count(self.total, self.page_size)

    def change_page(self, page: int) -> bool:
        """Move to page; out of range requests leave the current page alone."""
        if page < 1 or page > self.page_count:
            return False
        self.page = page
        return True

    def change_page_size(self, page_size: int) -> bool:
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            return False
        self.page_size = page_size
        self.page = DEFAULT_PAGE
        return True

    async def load(self) -> List[str]:
        page = clamp_page(self.page)
        page_size = clamp_page_size(self.page_size)

        self.list_loading = True
        self.list_error = ""
        try:
            result = await self._query_ids(
                self.query_type, self.user_id, page, page_size
            )
        except (ApiError, TransportError) as e:
            self.list_error = f"Failed to load orders: {e}"
            return self.order_ids
        finally:
            self.list_loading = False

        self.order_ids = list(result.order_ids)
        self.total = result.total
        self.page = result.page or page
        self.page_size = result.page_size or page_size
        return self.order_ids

    async def select(self, order_id: str) -> Optional[Order]:
        self.selected_id = order_id
        self.detail_loading = True
        self.detail_error = ""
        try:
            self.detail = await self._query_info(order_id)
        except (ApiError, TransportError) as e:
            self.detail = None
            self.detail_error = f"Failed to load order detail: {e}"
        finally:
            self.detail_loading = False

        if self.detail is None and not self.detail_error:
            self.detail_error = "Order detail not found."
        return self.detail
