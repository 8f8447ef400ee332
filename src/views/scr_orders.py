import json
from datetime import datetime
from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer, Select

from api.models import Order
from flows.order_listing import (
    PAGE_SIZE_CHOICES,
    OrderListing,
    order_status_text,
    query_type_for_role,
)
from utils.pure import format_price
from views.base_screen import BaseScreen


def _format_time(value: str) -> str:
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


class OrdersScreen(BaseScreen):
    """
    Order ids of the logged-in user, paginated, with the selected order's detail.

    Customers see the orders they placed, merchants the orders they received.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self.listing: Optional[OrderListing] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("My Orders", id="label-orders-title")
            yield DataTable(id="table-orders")
            with Horizontal(id="hort-table-control"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("<<", id="btn-first")
                yield Button("<", id="btn-prev")
                yield Input("1", id="input-page", type="integer")
                yield Label(" / 0", id="label-total-page-cnt")
                yield Button(">", id="btn-next")
                yield Button(">>", id="btn-last")
                yield Select(
                    [(f"{n} / page", n) for n in PAGE_SIZE_CHOICES],
                    value=20,
                    allow_blank=False,
                    id="select-page-size",
                )
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order ID")

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh(self) -> None:
        self.reload()

    @work(exclusive=True, group="orders")
    async def reload(self) -> None:
        identity = await self.require_identity()
        if identity is None:
            return

        # role may differ from the last user of this screen
        if (
            self.listing is None
            or self.listing.user_id != identity.user_id
            or self.listing.query_type != query_type_for_role(identity.user_type)
        ):
            self.listing = OrderListing(identity.user_id, identity.user_type)
            self.query_one("#select-page-size", Select).value = self.listing.page_size
        self.query_one("#label-orders-title", Label).update(self.listing.description)

        await self._load_ids()

        pending = self.app.state.take_pending_order()
        if pending:
            self._load_detail(pending)

    async def _load_ids(self) -> None:
        table = self.query_one(DataTable)
        table.loading = True
        await self.listing.load()
        table.loading = False

        if self.listing.list_error:
            self.notify(self.listing.list_error, severity="error")

        table.clear()
        for order_id in self.listing.order_ids:
            table.add_row(order_id, key=order_id)
        self._refresh_controls()
        if not self.listing.order_ids:
            await self._render_detail(None, "No orders yet.")
        elif self.listing.selected_id is None:
            await self._render_detail(None, "Select an order id to view its details.")

    def _refresh_controls(self) -> None:
        listing = self.listing
        last = listing.page_count
        self.query_one("#input-page", Input).value = str(listing.page)
        self.query_one("#label-total-page-cnt", Label).update(
            f" / {last}  ({listing.total} orders)"
        )
        at_first = listing.page <= 1
        at_last = listing.page >= last
        self.query_one("#btn-first", Button).disabled = at_first
        self.query_one("#btn-prev", Button).disabled = at_first
        self.query_one("#btn-next", Button).disabled = at_last
        self.query_one("#btn-last", Button).disabled = at_last

    @work(exclusive=True, group="orders")
    async def go_to_page(self, page: int) -> None:
        if self.listing is None:
            return
        if not self.listing.change_page(page):
            self._refresh_controls()
            return
        await self._load_ids()

    @on(Button.Pressed, "#btn-first")
    def handle_first(self) -> None:
        self.go_to_page(1)

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        if self.listing:
            self.go_to_page(self.listing.page - 1)

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        if self.listing:
            self.go_to_page(self.listing.page + 1)

    @on(Button.Pressed, "#btn-last")
    def handle_last(self) -> None:
        if self.listing:
            self.go_to_page(self.listing.page_count)

    @on(Input.Submitted, "#input-page")
    def handle_page_input(self, ev: Input.Submitted) -> None:
        if ev.value and ev.value.isdigit():
            self.go_to_page(int(ev.value))

    @on(Select.Changed, "#select-page-size")
    @work(exclusive=True, group="orders")
    async def handle_page_size(self, ev: Select.Changed) -> None:
        if self.listing is None or ev.value == self.listing.page_size:
            return
        if self.listing.change_page_size(int(ev.value)):
            await self._load_ids()

    @on(DataTable.RowSelected)
    def handle_select_order(self, ev: DataTable.RowSelected) -> None:
        self._load_detail(ev.row_key.value)

    @work(exclusive=True, group="detail")
    async def _load_detail(self, order_id: str) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        viewer.loading = True
        order = await self.listing.select(order_id)
        viewer.loading = False
        if order is None:
            self.notify(self.listing.detail_error, severity="error")
        await self._render_detail(order, self.listing.detail_error)

    async def _render_detail(self, order: Optional[Order], hint: str = "") -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            await viewer.document.update(f"### {hint or 'No order selected.'}")
            return

        header = (
            f"### Order {order.id}\n\n"
            f"- Type: {order.type}\n"
            f"- Status: {order_status_text(order.status)}\n"
            f"- Placed by: {order.req_user_id}\n"
            f"- Received by: {order.resp_user_id}\n"
            f"- Created: {_format_time(order.created_at)}\n"
            f"- Updated: {_format_time(order.updated_at)}\n"
            f"- Extra: `{json.dumps(order.ext, ensure_ascii=False)}`\n\n"
        )
        if not order.items:
            await viewer.document.update(header + "*No line items.*")
            return

        rows = [
            "| Product | SKU | Qty | Unit Price | Line Total | Extra |",
            "|---:|---:|---:|---:|---:|:---|",
        ]
        for it in order.items:
            rows.append(
                f"| {it.product_id} | {it.sku_id} | {it.count} "
                f"| {format_price(it.price)} | {format_price(it.price * it.count)} "
                f"| `{json.dumps(it.ext, ensure_ascii=False)}` |"
            )
        grand_total = sum(it.price * it.count for it in order.items)
        footer = f"\n\n**Grand Total:** {format_price(grand_total)}"
        await viewer.document.update(header + "\n".join(rows) + footer)
