from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, MarkdownViewer

from flows.order_commit import ENTRY_ERROR_DELAY, CommitPhase, OrderCommitFlow
from utils.pure import format_price, generate_markdown_table


class OrderCommitModal(ModalScreen[Optional[str]]):
    """
    Order confirmation for a single SKU.
    Returns the created order id, or None if the user backed out.
    """

    def __init__(self, draft_id: Optional[str]) -> None:
        super().__init__()
        self._draft_id = draft_id
        self.flow: Optional[OrderCommitFlow] = None

    def compose(self) -> ComposeResult:
        with Vertical(id="div-order-commit"):
            yield Label("", id="label-order-error")
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal(id="hort-qty"):
                yield Label("Quantity")
                yield Button("-", id="btn-sub-qty")
                yield Label("1", id="label-order-qty")
                yield Button("+", id="btn-add-qty")
                yield Label("", id="label-remaining")
            yield Label("", id="label-order-total")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self) -> None:
        self.flow = OrderCommitFlow(self.app.state.drafts.get(self._draft_id))

        if self.flow.phase == CommitPhase.ERROR:
            self.query_one("#hort-qty").display = False
            self.query_one("#btn-submit").display = False
            self.query_one("#label-order-total").update("Going back...")
            self._render_state()
            self.set_timer(ENTRY_ERROR_DELAY, self._back_after_error)
            return

        draft = self.flow.draft
        rows = [
            ["Product", draft.product_name or "-"],
            ["Product ID", draft.product_id],
            ["Merchant ID", draft.merchant_id or "unknown"],
            ["SKU Code", draft.sku_code],
            ["SKU ID", draft.sku_id],
            ["Unit Price", format_price(draft.price)],
            ["Stock", draft.stock],
        ]
        md = "### Confirm Order\n\n" + generate_markdown_table(
            ["Attribute", "Value"], rows, ["l", "l"]
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self._render_state()
        self.query_one("#btn-add-qty").focus()

    def _back_after_error(self) -> None:
        if self.is_attached:
            self.dismiss(None)

    def _render_state(self) -> None:
        flow = self.flow
        editing = flow.phase == CommitPhase.EDITING

        error_label = self.query_one("#label-order-error", Label)
        error_label.update(flow.error)
        error_label.display = bool(flow.error)

        if flow.phase == CommitPhase.ERROR:
            return

        self.query_one("#label-order-qty", Label).update(str(flow.quantity))
        self.query_one("#label-remaining", Label).update(
            f"{flow.remaining_stock} left in stock"
        )
        self.query_one("#label-order-total", Label).update(
            f"Order Total: {format_price(flow.total_price)}"
        )
        self.query_one("#btn-sub-qty", Button).disabled = not flow.can_decrement
        self.query_one("#btn-add-qty", Button).disabled = not flow.can_increment
        self.query_one("#btn-quit", Button).disabled = not editing
        submit = self.query_one("#btn-submit", Button)
        submit.disabled = not editing
        submit.label = (
            "Placing Order..." if flow.phase == CommitPhase.SUBMITTING else "Place Order"
        )

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape" and self.flow and self.flow.phase != CommitPhase.SUBMITTING:
            self.dismiss(None)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self) -> None:
        self.flow.increment()
        self._render_state()

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self) -> None:
        self.flow.decrement()
        self._render_state()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self) -> None:
        submit = self.query_one("#btn-submit", Button)
        submit.disabled = True
        submit.label = "Placing Order..."
        order_id = await self.flow.submit()
        self._render_state()

        if order_id:
            self.notify(f"Order placed. Your order id is {order_id}.")
            self.dismiss(order_id)
