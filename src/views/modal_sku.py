from typing import List, Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from api import calls
from api.models import Product, Sku
from api.transport import ApiError, TransportError
from flows.auth_forms import parse_sku_form
from utils.pure import format_price


class SkuModal(ModalScreen[None]):
    """
    SKU management for one product: list, create, and deduct stock.
    """

    def __init__(self, merchant_id: int, product: Product) -> None:
        super().__init__()
        self._merchant_id = merchant_id
        self._product = product
        self._skus: List[Sku] = []

    def compose(self) -> ComposeResult:
        with Vertical(id="div-sku"):
            yield Label(
                f"SKUs of product {self._product.id}: {self._product.name}",
                id="label-sku-title",
            )
            yield DataTable(id="table-skus")
            with Horizontal(id="hort-create-sku"):
                with Vertical():
                    yield Label("SKU Code")
                    yield Input(placeholder="red-XL", id="input-sku-code")
                with Vertical():
                    yield Label("Price (fen)")
                    yield Input(placeholder="9900", id="input-sku-price", type="integer")
                with Vertical():
                    yield Label("Stock")
                    yield Input(placeholder="100", id="input-sku-stock", type="integer")
                yield Button("Create SKU", id="btn-create-sku", variant="primary")
            with Horizontal(id="hort-deduct"):
                yield Label("Deduct from selected SKU:")
                yield Input(
                    "1",
                    id="input-deduct-count",
                    type="integer",
                    validators=[Number(minimum=1)],
                )
                yield Button("Deduct", id="btn-deduct", variant="warning")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("SKU ID", "Code", "Price", "Stock")
        self.load_skus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss()

    @work(exclusive=True, group="skus")
    async def load_skus(self) -> None:
        try:
            skus = await calls.list_skus(self._merchant_id, self._product.id)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to load SKUs: {e}", severity="error")
            return

        self._skus = skus
        table = self.query_one(DataTable)
        table.clear()
        for s in skus:
            table.add_row(s.id, s.sku_code, format_price(s.price), s.stock)

    def _selected_sku(self) -> Optional[Sku]:
        table = self.query_one(DataTable)
        if table.row_count == 0 or table.cursor_row is None:
            return None
        sku_id = int(table.get_row_at(table.cursor_row)[0])
        return next((s for s in self._skus if s.id == sku_id), None)

    @on(Button.Pressed, "#btn-create-sku")
    @work(exclusive=True)
    async def handle_create_sku(self) -> None:
        code_input = self.query_one("#input-sku-code", Input)
        price_input = self.query_one("#input-sku-price", Input)
        stock_input = self.query_one("#input-sku-stock", Input)

        msg, parsed = parse_sku_form(code_input.value, price_input.value, stock_input.value)
        if msg:
            self.notify(msg, severity="error")
            return
        sku_code, price, stock = parsed

        try:
            await calls.create_sku(
                self._merchant_id, self._product.id, sku_code, price, stock
            )
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to create SKU: {e}", severity="error")
            return

        code_input.value = ""
        price_input.value = ""
        stock_input.value = ""
        self.notify("SKU created.")
        self.load_skus()

    @on(Button.Pressed, "#btn-deduct")
    @work(exclusive=True)
    async def handle_deduct(self) -> None:
        sku = self._selected_sku()
        if sku is None:
            self.notify("Select a SKU first.", severity="warning")
            return

        count_input = self.query_one("#input-deduct-count", Input)
        if not count_input.is_valid or not count_input.value:
            self.notify("Deduct count must be at least 1.", severity="error")
            return
        count = int(count_input.value)
        if count > sku.stock:
            self.notify(f"Only {sku.stock} left in stock.", severity="error")
            return

        try:
            await calls.deduct_sku_stock(sku.id, count)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to deduct stock: {e}", severity="error")
            return

        self.notify(f"Deducted {count} from SKU {sku.sku_code}.")
        self.load_skus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss()
