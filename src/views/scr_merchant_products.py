from __future__ import annotations

from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label

from api import calls
from api.models import Product
from api.transport import ApiError, TransportError
from views.base_screen import BaseScreen
from views.modal_dialog import ConfirmDialogModal
from views.modal_sku import SkuModal


class MerchantProductsScreen(BaseScreen):
    """
    Merchants create, list and delete their products, and open a product's SKUs.
    """

    BINDINGS = [
        Binding("enter", "noop", "Manage SKUs", show=True, key_display="⏎"),
        Binding("delete", "delete_product", "Delete Product", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._merchant_id: Optional[int] = None
        self._products: List[Product] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("Merchant: -", id="label-merchant")
            with Horizontal(id="hort-create-product"):
                with Vertical():
                    yield Label("Product Name")
                    yield Input(placeholder="Product name", id="input-prod-name")
                with Vertical():
                    yield Label("Description")
                    yield Input(placeholder="Optional", id="input-prod-desc")
                yield Button("Create", id="btn-create", variant="primary")
            yield DataTable(id="table-products")
            with Horizontal(id="hort-table-control"):
                yield Button("Refresh", id="btn-refresh")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Description")

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh(self) -> None:
        self.load_products()

    @work(exclusive=True, group="products")
    async def load_products(self) -> None:
        identity = await self.require_identity()
        if identity is None:
            return
        self._merchant_id = identity.user_id
        self.query_one("#label-merchant", Label).update(
            f"Merchant: {self._merchant_id}"
        )

        try:
            products = await calls.list_products(self._merchant_id)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to load products: {e}", severity="error")
            return

        self._products = products
        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(p.id, p.name, p.desc or "-", key=str(p.id))
        if not products:
            self.notify("No products yet.", severity="information")

    @on(Button.Pressed, "#btn-create")
    @work(exclusive=True)
    async def handle_create(self) -> None:
        if not self._merchant_id:
            self.notify("Merchant unknown, please log in again.", severity="error")
            return

        name_input = self.query_one("#input-prod-name", Input)
        desc_input = self.query_one("#input-prod-desc", Input)
        name = name_input.value.strip()
        if not name:
            name_input.focus()
            name_input.add_class("-invalid")
            self.notify("Product name cannot be empty.", severity="error")
            return

        try:
            await calls.create_product(self._merchant_id, name, desc_input.value.strip())
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to create product: {e}", severity="error")
            return

        name_input.value = ""
        desc_input.value = ""
        name_input.remove_class("-invalid")
        self.notify("Product created.")
        self.load_products()

    def _selected_product(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0 or table.cursor_row is None:
            return None
        pid = int(table.get_row_at(table.cursor_row)[0])
        return next((p for p in self._products if p.id == pid), None)

    @on(DataTable.RowSelected)
    @work()
    async def handle_open_skus(self) -> None:
        product = self._selected_product()
        if product is None:
            return
        await self.app.push_screen_wait(SkuModal(self._merchant_id, product))

    def action_delete_product(self) -> None:
        self.handle_delete()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        product = self._selected_product()
        if product is None:
            self.notify("Select a product first.", severity="warning")
            return

        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"Delete product '{product.name}'?", tone="error")
        ):
            return

        try:
            await calls.delete_product(self._merchant_id, product.id)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to delete product: {e}", severity="error")
            return

        self.notify("Product deleted.")
        self.load_products()
