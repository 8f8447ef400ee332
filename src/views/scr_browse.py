from __future__ import annotations

from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Label, OptionList
from textual.widgets.option_list import Option

from api import calls
from api.models import Merchant, Product, Sku
from api.transport import ApiError, TransportError
from utils.messages import OrderCreatedMessage
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_order_commit import OrderCommitModal


class BrowseScreen(BaseScreen):
    """
    Customers pick a merchant, then a product, then order one of its SKUs.
    """

    BINDINGS = [
        Binding("enter", "noop", "Select / Order", show=True, key_display="⏎"),
        Binding("r", "reload", "Reload Merchants", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._merchants: List[Merchant] = []
        self._products: List[Product] = []
        self._skus: List[Sku] = []
        self._merchant_id: Optional[int] = None
        self._product_id: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-browse"):
            with Vertical(id="div-merchants"):
                yield Label("Merchants")
                yield OptionList(id="optlist-merchants")
            with Vertical(id="div-catalog"):
                yield Label("Select a merchant to see its products.", id="label-products")
                yield DataTable(id="table-products")
                yield Label("", id="label-skus")
                yield DataTable(id="table-skus")

    def on_mount(self) -> None:
        products = self.query_one("#table-products", DataTable)
        products.cursor_type = "row"
        products.zebra_stripes = True
        products.add_columns("ID", "Name", "Description")

        skus = self.query_one("#table-skus", DataTable)
        skus.cursor_type = "row"
        skus.zebra_stripes = True
        skus.add_columns("SKU ID", "Code", "Price", "Stock", "")

        self.load_merchants()

    def action_reload(self) -> None:
        self.load_merchants()

    @work(exclusive=True, group="merchants")
    async def load_merchants(self) -> None:
        try:
            merchants = await calls.list_merchants()
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to load merchants: {e}", severity="error")
            return

        self._merchants = merchants
        opt_list = self.query_one("#optlist-merchants", OptionList)
        opt_list.clear_options()
        opt_list.add_options(
            [
                Option(f"{m.id} {m.name}" if m.name else str(m.id), id=str(m.id))
                for m in merchants
            ]
        )
        if not merchants:
            self.notify("No merchants yet.", severity="information")

    @on(OptionList.OptionSelected, "#optlist-merchants")
    def handle_select_merchant(self, message: OptionList.OptionSelected) -> None:
        self._merchant_id = int(message.option.id)
        self._product_id = None
        self._skus = []
        self.query_one("#table-skus", DataTable).clear()
        self.query_one("#label-skus", Label).update("")
        self.load_products(self._merchant_id)

    @work(exclusive=True, group="products")
    async def load_products(self, merchant_id: int) -> None:
        try:
            products = await calls.list_products(merchant_id)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to load products: {e}", severity="error")
            return

        self._products = products
        table = self.query_one("#table-products", DataTable)
        table.clear()
        for p in products:
            table.add_row(p.id, p.name, p.desc or "-")
        self.query_one("#label-products", Label).update(
            f"Products of merchant {merchant_id}"
            if products
            else f"Merchant {merchant_id} has no products."
        )

    @on(DataTable.RowSelected, "#table-products")
    def handle_select_product(self, message: DataTable.RowSelected) -> None:
        row = message.data_table.get_row(message.row_key)
        self._product_id = int(row[0])
        self.load_skus(self._product_id)

    @work(exclusive=True, group="skus")
    async def load_skus(self, product_id: int) -> None:
        if not self._merchant_id:
            self.notify("Select a merchant first.", severity="warning")
            return
        try:
            skus = await calls.list_skus(self._merchant_id, product_id)
        except (ApiError, TransportError) as e:
            self.notify(f"Failed to load SKUs: {e}", severity="error")
            return

        self._skus = skus
        table = self.query_one("#table-skus", DataTable)
        table.clear()
        for s in skus:
            table.add_row(
                s.id,
                s.sku_code,
                format_price(s.price),
                s.stock,
                "Order" if s.stock > 0 else "Out of stock",
            )
        self.query_one("#label-skus", Label).update(
            f"SKUs of product {product_id}" if skus else "This product has no SKUs."
        )

    @on(DataTable.RowSelected, "#table-skus")
    @work()
    async def handle_order_sku(self, message: DataTable.RowSelected) -> None:
        sku_id = int(message.data_table.get_row(message.row_key)[0])
        sku = next((s for s in self._skus if s.id == sku_id), None)
        if sku is None:
            return
        if sku.stock <= 0:
            self.notify("This SKU is out of stock.", severity="warning")
            return

        product = next((p for p in self._products if p.id == sku.product_id), None)
        drafts = self.app.state.drafts
        draft_id = drafts.create(
            product_id=sku.product_id,
            product_name=product.name if product else "",
            sku_id=sku.id,
            sku_code=sku.sku_code,
            price=sku.price,
            stock=sku.stock,
            merchant_id=self._merchant_id,
        )
        try:
            order_id = await self.app.push_screen_wait(OrderCommitModal(draft_id))
        finally:
            drafts.discard(draft_id)

        if order_id:
            self.app.post_message(OrderCreatedMessage(order_id))
