from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import AppFocus
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import (
    ModeSwitchedMessage,
    OrderCreatedMessage,
    QuitRequestedMessage,
    SessionChangedMessage,
    UserLogoutMessage,
)
from utils.state import GlobalState
from views.base_screen import GateScreen
from views.scr_browse import BrowseScreen
from views.scr_login import LoginScreen
from views.scr_merchant_products import MerchantProductsScreen
from views.scr_orders import OrdersScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "gate": GateScreen,
        "browse": BrowseScreen,
        "orders": OrdersScreen,
        "products": MerchantProductsScreen,
    }

    MERCHANT_MODES = {"products": "Product Management", "orders": "My Orders"}
    CUSTOMER_MODES = {"browse": "Browse Merchants", "orders": "My Orders"}

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/browse.tcss",
        "styles/orders.tcss",
        "styles/products.tcss",
        "styles/modals.tcss",
    ]

    state: GlobalState

    def __init__(self):
        super().__init__()
        self.state = GlobalState()
        self._awaiting_login = False
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self._unsubscribe = self.state.session.subscribe(self.handle_session_broadcast)
        await self.state.session.refresh()
        self.main_flow()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()

    def handle_session_broadcast(self, logged_in: bool) -> None:
        self.post_message(SessionChangedMessage(logged_in))

    async def on_app_focus(self, event: AppFocus) -> None:
        # another client sharing the storage file may have logged in or out
        await self.state.session.reconcile()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(SessionChangedMessage)
    def handle_session_changed(self, message: SessionChangedMessage) -> None:
        _logger.debug(f"session changed, logged_in={message.logged_in}")
        if not message.logged_in and not self._awaiting_login:
            self.main_flow()

    @on(UserLogoutMessage)
    @work(exclusive=True, group="logout")
    async def handle_user_logout(self):
        if not self.state.session.is_logged_in():
            return
        await self.state.session.logout()
        self.notify("Logout successful.")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @on(OrderCreatedMessage)
    async def handle_order_created(self, message: OrderCreatedMessage) -> None:
        self.state.pending_order_id = message.order_id
        self.post_message(ModeSwitchedMessage(self.current_mode, "orders"))
        await self.switch_mode("orders")

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage) -> None:
        _logger.debug(f"mode {message.old_mode} -> {message.new_mode}")

    @work(exclusive=True, group="main_flow")
    async def main_flow(self):
        self._awaiting_login = True
        try:
            await self.switch_mode("gate")
            identity = await self.state.session.resolve_identity()
            while identity is None:
                await self.push_screen_wait(LoginScreen())
                identity = self.state.identity
        finally:
            self._awaiting_login = False

        target = "products" if identity.is_merchant else "browse"
        self.post_message(ModeSwitchedMessage(self.current_mode, target))
        await self.switch_mode(target)


def main():
    app = StorefrontApp()
    app.run()


if __name__ == "__main__":
    main()
