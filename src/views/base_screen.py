from typing import Callable, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Label,
    ListItem,
    ListView,
    LoadingIndicator,
    Markdown,
)

from utils.messages import ModeSwitchedMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import ConfirmDialogModal, QuitDialogModal


class Sidebar(Container):
    """
    User info, logout button and mode menu.

    Subscribes to the session store while mounted, so the logout button and the
    user info follow logins and logouts made anywhere in the app.
    """

    init_mode = ""

    def __init__(self) -> None:
        super().__init__()
        self._unsubscribe: Optional[Callable[[], None]] = None

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode
        self._unsubscribe = self.app.state.session.subscribe(self.handle_session_change)
        self.handle_session_change(self.app.state.session.is_logged_in())

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_session_change(self, logged_in: bool) -> None:
        self.query_one("#btn-logout").display = logged_in
        self.render_user_info()

    @work(exclusive=True, group="sidebar")
    async def render_user_info(self) -> None:
        identity = self.app.state.identity
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()

        if identity is None:
            await self.query_one(Markdown).update("*Not logged in*")
            return

        table_rows = [["User ID", identity.user_id], ["Role", identity.role_name]]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one(Markdown).update(md_table_str)

        modes = (
            self.app.MERCHANT_MODES if identity.is_merchant else self.app.CUSTOMER_MODES
        )
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.highlight_item(self.init_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.app.post_message(
                ModeSwitchedMessage(self.app.current_mode, selected_mode)
            )
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Are you sure you want to log out?")
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Storefront",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "Storefront"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                if k in self.app.MERCHANT_MODES:
                    self.sub_title = self.app.MERCHANT_MODES[k]
                elif k in self.app.CUSTOMER_MODES:
                    self.sub_title = self.app.CUSTOMER_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    async def require_identity(self):
        """
        Identity of the logged-in user, or None after sending the app back to
        login because the stored token is missing or unusable.
        """
        identity = await self.app.state.session.resolve_identity()
        if identity is None:
            self.notify("Your session has expired, please log in again.", severity="error")
            self.app.post_message(UserLogoutMessage())
        return identity

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())


class GateScreen(BaseScreen):
    """
    Placeholder shown behind the login screen while nobody is logged in.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Welcome", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield LoadingIndicator()
