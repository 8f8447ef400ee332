from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import (
    Button,
    Input,
    Label,
    RadioButton,
    RadioSet,
    TabbedContent,
    TabPane,
)

from api import calls
from api.transport import ApiError, TransportError
from flows.auth_forms import (
    CAPTCHA_BIZ_REGISTER,
    CAPTCHA_COOLDOWN,
    TARGET_EMAIL,
    TARGET_PHONE,
    login_target_type,
    target_label,
    validate_captcha_request,
    validate_login,
    validate_registration,
)
from utils.logger import get_logger
from utils.token import ROLE_CUSTOMER, ROLE_MERCHANT
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, QuitDialogModal

_logger = get_logger(__name__)


def _target_type(radio_set: RadioSet) -> int:
    return TARGET_EMAIL if radio_set.pressed_index == 1 else TARGET_PHONE


class LoginScreen(BaseScreen):
    """
    Login and sign up. Dismisses once a token has been stored.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)
        self._captcha_countdown = 0
        self._captcha_timer = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    with RadioSet(id="radio-login-target"):
                        yield RadioButton("Phone", value=True)
                        yield RadioButton("Email")
                    yield Label("Phone", id="label-login-target")
                    yield Input(placeholder="13800000000", id="input-login-target")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    with RadioSet(id="radio-reg-target"):
                        yield RadioButton("Phone", value=True)
                        yield RadioButton("Email")
                    yield Label("Phone", id="label-reg-target")
                    yield Input(placeholder="13800000000", id="input-reg-target")
                    yield Label("Username")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Password")
                    yield Input(
                        placeholder="at least 6 characters",
                        password=True,
                        id="input-reg-pwd",
                    )
                    yield Label("Confirm Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-reg-pwd2"
                    )
                    yield Label("Captcha")
                    with Horizontal(id="div-reg-captcha"):
                        yield Input(placeholder="123456", id="input-reg-captcha")
                        yield Button("Send Captcha", id="btn-captcha")
                    yield Label("Account Type")
                    with RadioSet(id="radio-reg-usertype"):
                        yield RadioButton("Customer")
                        yield RadioButton("Merchant", value=True)
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-target").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        if event.key == "enter" and self.focused == self.query_one(
            "#input-reg-captcha"
        ):
            self.handle_registration_submit()

    @on(RadioSet.Changed, "#radio-login-target")
    def handle_login_target_change(self, event: RadioSet.Changed) -> None:
        target_type = _target_type(event.radio_set)
        self.query_one("#label-login-target", Label).update(target_label(target_type))
        target_input = self.query_one("#input-login-target", Input)
        target_input.value = ""
        target_input.placeholder = (
            "13800000000" if target_type == TARGET_PHONE else "user@example.com"
        )

    @on(RadioSet.Changed, "#radio-reg-target")
    def handle_reg_target_change(self, event: RadioSet.Changed) -> None:
        target_type = _target_type(event.radio_set)
        self.query_one("#label-reg-target", Label).update(target_label(target_type))
        target_input = self.query_one("#input-reg-target", Input)
        target_input.value = ""
        target_input.placeholder = (
            "13800000000" if target_type == TARGET_PHONE else "user@example.com"
        )

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        target_type = _target_type(self.query_one("#radio-login-target", RadioSet))
        target = self.query_one("#input-login-target", Input).value.strip()
        pwd_input = self.query_one("#input-login-pwd", Input)
        pwd = pwd_input.value

        msg = validate_login(target_type, target, pwd)
        if msg:
            self.notify(msg, severity="error")
            return

        btn = self.query_one("#btn-login", Button)
        btn.disabled = True
        try:
            token = await calls.login(target, login_target_type(target_type), pwd)
        except ApiError as e:
            self.notify(f"Login failed: {e.msg}", severity="error")
            pwd_input.value = ""
            pwd_input.focus()
            pwd_input.add_class("-invalid")
            return
        except TransportError:
            self.notify("Login failed: network error.", severity="error")
            return
        finally:
            btn.disabled = False

        if not token:
            self.notify("Login failed: no token was issued.", severity="error")
            return

        identity = await self.app.state.session.sign_in(token)
        if identity is None:
            _logger.warning("Issued token carries no usable identity.")
            await self.app.state.session.logout()
            self.notify("Login failed: the issued token is unreadable.", severity="error")
            return
        self.notify(f"Welcome, user {identity.user_id}!")
        self.dismiss()

    @on(Button.Pressed, "#btn-captcha")
    @work(exclusive=True, group="captcha")
    async def handle_send_captcha(self) -> None:
        target_type = _target_type(self.query_one("#radio-reg-target", RadioSet))
        target = self.query_one("#input-reg-target", Input).value.strip()

        msg = validate_captcha_request(target_type, target)
        if msg:
            self.notify(msg, severity="error")
            return

        btn = self.query_one("#btn-captcha", Button)
        btn.disabled = True
        try:
            await calls.generate_captcha(target_type, target, CAPTCHA_BIZ_REGISTER)
        except ApiError as e:
            self.notify(f"Failed to send captcha: {e.msg}", severity="error")
            btn.disabled = False
            return
        except TransportError:
            self.notify("Failed to send captcha: network error.", severity="error")
            btn.disabled = False
            return

        self.notify(f"Captcha sent to {target_label(target_type).lower()} {target}.")
        self._captcha_countdown = CAPTCHA_COOLDOWN
        btn.label = f"Resend in {self._captcha_countdown}s"
        self._captcha_timer = self.set_interval(1.0, self._tick_captcha)

    def _tick_captcha(self) -> None:
        btn = self.query_one("#btn-captcha", Button)
        self._captcha_countdown -= 1
        if self._captcha_countdown <= 0:
            self._captcha_timer.stop()
            self._captcha_timer = None
            btn.label = "Send Captcha"
            btn.disabled = False
        else:
            btn.label = f"Resend in {self._captcha_countdown}s"

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        target_type = _target_type(self.query_one("#radio-reg-target", RadioSet))
        target = self.query_one("#input-reg-target", Input).value.strip()
        username = self.query_one("#input-reg-name", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value
        pwd2 = self.query_one("#input-reg-pwd2", Input).value
        captcha = self.query_one("#input-reg-captcha", Input).value.strip()
        user_type = (
            ROLE_CUSTOMER
            if self.query_one("#radio-reg-usertype", RadioSet).pressed_index == 0
            else ROLE_MERCHANT
        )

        msg = validate_registration(
            target_type, target, username, pwd, pwd2, captcha, user_type
        )
        if msg:
            self.notify(msg, severity="error")
            return

        btn = self.query_one("#btn-reg", Button)
        btn.disabled = True
        try:
            await calls.register(username, target, target_type, pwd, captcha, user_type)
        except ApiError as e:
            self.notify(f"Registration failed: {e.msg}", severity="error")
            return
        except TransportError:
            self.notify("Registration failed: network error.", severity="error")
            return
        finally:
            btn.disabled = False

        await self.app.push_screen_wait(
            DialogModal("Registration successful. Please log in.")
        )

        # carry the credentials over to the login tab
        self.get_child_by_type(TabbedContent).active = "tab-login"
        if _target_type(self.query_one("#radio-login-target", RadioSet)) == target_type:
            self.query_one("#input-login-target", Input).value = target
        input_login_pwd = self.query_one("#input-login-pwd", Input)
        input_login_pwd.value = pwd
        input_login_pwd.focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
