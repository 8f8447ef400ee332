from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    Posted when the user asks to log out, or when the stored token turned out
    to be unusable. The app clears the session and shows the login screen.
    """

    bubble = True


class SessionChangedMessage(Message):
    """
    Posted at app level whenever the session store broadcasts.
    """

    bubble = True

    def __init__(self, logged_in: bool) -> None:
        super().__init__()
        self.logged_in = logged_in


class OrderCreatedMessage(Message):
    """
    Fired when a new order is created.
    Listened to by the orders screen.
    """

    bubble = True

    def __init__(self, order_id: str) -> None:
        super().__init__()
        self.order_id = order_id


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
