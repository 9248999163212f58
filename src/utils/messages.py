from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when user logged in, so the screen can refresh
    """

    bubble = True


class DataChangedMessage(Message):
    """
    Fired after any store mutation (client, product, quotation, request...).
    Listened to by the dashboard and every list screen so they reload.

    If posted from a modal, post at App level.
    """

    bubble = True

    def __init__(self, collection: str = "") -> None:
        super().__init__()
        self.collection = collection


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
