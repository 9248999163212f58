from typing import Dict

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from store.auth_store import has_role
from store.models import Role, User
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_admin_users import AdminUsersScreen
from views.scr_clients import ClientsScreen
from views.scr_dashboard import DashboardScreen
from views.scr_delivery_notes import DeliveryNotesScreen
from views.scr_documents import DocumentsScreen
from views.scr_login import LoginScreen
from views.scr_products import ProductsScreen
from views.scr_quotations import QuotationsScreen
from views.scr_samples import SamplesScreen

_logger = get_logger()


class QuoteDeskApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "dashboard": DashboardScreen,
        "clients": ClientsScreen,
        "products": ProductsScreen,
        "quotations": QuotationsScreen,
        "samples": SamplesScreen,
        "delivery_notes": DeliveryNotesScreen,
        "documents": DocumentsScreen,
        "users": AdminUsersScreen,
    }

    # mode -> (menu label, roles allowed; empty means everyone)
    MENU = {
        "dashboard": ("Dashboard", ()),
        "clients": ("Clients", ()),
        "products": ("Products", ()),
        "quotations": ("Quotations", ()),
        "samples": ("Samples", ()),
        "delivery_notes": ("Delivery Notes", ()),
        "documents": ("Documents", ()),
        "users": ("Users", (Role.ADMIN,)),
    }

    CSS_PATH = "styles/app.tcss"

    state: GlobalState

    def __init__(self):
        super().__init__()
        self.state = GlobalState()

    def menu_for(self, user: User) -> Dict[str, str]:
        return {
            mode: label
            for mode, (label, roles) in self.MENU.items()
            if has_role(user, *roles)
        }

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.startup()

    @work
    async def startup(self):
        await self.state.load()
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.end_session()
        self.notify("Logout successful.")
        self.main_flow()

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage):
        _logger.debug(f"Switching mode {message.old_mode} -> {message.new_mode}")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        # the session stays in storage and is restored on next start
        self.exit()

    @work
    async def main_flow(self):
        if not self.state.auth.is_authenticated:
            await self.push_screen_wait(LoginScreen())
        _logger.debug(f"Entering dashboard as {self.state.user.username}")
        if self.current_mode != "dashboard":
            self.post_message(ModeSwitchedMessage(self.current_mode, "dashboard"))
            await self.switch_mode("dashboard")


def main():
    app = QuoteDeskApp()
    app.run()


if __name__ == "__main__":
    main()
