from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label

from store.models import Role
from utils.errors import PermissionDeniedError
from utils.messages import DataChangedMessage
from views.base_screen import BaseScreen
from views.forms import selected_key
from views.modal_dialog import ConfirmDialogModal
from views.modal_user_form import UserFormModal


class AdminUsersScreen(BaseScreen):
    """
    User administration, admins only. Users are deactivated rather than
    deleted, and nobody can deactivate their own account.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Label("", id="label-access")
            yield DataTable(id="table-users")
        with Horizontal(id="hort-controls"):
            yield Button("Add User", id="btn-add", variant="primary")
            yield Button("Edit", id="btn-edit")
            yield Button("Activate / Deactivate", id="btn-toggle", variant="warning")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Username", "Full Name", "Role", "Status")
        self.handle_reload()

    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        allowed = self.app.state.can(Role.ADMIN)
        self.query_one("#hort-controls").display = allowed
        self.query_one("#label-access", Label).update(
            "" if allowed else "You do not have permission to access this page."
        )
        if not allowed:
            return

        current_id = self.app.state.user_id
        for u in self.app.state.auth.users:
            table.add_row(
                u.username + (" (you)" if u.id == current_id else ""),
                u.full_name,
                u.role.value.capitalize(),
                "Active" if u.active else "Inactive",
                key=u.id,
            )

    @on(Button.Pressed, "#btn-add")
    @work
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(UserFormModal()):
            self.post_message(DataChangedMessage("users"))

    @on(Button.Pressed, "#btn-edit")
    @work
    async def handle_edit(self) -> None:
        user_id = selected_key(self.query_one(DataTable))
        if user_id is None:
            self.notify("Select a user first.", severity="warning")
            return
        user = self.app.state.auth.get_user(user_id)
        if await self.app.push_screen_wait(UserFormModal(user)):
            self.post_message(DataChangedMessage("users"))

    @on(Button.Pressed, "#btn-toggle")
    @work
    async def handle_toggle(self) -> None:
        auth = self.app.state.auth
        user_id = selected_key(self.query_one(DataTable))
        if user_id is None:
            self.notify("Select a user first.", severity="warning")
            return
        user = auth.get_user(user_id)
        action = "Deactivate" if user.active else "Activate"
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"{action} {user.username}?")
        ):
            return
        try:
            updated = await auth.toggle_user_status(user_id)
        except PermissionDeniedError as err:
            self.notify(str(err), severity="error")
            return
        self.notify(
            f"User {updated.username} {'activated' if updated.active else 'deactivated'}"
        )
        self.post_message(DataChangedMessage("users"))
