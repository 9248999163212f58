from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from store.models import Role, User, UserUpdate
from utils.errors import ValidationError
from utils.validation import validate_user
from views.forms import clear_invalid, flag_invalid

FIELD_INPUTS = {
    "username": "input-user-username",
    "password": "input-user-pwd",
    "full_name": "input-user-fullname",
    "role": "select-user-role",
}


class UserFormModal(ModalScreen[bool]):
    """
    Add a user, or edit one when `user` is given. When editing, a blank
    password keeps the current one.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self, user: Optional[User] = None) -> None:
        super().__init__()
        self._user = user

    def compose(self) -> ComposeResult:
        u = self._user
        with Vertical(id="div-form"):
            yield Label("Edit User" if u else "Add New User", classes="form-title")
            yield Label("Username")
            yield Input(u.username if u else "", id=FIELD_INPUTS["username"])
            yield Label("Password" + (" (leave blank to keep)" if u else ""))
            yield Input(password=True, id=FIELD_INPUTS["password"])
            yield Label("Full Name")
            yield Input(u.full_name if u else "", id=FIELD_INPUTS["full_name"])
            yield Label("Role")
            yield Select(
                [(r.value.capitalize(), r.value) for r in Role],
                value=(u.role if u else Role.SALES).value,
                allow_blank=False,
                id=FIELD_INPUTS["role"],
            )
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Update User" if u else "Add User", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        self.query_one(f"#{FIELD_INPUTS['username']}").focus()

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        clear_invalid(self)
        auth = self.app.state.auth
        try:
            cleaned = validate_user(
                self.query_one(f"#{FIELD_INPUTS['username']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['password']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['full_name']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['role']}", Select).value,
                require_password=self._user is None,
            )
            if self._user:
                await auth.update_user(self._user.id, UserUpdate(**cleaned))
            else:
                await auth.add_user(**cleaned)
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        self.notify("User updated successfully" if self._user else "User added successfully")
        self.dismiss(True)
