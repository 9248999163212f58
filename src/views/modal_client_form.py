from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from store.models import Client, ClientUpdate
from utils.errors import ValidationError
from utils.validation import validate_client
from views.forms import clear_invalid, flag_invalid

FIELD_INPUTS = {
    "name": "input-client-name",
    "surname": "input-client-surname",
    "company": "input-client-company",
    "phone": "input-client-phone",
    "email": "input-client-email",
}


class ClientFormModal(ModalScreen[bool]):
    """
    Add a client, or edit one when `client` is given.
    Returns True if something was saved.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self, client: Optional[Client] = None) -> None:
        super().__init__()
        self._client = client

    def compose(self) -> ComposeResult:
        c = self._client
        with Vertical(id="div-form"):
            yield Label("Edit Client" if c else "Add New Client", classes="form-title")
            yield Label("First Name")
            yield Input(c.name if c else "", placeholder="John", id=FIELD_INPUTS["name"])
            yield Label("Last Name")
            yield Input(c.surname if c else "", placeholder="Doe", id=FIELD_INPUTS["surname"])
            yield Label("Company")
            yield Input(
                c.company if c else "", placeholder="Acme Inc.", id=FIELD_INPUTS["company"]
            )
            yield Label("Phone")
            yield Input(
                c.phone if c else "", placeholder="+1 555 123 4567", id=FIELD_INPUTS["phone"]
            )
            yield Label("Email")
            yield Input(
                c.email if c else "", placeholder="john@example.com", id=FIELD_INPUTS["email"]
            )
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update Client" if c else "Add Client", id="btn-save", variant="primary"
                )

    def on_mount(self) -> None:
        self.query_one(f"#{FIELD_INPUTS['name']}").focus()

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        clear_invalid(self)
        values = {f: self.query_one(f"#{i}", Input).value for f, i in FIELD_INPUTS.items()}
        try:
            cleaned = validate_client(**values)
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        data = self.app.state.data
        if self._client:
            await data.update_client(self._client.id, ClientUpdate(**cleaned))
            self.notify("Client updated successfully")
        else:
            await data.add_client(**cleaned)
            self.notify("Client added successfully")
        self.dismiss(True)
