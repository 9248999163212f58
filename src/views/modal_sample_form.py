from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select, SelectionList

from utils.errors import ValidationError
from utils.validation import validate_sample_request
from views.forms import clear_invalid, client_options, flag_invalid

FIELD_INPUTS = {
    "client_id": "select-sample-client",
    "product_ids": "sel-sample-products",
    "notes": "input-sample-notes",
}


class SampleRequestModal(ModalScreen[bool]):
    """
    New sample request: one client, any number of products, free notes.
    Requests start as pending.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def compose(self) -> ComposeResult:
        data = self.app.state.data
        with Vertical(id="div-form"):
            yield Label("New Sample Request", classes="form-title")
            yield Label("Client")
            yield Select(
                client_options(data), prompt="Select a client", id=FIELD_INPUTS["client_id"]
            )
            yield Label("Products")
            yield SelectionList[str](
                *[(p.name, p.id) for p in data.products], id=FIELD_INPUTS["product_ids"]
            )
            yield Label("Notes")
            yield Input(placeholder="Optional", id=FIELD_INPUTS["notes"])
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Submit Request", id="btn-save", variant="primary")

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        clear_invalid(self)
        client_id = self.query_one(f"#{FIELD_INPUTS['client_id']}", Select).value
        if client_id is Select.BLANK:
            client_id = ""
        selected = self.query_one(f"#{FIELD_INPUTS['product_ids']}", SelectionList).selected
        try:
            product_ids = validate_sample_request(client_id, selected)
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        notes = self.query_one(f"#{FIELD_INPUTS['notes']}", Input).value.strip()
        await self.app.state.data.add_sample_request(
            client_id, product_ids, notes, requested_by=self.app.state.user_id
        )
        self.notify("Sample request submitted successfully")
        self.dismiss(True)
