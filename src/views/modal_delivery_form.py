from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Select

from store.data_store import merge_delivery_item
from store.models import DeliveryItem
from utils.errors import ValidationError
from utils.validation import validate_delivery_note
from views.forms import clear_invalid, client_options, flag_invalid, product_options

FIELD_INPUTS = {
    "client_id": "select-dn-client",
    "items": "select-dn-product",
    "quantity": "input-dn-qty",
    "notes": "input-dn-notes",
}


class DeliveryNoteModal(ModalScreen[bool]):
    """
    New delivery note. Adding a product already on the note sums the
    quantities instead of adding a second row.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self) -> None:
        super().__init__()
        self._items: List[DeliveryItem] = []

    def compose(self) -> ComposeResult:
        data = self.app.state.data
        with Vertical(id="div-form"):
            yield Label("New Delivery Note", classes="form-title")
            yield Label("Client")
            yield Select(
                client_options(data), prompt="Select a client", id=FIELD_INPUTS["client_id"]
            )
            yield Label("Products", classes="form-subtitle")
            yield DataTable(id="table-items")
            with Horizontal(classes="form-row"):
                with Vertical():
                    yield Label("Product")
                    yield Select(
                        product_options(data), prompt="Select a product", id=FIELD_INPUTS["items"]
                    )
                with Vertical(classes="narrow"):
                    yield Label("Qty")
                    yield Input(
                        "1",
                        id=FIELD_INPUTS["quantity"],
                        type="integer",
                        validators=[Number(minimum=1)],
                    )
            with Horizontal(classes="form-btns"):
                yield Button("Remove Item", id="btn-remove-item", variant="warning")
                yield Button("Add Item", id="btn-add-item", variant="success")
            yield Label("Notes")
            yield Input(placeholder="Optional", id=FIELD_INPUTS["notes"])
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Create Delivery Note", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        table = self.query_one("#table-items", DataTable)
        table.cursor_type = "row"
        table.add_columns("Product", "Quantity")

    def refresh_items(self) -> None:
        data = self.app.state.data
        table = self.query_one("#table-items", DataTable)
        table.clear()
        for item in self._items:
            table.add_row(data.product_name(item.product_id), str(item.quantity))

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-add-item")
    def handle_add_item(self) -> None:
        clear_invalid(self)
        product_id = self.query_one(f"#{FIELD_INPUTS['items']}", Select).value
        if product_id is Select.BLANK:
            flag_invalid(self, ValidationError("Select a product", "items"), FIELD_INPUTS)
            return
        qty_input = self.query_one(f"#{FIELD_INPUTS['quantity']}", Input)
        try:
            quantity = int(qty_input.value)
        except ValueError:
            quantity = 0
        if quantity <= 0:
            flag_invalid(
                self,
                ValidationError("Quantity must be greater than zero", "quantity"),
                FIELD_INPUTS,
            )
            return
        self._items = merge_delivery_item(self._items, product_id, quantity)
        qty_input.value = "1"
        self.refresh_items()

    @on(Button.Pressed, "#btn-remove-item")
    def handle_remove_item(self) -> None:
        if not self._items:
            self.notify("No items to remove.", severity="warning")
            return
        del self._items[self.query_one("#table-items", DataTable).cursor_row]
        self.refresh_items()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        clear_invalid(self)
        client_id = self.query_one(f"#{FIELD_INPUTS['client_id']}", Select).value
        if client_id is Select.BLANK:
            client_id = ""
        try:
            items = validate_delivery_note(client_id, self._items)
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        notes = self.query_one(f"#{FIELD_INPUTS['notes']}", Input).value.strip()
        await self.app.state.data.add_delivery_note(
            client_id, items, notes, requested_by=self.app.state.user_id
        )
        self.notify("Delivery note created successfully")
        self.dismiss(True)
