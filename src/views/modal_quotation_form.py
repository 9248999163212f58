from typing import List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, Select

from quoting.pricing import calculate_subtotal, calculate_totals
from store.models import Quotation, QuotationItem, QuotationStatus, QuotationUpdate
from utils.config import VAT_RATE
from utils.errors import ValidationError
from utils.pure import format_currency, format_percent
from utils.validation import validate_quotation, validate_quotation_item
from views.forms import clear_invalid, client_options, flag_invalid, product_options

FIELD_INPUTS = {
    "client_id": "select-quote-client",
    "status": "select-quote-status",
    "items": "select-item-product",
    "product_id": "select-item-product",
    "quantity": "input-item-qty",
    "price": "input-item-price",
    "discount": "input-item-discount",
}


class QuotationFormModal(ModalScreen[bool]):
    """
    Create a quotation, or edit one when `quotation` is given.

    Items are drafted in a table; each is validated when added, the whole
    quotation when saved. The stored total is the pre-VAT subtotal.
    Returns True if something was saved.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self, quotation: Optional[Quotation] = None) -> None:
        super().__init__()
        self._quotation = quotation
        self._items: List[QuotationItem] = list(quotation.items) if quotation else []

    def compose(self) -> ComposeResult:
        q = self._quotation
        data = self.app.state.data
        with VerticalScroll(id="div-form"):
            yield Label(
                f"Edit Quotation {q.id}" if q else "Create New Quotation",
                classes="form-title",
            )
            with Horizontal(classes="form-row"):
                with Vertical():
                    yield Label("Client")
                    yield Select(
                        client_options(data),
                        prompt="Select a client",
                        value=q.client_id if q and data.get_client(q.client_id) else Select.BLANK,
                        id=FIELD_INPUTS["client_id"],
                    )
                with Vertical():
                    yield Label("Status")
                    yield Select(
                        [(s.value.capitalize(), s.value) for s in QuotationStatus],
                        value=(q.status if q else QuotationStatus.DRAFT).value,
                        allow_blank=False,
                        id=FIELD_INPUTS["status"],
                    )
            yield Label("Items", classes="form-subtitle")
            yield DataTable(id="table-items")
            with Horizontal(classes="form-row", id="hort-item-inputs"):
                with Vertical():
                    yield Label("Product")
                    yield Select(
                        product_options(data),
                        prompt="Select a product",
                        id=FIELD_INPUTS["product_id"],
                    )
                with Vertical(classes="narrow"):
                    yield Label("Qty")
                    yield Input(
                        "1",
                        id=FIELD_INPUTS["quantity"],
                        type="integer",
                        validators=[Number(minimum=1)],
                    )
                with Vertical(classes="narrow"):
                    yield Label("Price ($)")
                    yield Input(
                        id=FIELD_INPUTS["price"],
                        type="number",
                        validators=[Number(minimum=0.01)],
                    )
                with Vertical(classes="narrow"):
                    yield Label("Discount %")
                    yield Input(
                        placeholder="0",
                        id=FIELD_INPUTS["discount"],
                        type="number",
                        validators=[Number(minimum=0, maximum=100)],
                    )
            with Horizontal(classes="form-btns"):
                yield Button("Remove Item", id="btn-remove-item", variant="warning")
                yield Button("Add Item", id="btn-add-item", variant="success")
            yield Label("", id="label-totals")
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update Quotation" if q else "Create Quotation",
                    id="btn-save",
                    variant="primary",
                )

    def on_mount(self) -> None:
        table = self.query_one("#table-items", DataTable)
        table.cursor_type = "row"
        table.add_columns("Product", "Qty", "Unit Price", "Discount", "Line Total")
        self.refresh_items()
        self.query_one(f"#{FIELD_INPUTS['client_id']}").focus()

    def refresh_items(self) -> None:
        data = self.app.state.data
        totals = calculate_totals(self._items)
        table = self.query_one("#table-items", DataTable)
        table.clear()
        for line in totals.lines:
            item = line.item
            table.add_row(
                data.product_name(item.product_id),
                str(item.quantity),
                format_currency(item.price),
                format_percent(item.discount) if item.discount else "-",
                format_currency(line.net_line),
            )
        self.query_one("#label-totals", Label).update(
            f"Subtotal: {format_currency(totals.subtotal)}    "
            f"VAT ({format_percent(VAT_RATE * 100)}): {format_currency(totals.vat)}    "
            f"Total: {format_currency(totals.grand_total)}"
        )

    @on(Select.Changed, f"#{FIELD_INPUTS['product_id']}")
    def handle_product_selected(self, event: Select.Changed) -> None:
        # default the unit price to the catalog price, editable afterwards
        if event.value is Select.BLANK:
            return
        product = self.app.state.data.get_product(event.value)
        if product:
            self.query_one(f"#{FIELD_INPUTS['price']}", Input).value = str(product.price)

    def action_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-add-item")
    def handle_add_item(self) -> None:
        clear_invalid(self)
        product_id = self.query_one(f"#{FIELD_INPUTS['product_id']}", Select).value
        try:
            item = validate_quotation_item(
                product_id if product_id is not Select.BLANK else "",
                self.query_one(f"#{FIELD_INPUTS['quantity']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['price']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['discount']}", Input).value,
                index=len(self._items),
            )
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return
        self._items.append(item)
        self.query_one(f"#{FIELD_INPUTS['quantity']}", Input).value = "1"
        self.query_one(f"#{FIELD_INPUTS['discount']}", Input).value = ""
        self.refresh_items()

    @on(Button.Pressed, "#btn-remove-item")
    def handle_remove_item(self) -> None:
        table = self.query_one("#table-items", DataTable)
        if not self._items:
            self.notify("No items to remove.", severity="warning")
            return
        del self._items[table.cursor_row]
        self.refresh_items()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        clear_invalid(self)
        client_id = self.query_one(f"#{FIELD_INPUTS['client_id']}", Select).value
        status = self.query_one(f"#{FIELD_INPUTS['status']}", Select).value
        try:
            client_id, items, status = validate_quotation(
                client_id if client_id is not Select.BLANK else "", self._items, status
            )
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        data = self.app.state.data
        total = calculate_subtotal(items)
        if self._quotation:
            await data.update_quotation(
                self._quotation.id,
                QuotationUpdate(client_id=client_id, items=items, total=total, status=status),
            )
            self.notify("Quotation updated successfully")
        else:
            await data.add_quotation(
                client_id, items, total, status, created_by=self.app.state.user_id
            )
            self.notify("Quotation created successfully")
        self.dismiss(True)
