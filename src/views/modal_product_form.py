from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, Select

from store.models import Product, ProductStatus, ProductUpdate
from utils.errors import ValidationError
from utils.validation import validate_product
from views.forms import clear_invalid, flag_invalid

FIELD_INPUTS = {
    "name": "input-prod-name",
    "description": "input-prod-desc",
    "price": "input-prod-price",
    "category": "input-prod-category",
    "tags": "input-prod-tags",
    "stock": "input-prod-stock",
    "status": "select-prod-status",
    "image_url": "input-prod-image",
}

STATUS_LABELS = {
    ProductStatus.IN_STOCK: "In Stock",
    ProductStatus.OUT_OF_STOCK: "Out of Stock",
    ProductStatus.ON_COMMAND: "On Command",
}


class ProductFormModal(ModalScreen[bool]):
    """
    Add a product, or edit one when `product` is given.
    Returns True if something was saved.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self._product = product

    def compose(self) -> ComposeResult:
        p = self._product
        with VerticalScroll(id="div-form"):
            yield Label("Edit Product" if p else "Add New Product", classes="form-title")
            yield Label("Product Name")
            yield Input(p.name if p else "", id=FIELD_INPUTS["name"])
            yield Label("Description")
            yield Input(p.description if p else "", id=FIELD_INPUTS["description"])
            with Horizontal(classes="form-row"):
                with Vertical():
                    yield Label("Price ($)")
                    yield Input(
                        str(p.price) if p else "",
                        id=FIELD_INPUTS["price"],
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Stock")
                    yield Input(
                        str(p.stock) if p else "0",
                        id=FIELD_INPUTS["stock"],
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
            yield Label("Category")
            yield Input(p.category if p else "", id=FIELD_INPUTS["category"])
            yield Label("Tags (comma separated)")
            yield Input(", ".join(p.tags) if p else "", id=FIELD_INPUTS["tags"])
            yield Label("Status")
            yield Select(
                [(label, s.value) for s, label in STATUS_LABELS.items()],
                value=(p.status if p else ProductStatus.IN_STOCK).value,
                allow_blank=False,
                id=FIELD_INPUTS["status"],
            )
            yield Label("Image (file path or data: URI, optional)")
            yield Input((p.image_url or "") if p else "", id=FIELD_INPUTS["image_url"])
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Update Product" if p else "Add Product", id="btn-save", variant="primary"
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
        values = {
            f: self.query_one(f"#{i}").value
            for f, i in FIELD_INPUTS.items()
        }
        try:
            cleaned = validate_product(**values)
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        data = self.app.state.data
        if self._product:
            # an empty string clears a previously set image
            cleaned["image_url"] = cleaned["image_url"] or ""
            await data.update_product(self._product.id, ProductUpdate(**cleaned))
            self.notify("Product updated successfully")
        else:
            await data.add_product(**cleaned)
            self.notify("Product added successfully")
        self.dismiss(True)
