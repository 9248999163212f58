from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, MarkdownViewer

from utils.messages import DataChangedMessage
from utils.pure import format_currency, generate_markdown_table
from views.base_screen import BaseScreen
from views.forms import selected_key
from views.modal_dialog import ConfirmDialogModal
from views.modal_product_form import STATUS_LABELS, ProductFormModal


class ProductsScreen(BaseScreen):
    """
    Product catalog. The search box matches any whitespace separated term
    against name, description, category and tags.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search products, categories, tags...")
            yield DataTable(id="table-products")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
        with Horizontal(id="hort-controls"):
            yield Button("Add Product", id="btn-add", variant="primary")
            yield Button("Edit", id="btn-edit")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Category", "Price", "Stock", "Status")
        self.query_one("#input-search", Input).focus()
        self.handle_reload()

    @on(Input.Changed, "#input-search")
    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        query = self.query_one("#input-search", Input).value
        products = self.app.state.data.search_products(query)

        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.name,
                p.category,
                format_currency(p.price),
                str(p.stock),
                STATUS_LABELS[p.status],
                key=p.id,
            )
        self.render_product()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self.render_product()

    @work(exclusive=True, group="detail")
    async def render_product(self) -> None:
        viewer = self.query_one("#md-prod", MarkdownViewer)
        product_id = selected_key(self.query_one(DataTable))
        prod = self.app.state.data.get_product(product_id) if product_id else None
        if prod is None:
            await viewer.document.update("### No products found.")
            return

        rows = [
            ["Description", prod.description or "-"],
            ["Category", prod.category],
            ["Price", format_currency(prod.price)],
            ["Stock", prod.stock],
            ["Status", STATUS_LABELS[prod.status]],
            ["Tags", ", ".join(prod.tags) or "-"],
            ["Image", "yes" if prod.image_url else "none"],
        ]
        md_table = generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        await viewer.document.update(f"### Product Detail: {prod.name}\n\n" + md_table)

    @on(Button.Pressed, "#btn-add")
    @work
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(ProductFormModal()):
            self.post_message(DataChangedMessage("products"))

    @on(Button.Pressed, "#btn-edit")
    @work
    async def handle_edit(self) -> None:
        product_id = selected_key(self.query_one(DataTable))
        if product_id is None:
            self.notify("Select a product first.", severity="warning")
            return
        product = self.app.state.data.get_product(product_id)
        if await self.app.push_screen_wait(ProductFormModal(product)):
            self.post_message(DataChangedMessage("products"))

    @on(Button.Pressed, "#btn-delete")
    @work
    async def handle_delete(self) -> None:
        product_id = selected_key(self.query_one(DataTable))
        if product_id is None:
            self.notify("Select a product first.", severity="warning")
            return
        name = self.app.state.data.product_name(product_id)
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"Delete product {name}?", tone="error")
        ):
            return
        if await self.app.state.data.delete_product(product_id):
            self.notify("Product deleted successfully")
        self.post_message(DataChangedMessage("products"))
