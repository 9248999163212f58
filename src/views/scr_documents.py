from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Select

from store.models import DocumentType, Role
from utils.errors import ValidationError
from utils.messages import DataChangedMessage
from utils.pure import format_date
from utils.validation import validate_document
from views.base_screen import BaseScreen
from views.forms import clear_invalid, flag_invalid, product_options, selected_key
from views.modal_dialog import ConfirmDialogModal

FIELD_INPUTS = {
    "product_id": "select-doc-product",
    "type": "select-doc-type",
    "filename": "input-doc-filename",
}


class DocumentsScreen(BaseScreen):
    """
    Technical and safety data sheets per product. Everyone can browse;
    only admins add or delete entries.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search documents or products...")
            yield DataTable(id="table-documents")
        with Horizontal(id="hort-doc-inputs", classes="admin-only"):
            with Vertical():
                yield Label("Product")
                yield Select([], prompt="Select a product", id=FIELD_INPUTS["product_id"])
            with Vertical(classes="narrow"):
                yield Label("Type")
                yield Select(
                    [(t.value, t.value) for t in DocumentType],
                    value=DocumentType.TDS.value,
                    allow_blank=False,
                    id=FIELD_INPUTS["type"],
                )
            with Vertical():
                yield Label("File name")
                yield Input(placeholder="product-tds.pdf", id=FIELD_INPUTS["filename"])
        with Horizontal(id="hort-controls", classes="admin-only"):
            yield Button("Add Document", id="btn-add", variant="primary")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("File", "Type", "Product", "Uploaded")
        self.handle_reload()

    @on(Input.Changed, "#input-search")
    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        data = self.app.state.data
        is_admin = self.app.state.auth.is_admin
        for widget in self.query(".admin-only"):
            widget.display = is_admin
        if is_admin:
            self.query_one(f"#{FIELD_INPUTS['product_id']}", Select).set_options(
                product_options(data)
            )

        query = self.query_one("#input-search", Input).value
        table = self.query_one(DataTable)
        table.clear()
        for d in data.search_documents(query):
            table.add_row(
                d.filename,
                d.type.value,
                data.product_name(d.product_id),
                format_date(d.uploaded_at),
                key=d.id,
            )

    @on(Button.Pressed, "#btn-add")
    @work(exclusive=True)
    async def handle_add(self) -> None:
        clear_invalid(self)
        if not self.app.state.can(Role.ADMIN):
            self.notify("Only admins can add documents.", severity="error")
            return
        product_id = self.query_one(f"#{FIELD_INPUTS['product_id']}", Select).value
        try:
            cleaned = validate_document(
                product_id if product_id is not Select.BLANK else "",
                self.query_one(f"#{FIELD_INPUTS['filename']}", Input).value,
                self.query_one(f"#{FIELD_INPUTS['type']}", Select).value,
            )
        except ValidationError as err:
            flag_invalid(self, err, FIELD_INPUTS)
            return

        await self.app.state.data.add_document(
            cleaned["product_id"], cleaned["type"], cleaned["filename"]
        )
        self.query_one(f"#{FIELD_INPUTS['filename']}", Input).value = ""
        self.notify("Document added successfully")
        self.post_message(DataChangedMessage("documents"))

    @on(Button.Pressed, "#btn-delete")
    @work
    async def handle_delete(self) -> None:
        if not self.app.state.can(Role.ADMIN):
            self.notify("Only admins can delete documents.", severity="error")
            return
        document_id = selected_key(self.query_one(DataTable))
        if document_id is None:
            self.notify("Select a document first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            ConfirmDialogModal("Delete this document?", tone="error")
        ):
            return
        if await self.app.state.data.delete_document(document_id):
            self.notify("Document deleted successfully")
        self.post_message(DataChangedMessage("documents"))
