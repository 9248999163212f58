from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, MarkdownViewer

from quoting.pricing import calculate_totals
from utils.messages import DataChangedMessage
from utils.pure import format_currency, format_date, format_percent, generate_markdown_table
from views.base_screen import BaseScreen
from views.forms import selected_key
from views.modal_dialog import ConfirmDialogModal
from views.modal_export import ExportQuotationModal
from views.modal_quotation_form import QuotationFormModal


class QuotationsScreen(BaseScreen):
    """
    Quotation list with search by client or id, a breakdown of the
    highlighted quotation, and PDF export / sharing.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search by client or quotation ID...")
            yield DataTable(id="table-quotations")
            yield MarkdownViewer(id="md-quotation", show_table_of_contents=False)
        with Horizontal(id="hort-controls"):
            yield Button("New Quotation", id="btn-add", variant="primary")
            yield Button("Edit", id="btn-edit")
            yield Button("Export / Share", id="btn-export", variant="success")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Client", "Date", "Items", "Total", "Status")
        self.query_one("#input-search", Input).focus()
        self.handle_reload()

    @on(Input.Changed, "#input-search")
    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        data = self.app.state.data
        query = self.query_one("#input-search", Input).value
        quotations = sorted(
            data.search_quotations(query), key=lambda q: q.created_at, reverse=True
        )

        table = self.query_one(DataTable)
        table.clear()
        for q in quotations:
            table.add_row(
                q.id,
                data.client_label(q.client_id),
                format_date(q.created_at),
                str(len(q.items)),
                format_currency(calculate_totals(q.items).grand_total),
                q.status.value.capitalize(),
                key=q.id,
            )
        self.render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self.render_detail()

    @work(exclusive=True, group="detail")
    async def render_detail(self) -> None:
        viewer = self.query_one("#md-quotation", MarkdownViewer)
        data = self.app.state.data
        quotation_id = selected_key(self.query_one(DataTable))
        q = data.get_quotation(quotation_id) if quotation_id else None
        if q is None:
            await viewer.document.update("### No quotations found.")
            return

        totals = calculate_totals(q.items)
        rows = [
            [
                data.product_name(line.item.product_id),
                line.item.quantity,
                format_currency(line.item.price),
                format_percent(line.item.discount) if line.item.discount else "-",
                format_currency(line.net_line),
            ]
            for line in totals.lines
        ]
        header = (
            f"### Quotation #{q.id}\n"
            f"Client: {data.client_label(q.client_id)}  \n"
            f"Created: {format_date(q.created_at)}  \n"
            f"Last updated: {format_date(q.updated_at)}\n\n"
        )
        md_table = generate_markdown_table(
            ["Product", "Qty", "Unit Price", "Discount", "Line Total"],
            rows,
            ["l", "r", "r", "r", "r"],
        )
        footer = (
            f"\n\nSubtotal: {format_currency(totals.subtotal)}  \n"
            f"VAT ({format_percent(totals.vat_rate * 100)}): {format_currency(totals.vat)}  \n"
            f"**Total: {format_currency(totals.grand_total)}**"
        )
        await viewer.document.update(header + md_table + footer)

    @on(Button.Pressed, "#btn-add")
    @work
    async def handle_add(self) -> None:
        if not self.app.state.data.clients:
            self.notify("Add a client before creating a quotation.", severity="warning")
            return
        if await self.app.push_screen_wait(QuotationFormModal()):
            self.post_message(DataChangedMessage("quotations"))

    @on(Button.Pressed, "#btn-edit")
    @work
    async def handle_edit(self) -> None:
        quotation_id = selected_key(self.query_one(DataTable))
        if quotation_id is None:
            self.notify("Select a quotation first.", severity="warning")
            return
        quotation = self.app.state.data.get_quotation(quotation_id)
        if await self.app.push_screen_wait(QuotationFormModal(quotation)):
            self.post_message(DataChangedMessage("quotations"))

    @on(Button.Pressed, "#btn-export")
    @work
    async def handle_export(self) -> None:
        quotation_id = selected_key(self.query_one(DataTable))
        if quotation_id is None:
            self.notify("Select a quotation first.", severity="warning")
            return
        quotation = self.app.state.data.get_quotation(quotation_id)
        await self.app.push_screen_wait(ExportQuotationModal(quotation))

    @on(Button.Pressed, "#btn-delete")
    @work
    async def handle_delete(self) -> None:
        quotation_id = selected_key(self.query_one(DataTable))
        if quotation_id is None:
            self.notify("Select a quotation first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"Delete quotation {quotation_id}?", tone="error")
        ):
            return
        if await self.app.state.data.delete_quotation(quotation_id):
            self.notify("Quotation deleted successfully")
        self.post_message(DataChangedMessage("quotations"))
