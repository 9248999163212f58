from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, MarkdownViewer

from utils.messages import DataChangedMessage
from utils.pure import format_date, generate_markdown_table
from views.base_screen import BaseScreen
from views.forms import selected_key
from views.modal_client_form import ClientFormModal
from views.modal_dialog import ConfirmDialogModal


class ClientsScreen(BaseScreen):
    """
    Client list with search, detail pane and add/edit/delete.
    Deleting a client leaves its quotations and requests in place.
    """

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search clients...")
            yield DataTable(id="table-clients")
            yield MarkdownViewer(id="md-client", show_table_of_contents=False)
        with Horizontal(id="hort-controls"):
            yield Button("Add Client", id="btn-add", variant="primary")
            yield Button("Edit", id="btn-edit")
            yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Company", "Phone", "Email")
        self.query_one("#input-search", Input).focus()
        self.handle_reload()

    @on(Input.Changed, "#input-search")
    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        query = self.query_one("#input-search", Input).value
        clients = self.app.state.data.search_clients(query)

        table = self.query_one(DataTable)
        table.clear()
        for c in clients:
            table.add_row(c.full_name, c.company, c.phone, c.email, key=c.id)
        self.render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self.render_detail()

    @work(exclusive=True, group="detail")
    async def render_detail(self) -> None:
        viewer = self.query_one("#md-client", MarkdownViewer)
        client_id = selected_key(self.query_one(DataTable))
        client = self.app.state.data.get_client(client_id) if client_id else None
        if client is None:
            await viewer.document.update("### No clients found.")
            return

        quotations = [
            q for q in self.app.state.data.quotations if q.client_id == client.id
        ]
        rows = [
            ["Company", client.company],
            ["Phone", client.phone or "-"],
            ["Email", client.email or "-"],
            ["Client since", format_date(client.created_at)],
            ["Quotations", len(quotations)],
        ]
        md = generate_markdown_table(["Attribute", "Value"], rows, ["l", "l"])
        await viewer.document.update(f"### {client.full_name}\n\n" + md)

    @on(Button.Pressed, "#btn-add")
    @work
    async def handle_add(self) -> None:
        if await self.app.push_screen_wait(ClientFormModal()):
            self.post_message(DataChangedMessage("clients"))

    @on(Button.Pressed, "#btn-edit")
    @work
    async def handle_edit(self) -> None:
        client_id = selected_key(self.query_one(DataTable))
        if client_id is None:
            self.notify("Select a client first.", severity="warning")
            return
        client = self.app.state.data.get_client(client_id)
        if await self.app.push_screen_wait(ClientFormModal(client)):
            self.post_message(DataChangedMessage("clients"))

    @on(Button.Pressed, "#btn-delete")
    @work
    async def handle_delete(self) -> None:
        client_id = selected_key(self.query_one(DataTable))
        if client_id is None:
            self.notify("Select a client first.", severity="warning")
            return
        label = self.app.state.data.client_label(client_id)
        if not await self.app.push_screen_wait(
            ConfirmDialogModal(f"Delete client {label}?", tone="error")
        ):
            return
        if await self.app.state.data.delete_client(client_id):
            self.notify("Client deleted successfully")
        self.post_message(DataChangedMessage("clients"))
