from typing import Iterable, List

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, MarkdownViewer

from store.models import Role
from utils.errors import InvalidTransitionError, PermissionDeniedError
from utils.messages import DataChangedMessage
from utils.pure import format_date, format_datetime
from views.base_screen import BaseScreen
from views.forms import selected_key

APPROVER_ROLES = (Role.ADMIN, Role.MANAGER)


class RequestScreen(BaseScreen):
    """
    Shared list screen for sample requests and delivery notes.

    Anyone may file a request; approving, rejecting and marking as
    delivered is reserved to managers and admins. Subclasses provide the
    store calls and the detail rows.
    """

    ENTITY = "request"
    COLLECTION = ""
    FORM_MODAL: type = ModalScreen

    def __init__(self) -> None:
        super().__init__()

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Search by client...")
            yield DataTable(id="table-requests")
            yield MarkdownViewer(id="md-request", show_table_of_contents=False)
        with Horizontal(id="hort-controls"):
            yield Button(f"New {self.ENTITY.title()}", id="btn-add", variant="primary")
            yield from self.extra_buttons()
            yield Button("Approve", id="btn-approve", variant="success", classes="approver")
            yield Button("Reject", id="btn-reject", variant="error", classes="approver")
            yield Button("Mark Delivered", id="btn-deliver", classes="approver")

    def extra_buttons(self) -> Iterable[Button]:
        return ()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Client", "Requested", "Items", "Status", "Requested by")
        self.handle_reload()

    # --- hooks ---

    def records(self, query: str) -> List:
        raise NotImplementedError

    def get_record(self, record_id: str):
        raise NotImplementedError

    def item_count(self, record) -> int:
        raise NotImplementedError

    def items_markdown(self, record) -> str:
        raise NotImplementedError

    async def approve(self, record_id: str, approved_by: str):
        raise NotImplementedError

    async def reject(self, record_id: str):
        raise NotImplementedError

    async def mark_delivered(self, record_id: str):
        raise NotImplementedError

    # --- shared behaviour ---

    def user_label(self, user_id: str) -> str:
        user = self.app.state.auth.get_user(user_id)
        return user.full_name if user else "Unknown"

    @on(Input.Changed, "#input-search")
    @on(DataChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        for button in self.query(".approver"):
            button.display = self.app.state.can(*APPROVER_ROLES)

        data = self.app.state.data
        query = self.query_one("#input-search", Input).value
        records = sorted(self.records(query), key=lambda r: r.requested_at, reverse=True)

        table = self.query_one(DataTable)
        table.clear()
        for r in records:
            table.add_row(
                r.id,
                data.client_label(r.client_id),
                format_date(r.requested_at),
                str(self.item_count(r)),
                r.status.value.capitalize(),
                self.user_label(r.requested_by),
                key=r.id,
            )
        self.render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self.render_detail()

    @work(exclusive=True, group="detail")
    async def render_detail(self) -> None:
        viewer = self.query_one("#md-request", MarkdownViewer)
        record_id = selected_key(self.query_one(DataTable))
        record = self.get_record(record_id) if record_id else None
        if record is None:
            await viewer.document.update(f"### No {self.ENTITY}s found.")
            return

        client = self.app.state.data.get_client(record.client_id)
        lines = [
            f"### {self.ENTITY.title()} #{record.id}",
            f"Client: {self.app.state.data.client_label(record.client_id)}"
            + (f" ({client.company})" if client else "")
            + "  ",
            f"Status: **{record.status.value.upper()}**  ",
            f"Requested: {format_datetime(record.requested_at)} by "
            f"{self.user_label(record.requested_by)}  ",
        ]
        if record.approved_at:
            lines.append(
                f"Approved: {format_datetime(record.approved_at)} by "
                f"{self.user_label(record.approved_by)}  "
            )
        md = "\n".join(lines) + "\n\n" + self.items_markdown(record)
        if record.notes:
            md += f"\n\n**Notes:** {record.notes}"
        await viewer.document.update(md)

    @on(Button.Pressed, "#btn-add")
    @work
    async def handle_add(self) -> None:
        if not self.app.state.data.clients:
            self.notify("Add a client first.", severity="warning")
            return
        if await self.app.push_screen_wait(self.FORM_MODAL()):
            self.post_message(DataChangedMessage(self.COLLECTION))

    @on(Button.Pressed, ".approver")
    @work(exclusive=True, group="status")
    async def handle_status_change(self, event: Button.Pressed) -> None:
        record_id = selected_key(self.query_one(DataTable))
        if record_id is None:
            self.notify(f"Select a {self.ENTITY} first.", severity="warning")
            return

        try:
            if not self.app.state.can(*APPROVER_ROLES):
                raise PermissionDeniedError("Only managers and admins can do this")
            if event.button.id == "btn-approve":
                await self.approve(record_id, self.app.state.user_id)
                self.notify(f"{self.ENTITY.capitalize()} approved")
            elif event.button.id == "btn-reject":
                await self.reject(record_id)
                self.notify(f"{self.ENTITY.capitalize()} rejected")
            else:
                await self.mark_delivered(record_id)
                self.notify(f"{self.ENTITY.capitalize()} marked as delivered")
        except (InvalidTransitionError, PermissionDeniedError) as err:
            self.notify(str(err), severity="error")
            return
        self.post_message(DataChangedMessage(self.COLLECTION))
