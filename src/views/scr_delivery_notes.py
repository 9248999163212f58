from typing import Iterable, List

from textual import on, work
from textual.widgets import Button, DataTable

from quoting.render import render_delivery_note, save_document
from store.data_store import can_print_delivery_note
from store.models import DeliveryNote
from utils.pure import generate_markdown_table
from views.forms import selected_key
from views.modal_delivery_form import DeliveryNoteModal
from views.request_screen import RequestScreen


class DeliveryNotesScreen(RequestScreen):
    """Delivery notes, printable as a signed hand-over PDF."""

    ENTITY = "delivery note"
    COLLECTION = "deliveryNotes"
    FORM_MODAL = DeliveryNoteModal

    def extra_buttons(self) -> Iterable[Button]:
        yield Button("Print PDF", id="btn-print")

    def records(self, query: str) -> List[DeliveryNote]:
        return self.app.state.data.search_delivery_notes(query)

    def get_record(self, record_id: str):
        return self.app.state.data.get_delivery_note(record_id)

    def item_count(self, record: DeliveryNote) -> int:
        return len(record.items)

    def items_markdown(self, record: DeliveryNote) -> str:
        data = self.app.state.data
        rows = [[data.product_name(i.product_id), i.quantity] for i in record.items]
        return "#### Items\n\n" + generate_markdown_table(
            ["Product", "Quantity"], rows, ["l", "r"]
        )

    async def approve(self, record_id: str, approved_by: str):
        return await self.app.state.data.approve_delivery_note(record_id, approved_by)

    async def reject(self, record_id: str):
        return await self.app.state.data.reject_delivery_note(record_id)

    async def mark_delivered(self, record_id: str):
        return await self.app.state.data.mark_delivery_note_delivered(record_id)

    @on(Button.Pressed, "#btn-print")
    @work(exclusive=True)
    async def handle_print(self) -> None:
        note_id = selected_key(self.query_one(DataTable))
        if note_id is None:
            self.notify("Select a delivery note first.", severity="warning")
            return
        data = self.app.state.data
        note = data.get_delivery_note(note_id)
        if not can_print_delivery_note(note):
            self.notify(
                f"Only approved delivery notes can be printed (this one is {note.status.value}).",
                severity="warning",
            )
            return
        user = self.app.state.user
        document = render_delivery_note(
            note,
            data.get_client(note.client_id),
            data.products,
            user.full_name if user else "Unknown",
        )
        path = save_document(document)
        self.notify(f"PDF saved to {path}")
