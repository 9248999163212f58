from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Checkbox, Label

from quoting.render import render_quotation, save_document
from quoting.share import build_share_links
from store.models import Quotation
from utils import config


class ExportQuotationModal(ModalScreen[str]):
    """
    Save a quotation as PDF, optionally handing it off by e-mail or
    WhatsApp afterwards. Returns the saved path, or "" if cancelled.
    """

    BINDINGS = [Binding("escape", "cancel", "Back", show=True)]

    def __init__(self, quotation: Quotation) -> None:
        super().__init__()
        self._quotation = quotation

    def compose(self) -> ComposeResult:
        client = self.app.state.data.get_client(self._quotation.client_id)
        links = self._links()
        with Vertical(id="div-form"):
            yield Label(f"Export Quotation {self._quotation.id}", classes="form-title")
            yield Label(f"Client: {self.app.state.data.client_label(self._quotation.client_id)}")
            yield Label(f"Saved to: {config.EXPORT_DIR}/")
            yield Checkbox("Include product images", id="chk-images")
            with Horizontal(classes="form-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button(
                    "Save & Email",
                    id="btn-email",
                    disabled=not (links and links.mailto),
                )
                yield Button(
                    "Save & WhatsApp",
                    id="btn-whatsapp",
                    disabled=not (links and links.whatsapp),
                )
                yield Button("Save PDF", id="btn-save", variant="primary")
            if client is None:
                yield Label("Client no longer exists; sharing is unavailable.")

    def _links(self):
        client = self.app.state.data.get_client(self._quotation.client_id)
        if client is None:
            return None
        return build_share_links(self._quotation, client, self._issuer())

    def _issuer(self) -> str:
        user = self.app.state.user
        return user.full_name if user else "Unknown"

    def action_cancel(self) -> None:
        self.dismiss("")

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss("")

    @on(Button.Pressed)
    @work(exclusive=True)
    async def handle_export(self, event: Button.Pressed) -> None:
        if event.button.id not in ("btn-save", "btn-email", "btn-whatsapp"):
            return

        data = self.app.state.data
        document = render_quotation(
            self._quotation,
            data.get_client(self._quotation.client_id),
            data.products,
            self._issuer(),
            include_images=self.query_one("#chk-images", Checkbox).value,
        )
        path = save_document(document)
        self.notify(f"PDF saved to {path}")
        if document.image_failures:
            self.notify(
                f"{len(document.image_failures)} product image(s) could not be embedded.",
                severity="warning",
            )

        links = self._links()
        if event.button.id == "btn-email" and links and links.mailto:
            self.app.open_url(links.mailto)
            self.notify("Email client opened. Don't forget to attach the PDF!")
        elif event.button.id == "btn-whatsapp" and links and links.whatsapp:
            self.app.open_url(links.whatsapp)
            self.notify("WhatsApp opened. Don't forget to attach the PDF!")
        self.dismiss(path)
