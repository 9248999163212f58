from typing import Dict, Literal, NamedTuple, Tuple

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.events import Resize
from textual.screen import ModalScreen
from textual.widgets import Button, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]
Variant = Literal["primary", "default", "success", "warning", "error"]

# tone -> (confirm variant, cancel variant)
TONE_VARIANTS: Dict[str, Tuple[Variant, Variant]] = {
    "default": ("primary", "default"),
    "positive": ("success", "default"),
    "warning": ("warning", "default"),
    "error": ("error", "primary"),
}

MIN_TERMINAL_SIZE = (80, 24)


class ButtonPlan(NamedTuple):
    confirm_variant: Variant
    cancel_variant: Variant
    focus_id: str


def plan_buttons(tone: Tone, can_cancel: bool) -> ButtonPlan:
    confirm, cancel = TONE_VARIANTS[tone]
    # destructive questions start on the safe answer
    focus_id = "btn-cancel" if can_cancel and tone == "error" else "btn-confirm"
    return ButtonPlan(confirm, cancel, focus_id)


def fits_terminal(width: int, height: int, minimum=MIN_TERMINAL_SIZE) -> bool:
    return width >= minimum[0] and height >= minimum[1]


class DialogModal(ModalScreen[bool]):
    """Question box answered with True (confirm) or False (cancel or escape)."""

    BINDINGS = [Binding("escape", "cancel", "Back", show=False)]

    def __init__(
        self,
        caption: str,
        confirm_text: str = "OK",
        cancel_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.confirm_text = confirm_text
        self.cancel_text = cancel_text
        self.plan = plan_buttons(tone, bool(cancel_text))

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.cancel_text:
                    yield Button(
                        self.cancel_text, variant=self.plan.cancel_variant, id="btn-cancel"
                    )
                yield Button(
                    self.confirm_text, variant=self.plan.confirm_variant, id="btn-confirm"
                )

    def on_mount(self):
        self.query_one(f"#{self.plan.focus_id}").focus()

    def confirmed(self) -> None:
        """Runs before the dialog closes on a confirm."""

    def action_cancel(self) -> None:
        self.dismiss(False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-confirm":
            self.confirmed()
            self.dismiss(True)
        else:
            self.dismiss(False)


class ConfirmDialogModal(DialogModal):
    def __init__(self, caption: str, tone: Tone = "warning"):
        super().__init__(caption, "Yes", "No", tone)


class QuitDialogModal(ConfirmDialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "error")

    def confirmed(self) -> None:
        self.post_message(QuitRequestedMessage())


class TerminalTooSmallModal(ModalScreen[bool]):
    """Covers the app until the terminal grows back to the minimum size."""

    def compose(self) -> ComposeResult:
        width, height = MIN_TERMINAL_SIZE
        with Container(id="div-resize"):
            yield Label(
                f"Terminal too small. Resize to at least {width}x{height}.", id="prompt"
            )

    def on_resize(self, event: Resize) -> None:
        if fits_terminal(event.size.width, event.size.height):
            self.dismiss(True)
