# helpers shared by the form screens and modals
from typing import Dict, List, Optional, Tuple

from textual.screen import Screen
from textual.widgets import DataTable

from store.data_store import DataStore
from utils.errors import ValidationError


def flag_invalid(screen: Screen, err: ValidationError, inputs: Dict[str, str]) -> None:
    """
    Show the validation message and mark the widget bound to err.field.
    inputs maps field names to widget ids.
    """
    screen.notify(str(err), severity="error")
    widget_id = inputs.get(err.field or "")
    if widget_id is None and err.field and err.field.startswith("items."):
        # items.<index>.<name> is reported against the item row inputs
        widget_id = inputs.get(err.field.rsplit(".", 1)[-1])
    if widget_id:
        widget = screen.query_one(f"#{widget_id}")
        widget.add_class("-invalid")
        widget.focus()


def clear_invalid(screen: Screen) -> None:
    for widget in screen.query(".-invalid"):
        widget.remove_class("-invalid")


def selected_key(table: DataTable) -> Optional[str]:
    """Row key of the row under the cursor, or None for an empty table."""
    if table.row_count == 0:
        return None
    row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
    return row_key.value


def client_options(data: DataStore) -> List[Tuple[str, str]]:
    return [(f"{c.full_name} ({c.company})", c.id) for c in data.clients]


def product_options(data: DataStore) -> List[Tuple[str, str]]:
    return [(p.name, p.id) for p in data.products]
