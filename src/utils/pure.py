from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Literal, Optional, Sequence

CENT = Decimal("0.01")


def format_currency(amount) -> str:
    """
    Format an amount as US dollars, e.g. 1234.5 -> '$1,234.50'.
    Rounding happens here and nowhere else.
    """
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-${-value:,.2f}"
    return f"${value:,.2f}"


def format_percent(value) -> str:
    """15 -> '15%', 12.5 -> '12.5%'"""
    value = Decimal(str(value))
    text = f"{value.normalize():f}"
    return f"{text}%"


def format_date(when: datetime) -> str:
    """Apr 10, 2023"""
    return when.strftime("%b %d, %Y")


def format_datetime(when: datetime) -> str:
    """Apr 10, 2023 3:05 PM"""
    hour = when.hour % 12 or 12
    return f"{format_date(when)} {hour}:{when:%M} {when:%p}"


def split_tags(raw: str) -> tuple:
    """Comma separated tags, trimmed and lower-cased; blanks and repeats dropped."""
    tags = []
    for part in (raw or "").split(","):
        tag = part.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def matches_text(query: str, *fields: Optional[str]) -> bool:
    """Case-insensitive substring match of the whole query against joined fields."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    haystack = " ".join(f for f in fields if f).lower()
    return needle in haystack


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: Sequence[Sequence],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    # pipes inside cell values would break the table
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])
