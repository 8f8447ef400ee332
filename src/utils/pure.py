from math import ceil
from typing import Any, List, Literal, Optional, Sequence


def format_price(fen: int, symbol: str = "¥") -> str:
    """Render an amount in fen as yuan with two decimals, e.g. 19800 -> ¥198.00."""
    sign = "-" if fen < 0 else ""
    yuan, cents = divmod(abs(int(fen)), 100)
    return f"{sign}{symbol}{yuan}.{cents:02d}"


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed for total rows; 0 when there is nothing to show."""
    if total <= 0 or page_size <= 0:
        return 0
    return ceil(total / page_size)


def generate_markdown_table(
    headers: Optional[Sequence[Any]],
    rows: List[Sequence[Any]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: column headers, or None to use the first row as headers.
        rows: rows of cells; cells are converted with str().
        aligns: 'l', 'c' or 'r' per column, all centered by default.

    Returns:
        str: Markdown formatted table, or "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    # pipes inside a cell would split it into two columns
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    if aligns is None:
        aligns = ["c"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)
