"""
Reading the reference tables found on tailwindcss.com.

Every utility page carries one or more ``<table>`` elements whose header row
names the columns ("Class", "Properties", "Modifier", "CSS", ...).  The
functions here turn such a table into plain ``{column: text}`` mappings and
classify each mapping into one of the layouts the site is known to use.
"""

import enum
import re
from typing import Iterator

from bs4 import Tag

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def column_key(text: str) -> str:
    """Normalize header text into a column key: ``"Left-to-right"`` → ``"left_to_right"``."""
    text = " ".join(text.split()).lower()
    return _NON_ALNUM.sub("_", text).strip("_")


def read_table(table: Tag) -> Iterator[tuple[dict[str, str], Tag]]:
    """
    Yield a ``(row, tr)`` pair for every data row of *table*.

    *row* maps column keys to cell text; *tr* is the originating ``<tr>``
    so callers can put anchors into it.

    Cells spanning several rows are copied into every row they cover before
    the mapping is built, e.g. https://tailwindcss.com/docs/container#class-table
    """
    header = table.find("tr")
    columns = [column_key(th.get_text()) for th in header.find_all("th")] if header else []

    trs = [tr for tr in table.find_all("tr") if tr.find("td")]
    matrix = [tr.find_all("td") for tr in trs]

    expanded: set[int] = set()
    for row, cells in enumerate(matrix):
        for col, cell in enumerate(cells):
            if id(cell) in expanded:
                continue
            expanded.add(id(cell))
            try:
                rowspan = int(cell.get("rowspan", 1))
            except ValueError:
                continue
            for following in range(row + 1, min(row + rowspan, len(matrix))):
                matrix[following].insert(col, cell)

    for tr, cells in zip(trs, matrix):
        values = [cell.get_text() for cell in cells]
        yield dict(zip(columns, values)), tr


class RowShape(enum.Enum):
    CLASS_DECLARATIONS = "class_declarations"
    LOGICAL_PROPERTIES = "logical_properties"
    MODIFIER_MEDIA_QUERY = "modifier_media_query"
    MODIFIER_CSS = "modifier_css"
    BREAKPOINT_CSS = "breakpoint_css"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


# Ordered: the first key-set contained in a row decides its shape.
#
#   LOGICAL_PROPERTIES    https://tailwindcss.com/docs/border-radius#using-logical-properties
#                         covered by the main table
#   MODIFIER_MEDIA_QUERY  covered by the pseudo-class reference
#   BREAKPOINT_CSS        covered by the pseudo-class reference
#   UNSUPPORTED           a lone "modifier" or "css" column means the page
#                         layout changed and needs a look
ROW_SHAPES: list[tuple[frozenset[str], RowShape]] = [
    (frozenset({"class", "properties"}), RowShape.CLASS_DECLARATIONS),
    (frozenset({"class", "left_to_right", "right_to_left"}), RowShape.LOGICAL_PROPERTIES),
    (frozenset({"modifier", "media_query"}), RowShape.MODIFIER_MEDIA_QUERY),
    (frozenset({"modifier", "css"}), RowShape.MODIFIER_CSS),
    (frozenset({"breakpoint_prefix", "css"}), RowShape.BREAKPOINT_CSS),
    (frozenset({"modifier"}), RowShape.UNSUPPORTED),
    (frozenset({"css"}), RowShape.UNSUPPORTED),
]


def classify_row(row: dict[str, str]) -> RowShape:
    for required, shape in ROW_SHAPES:
        if required.issubset(row):
            return shape
    return RowShape.UNKNOWN
