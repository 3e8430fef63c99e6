"""
DataTable Mixin for schema-aware comparison tables.

Provides reusable methods for:
- _get_row_columns(): Derive columns from the fields present in the rows
- _column_label(): Human-readable header, with profile names substituted
- _build_row_cells(): Render one row's cells in column order
- _format_cell(): Render booleans as check marks and style differing rows
- _get_selected_row_key(): Safely extract row key from RowSelected events

Comparison rows are opaque payloads, so the columns adapt to whatever
fields the service returns. Fields named ``profile1<X>``/``profile2<X>``
are headed with the selected profile's name.

Usage:
    class MyTable(DataTableMixin, DataTable):
        def show(self, rows, labels):
            for field, label in self._get_row_columns(rows, labels):
                self.add_column(label, key=field)
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Iterable

from rich.text import Text

from profile_compare.comparison.models import DIFFERENT_FIELD, AnnotatedRow
from profile_compare.comparison.row_annotator import ROW_CLASS_CHANGED

if TYPE_CHECKING:
    from textual.widgets import DataTable


PROFILE_FIELD_PATTERN = re.compile(r"^profile([12])(.+)$")
CAMEL_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Rich styles per row class
ROW_STYLES: dict[str, str] = {
    ROW_CLASS_CHANGED: "bold yellow",
}

CHECK_MARK = "✓"
CROSS_MARK = "✗"
EMPTY_CELL = "-"


def humanize_field(name: str) -> str:
    """Turn a camelCase field name into a title.

    Examples:
        >>> humanize_field("objectName")
        'Object Name'
        >>> humanize_field("viewAll")
        'View All'
    """
    words = CAMEL_CASE_BOUNDARY.sub(" ", name).split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


class DataTableMixin:
    """Mixin providing schema-aware columns and cell rendering."""

    def _column_label(self, field: str, profile_labels: tuple[str, str]) -> str:
        """Header for a field.

        Args:
            field: The wire field name.
            profile_labels: Display names of profile 1 and profile 2.

        Returns:
            The column header, e.g. "System Administrator Read".
        """
        match = PROFILE_FIELD_PATTERN.match(field)
        if match:
            which, rest = match.groups()
            return f"{profile_labels[int(which) - 1]} {humanize_field(rest)}"
        return humanize_field(field)

    def _get_row_columns(
        self,
        rows: Iterable[AnnotatedRow],
        profile_labels: tuple[str, str],
    ) -> list[tuple[str, str]]:
        """Generate column config from the fields of the given rows.

        Fields appear in first-seen order. The difference flag is not a
        column; it is shown through the row style instead.

        Args:
            rows: Rows to be displayed.
            profile_labels: Display names of profile 1 and profile 2.

        Returns:
            List of (field_name, header) tuples.
        """
        fields: dict[str, None] = {}
        for row in rows:
            for name in row.fields:
                if name != DIFFERENT_FIELD:
                    fields.setdefault(name)
        return [(name, self._column_label(name, profile_labels)) for name in fields]

    def _format_cell(self, value: Any, row_class: str) -> Text:
        """Render a cell value with the row's style.

        Args:
            value: Raw field value.
            row_class: The row's presentation class.

        Returns:
            A styled Rich Text.
        """
        if isinstance(value, bool):
            text = CHECK_MARK if value else CROSS_MARK
        elif value is None or value == "":
            text = EMPTY_CELL
        else:
            text = str(value)
        return Text(text, style=ROW_STYLES.get(row_class, ""))

    def _build_row_cells(
        self, row: AnnotatedRow, columns: list[tuple[str, str]]
    ) -> list[Text]:
        """Build the cells of a row in column order."""
        return [self._format_cell(row.fields.get(name), row.row_class) for name, _ in columns]

    def _get_selected_row_key(self, event: DataTable.RowSelected) -> str | None:
        """Extract the row key from a RowSelected event.

        Args:
            event: The RowSelected event from the DataTable.

        Returns:
            The row key as a string, or None if no row is selected.
        """
        row_key = event.row_key
        if row_key is None or row_key.value is None:
            return None
        return str(row_key.value)
