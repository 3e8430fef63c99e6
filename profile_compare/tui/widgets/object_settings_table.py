"""
Object settings table with expandable field-level detail.

Each object row can be expanded (Enter) to show the field permission
comparison for that object, nested directly below it. Detail is loaded
by the view model on first expansion; while it is in flight a loading
row is shown in its place. Fields that only the nested rows carry get
columns of their own, left empty on object rows.
"""

from __future__ import annotations

from rich.text import Text
from textual.widgets import DataTable

from profile_compare.comparison.models import (
    DETAIL_KEY_FIELD,
    AnnotatedRow,
    Category,
    ExpandableRow,
)
from profile_compare.tui.widgets.comparison_table import ComparisonTable


OBJECT_KEY_PREFIX = "object:"
DETAIL_KEY_PREFIX = "detail:"
STATUS_KEY_PREFIX = "status:"

EXPAND_COLUMN = "__expand__"
DETAIL_INDENT = "  ↳ "

LOADING_MESSAGE = "Loading field permissions..."
NO_DETAIL_MESSAGE = "No field permissions"
NO_DIFFERENCES_MESSAGE = "No field differences"


class ObjectSettingsTable(ComparisonTable):
    """Comparison table for object settings, with nested field rows."""

    def __init__(
        self,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(Category.OBJECT_SETTINGS, name=name, id=id, classes=classes)
        self.show_differences_only = False

    @staticmethod
    def object_key_for(row_key: str | None) -> str | None:
        """Return the object key for an object row key, None for other rows.

        Examples:
            >>> ObjectSettingsTable.object_key_for("object:Account")
            'Account'
            >>> ObjectSettingsTable.object_key_for("detail:Account:Account.Name")
        """
        if row_key and row_key.startswith(OBJECT_KEY_PREFIX):
            return row_key[len(OBJECT_KEY_PREFIX):]
        return None

    def selected_object_key(self, event: DataTable.RowSelected) -> str | None:
        """Object key of the row selected in a RowSelected event, if any."""
        return self.object_key_for(self._get_selected_row_key(event))

    def _columns_for(
        self, rows: list[AnnotatedRow], profile_labels: tuple[str, str]
    ) -> list[tuple[str, str]]:
        """Object columns followed by any field-only columns of shown details.

        The detail key is not a column of its own; it is shown in the
        first column of each nested row.
        """
        shown: list[AnnotatedRow] = list(rows)
        for row in rows:
            if isinstance(row, ExpandableRow) and row.is_expanded:
                shown.extend(row.details)
        return [
            column
            for column in self._get_row_columns(shown, profile_labels)
            if column[0] != DETAIL_KEY_FIELD
        ]

    def _add_columns(self, columns: list[tuple[str, str]]) -> None:
        self.add_column("", key=EXPAND_COLUMN, width=2)
        super()._add_columns(columns)

    def _add_rows(self, rows: list[AnnotatedRow], columns: list[tuple[str, str]]) -> None:
        for row in rows:
            icon = row.expand_icon if isinstance(row, ExpandableRow) else ""
            self.add_row(
                Text(icon),
                *self._build_row_cells(row, columns),
                key=f"{OBJECT_KEY_PREFIX}{row.key}",
            )
            if isinstance(row, ExpandableRow) and row.is_expanded:
                self._add_detail_rows(row, columns)

    def _add_detail_rows(self, row: ExpandableRow, columns: list[tuple[str, str]]) -> None:
        """Add the nested rows shown under an expanded object."""
        if row.is_loading:
            self._add_status_row(row.key, LOADING_MESSAGE, columns)
            return
        if not row.details:
            message = NO_DIFFERENCES_MESSAGE if self.show_differences_only else NO_DETAIL_MESSAGE
            self._add_status_row(row.key, message, columns)
            return

        for detail in row.details:
            cells = self._build_row_cells(detail, columns)
            # Detail rows put their own key in the first data column
            if cells:
                cells[0] = self._format_cell(f"{DETAIL_INDENT}{detail.key}", detail.row_class)
            self.add_row(
                Text(""),
                *cells,
                key=f"{DETAIL_KEY_PREFIX}{row.key}:{detail.key}",
            )

    def _add_status_row(
        self, object_key: str, message: str, columns: list[tuple[str, str]]
    ) -> None:
        cells = [Text("") for _ in columns] or [Text("")]
        cells[0] = Text(f"{DETAIL_INDENT}{message}", style="italic dim")
        self.add_row(Text(""), *cells, key=f"{STATUS_KEY_PREFIX}{object_key}")
