"""
Comparison table widget.

Displays the filtered, annotated rows of one comparison category in a
DataTable. Differing rows are highlighted; columns follow the fields the
service returned.
"""

from __future__ import annotations

from textual.widgets import DataTable
from textual.widgets.data_table import CellDoesNotExist, RowDoesNotExist

from profile_compare.comparison.models import AnnotatedRow, Category
from profile_compare.tui.mixins.data_table import DataTableMixin


class ComparisonTable(DataTableMixin, DataTable):
    """Read-only table of comparison rows for a single category."""

    DEFAULT_CSS = """
    ComparisonTable {
        height: 1fr;
    }
    """

    def __init__(
        self,
        category: Category,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the table.

        Args:
            category: The category this table displays.
            name: Optional widget name.
            id: Optional widget ID.
            classes: Optional CSS classes.
        """
        super().__init__(
            cursor_type="row",
            zebra_stripes=True,
            name=name,
            id=id,
            classes=classes,
        )
        self.category = category

    def render_rows(
        self,
        rows: list[AnnotatedRow],
        profile_labels: tuple[str, str] = ("Profile 1", "Profile 2"),
        empty_message: str = "No data",
    ) -> None:
        """Replace the table contents with the given rows.

        The cursor stays on the same row key when that row is still shown.

        Args:
            rows: Projection of the category, already filtered.
            profile_labels: Display names of profile 1 and profile 2.
            empty_message: Shown in place of rows when there are none.
        """
        cursor_key = self._get_cursor_row_key()
        self.clear(columns=True)

        if not rows:
            self.add_column(self.category.title, key="message")
            self.add_row(empty_message, key="__empty__")
            return

        columns = self._columns_for(rows, profile_labels)
        self._add_columns(columns)
        self._add_rows(rows, columns)
        self._restore_cursor(cursor_key)

    def _columns_for(
        self, rows: list[AnnotatedRow], profile_labels: tuple[str, str]
    ) -> list[tuple[str, str]]:
        return self._get_row_columns(rows, profile_labels)

    def _add_columns(self, columns: list[tuple[str, str]]) -> None:
        for name, label in columns:
            self.add_column(label, key=name)

    def _add_rows(self, rows: list[AnnotatedRow], columns: list[tuple[str, str]]) -> None:
        for row in rows:
            self.add_row(*self._build_row_cells(row, columns), key=row.key)

    def _get_cursor_row_key(self) -> str | None:
        if self.row_count == 0:
            return None
        try:
            cell_key = self.coordinate_to_cell_key(self.cursor_coordinate)
        except CellDoesNotExist:
            return None
        return cell_key.row_key.value

    def _restore_cursor(self, row_key: str | None) -> None:
        if row_key is None:
            return
        try:
            self.move_cursor(row=self.get_row_index(row_key))
        except RowDoesNotExist:
            pass
