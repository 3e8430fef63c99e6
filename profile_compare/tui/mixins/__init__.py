"""Mixins for the TUI application."""

from profile_compare.tui.mixins.data_table import DataTableMixin

__all__ = [
    "DataTableMixin",
]
