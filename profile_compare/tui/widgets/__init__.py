"""TUI widgets for the Profile Comparison Viewer."""

from profile_compare.tui.widgets.comparison_table import ComparisonTable
from profile_compare.tui.widgets.object_settings_table import ObjectSettingsTable
from profile_compare.tui.widgets.summary_cards import SummaryCards, render_cards

__all__ = [
    # Tables
    "ComparisonTable",
    "ObjectSettingsTable",
    # Summary
    "SummaryCards",
    "render_cards",
]
