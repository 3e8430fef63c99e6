"""TUI views for the Profile Comparison Viewer."""

from profile_compare.tui.views.comparison_screen import ComparisonScreen

__all__ = ["ComparisonScreen"]
