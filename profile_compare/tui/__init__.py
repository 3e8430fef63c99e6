"""
TUI Profile Comparison Viewer.

A Textual-based terminal UI for comparing two permission profiles
category by category, with expandable field-level detail for objects.

Usage:
    profile-compare --url http://localhost:8080/api
    profile-compare --profiles-dir exports/

Components:
    - ProfileComparisonApp: Main application class
    - ComparisonScreen: Profile selection, summary and category tabs
    - ComparisonTable: Per-category comparison table
    - ObjectSettingsTable: Object table with nested field rows
    - SummaryCards: Per-category total/different counts
"""
