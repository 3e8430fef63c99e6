"""
Row annotation utilities for comparison tables.

Turns stored comparison rows into display rows without touching the
stored data: every call returns a fresh copy carrying a presentation
class, so the same cached rows can be re-annotated on every render.

Row Classes:
    - diff-changed: The two profiles differ for this row
    - diff-unchanged: The two profiles agree for this row
"""

from __future__ import annotations

from typing import Iterable

from profile_compare.comparison.models import (
    AnnotatedRow,
    Category,
    CategorySummary,
    ComparisonRow,
    FilterMode,
)


ROW_CLASS_CHANGED = "diff-changed"
ROW_CLASS_UNCHANGED = "diff-unchanged"


def get_row_class(is_different: bool) -> str:
    """Return the CSS class for a row based on its difference flag.

    Args:
        is_different: Whether the row differs between the two profiles.

    Returns:
        "diff-changed" or "diff-unchanged".
    """
    return ROW_CLASS_CHANGED if is_different else ROW_CLASS_UNCHANGED


def annotate(row: ComparisonRow, is_different: bool | None = None) -> AnnotatedRow:
    """
    Produce a display-ready copy of a comparison row.

    The row's payload is shallow-copied; the input row is never modified.

    Args:
        row: The stored comparison (or detail) row.
        is_different: Difference flag selecting the row class. Defaults
            to the row's own flag.

    Returns:
        An AnnotatedRow with the same key, flag and fields plus a row class.

    Examples:
        >>> annotate(ComparisonRow("Account", True)).row_class
        'diff-changed'
    """
    if is_different is None:
        is_different = row.is_different
    return AnnotatedRow(
        key=row.key,
        is_different=row.is_different,
        fields=dict(row.fields),
        row_class=get_row_class(is_different),
    )


def filter_rows(
    rows: Iterable[ComparisonRow], mode: FilterMode
) -> list[ComparisonRow]:
    """Apply a filter mode to rows, preserving their order."""
    if mode is FilterMode.DIFFERENCES_ONLY:
        return [row for row in rows if row.is_different]
    return list(rows)


def annotate_rows(
    rows: Iterable[ComparisonRow], mode: FilterMode = FilterMode.ALL
) -> list[AnnotatedRow]:
    """Filter then annotate a sequence of rows."""
    return [annotate(row) for row in filter_rows(rows, mode)]


def get_category_summary(
    category: Category, rows: Iterable[ComparisonRow]
) -> CategorySummary:
    """
    Count total and differing rows for a category.

    Args:
        category: The category the rows belong to.
        rows: The unfiltered rows of that category.

    Returns:
        A CategorySummary with the counts.
    """
    total = 0
    different = 0
    for row in rows:
        total += 1
        if row.is_different:
            different += 1
    return CategorySummary(category=category, total=total, different=different)
