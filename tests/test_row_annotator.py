"""Tests for row annotation in profile_compare/comparison/row_annotator.py."""

from __future__ import annotations

from profile_compare.comparison.models import (
    Category,
    ComparisonRow,
    FilterMode,
)
from profile_compare.comparison.row_annotator import (
    ROW_CLASS_CHANGED,
    ROW_CLASS_UNCHANGED,
    annotate,
    annotate_rows,
    filter_rows,
    get_category_summary,
    get_row_class,
)


def make_row(key: str, is_different: bool, **fields) -> ComparisonRow:
    return ComparisonRow(
        key=key,
        is_different=is_different,
        fields={"objectName": key, "isDifferent": is_different, **fields},
    )


class TestGetRowClass:
    """Tests for get_row_class function."""

    def test_changed(self):
        """Differing rows get the changed class."""
        assert get_row_class(True) == ROW_CLASS_CHANGED

    def test_unchanged(self):
        """Identical rows get the unchanged class."""
        assert get_row_class(False) == ROW_CLASS_UNCHANGED


class TestAnnotate:
    """Tests for annotate function."""

    def test_adds_row_class(self):
        """annotate should select the row class from the difference flag."""
        assert annotate(make_row("Account", True)).row_class == "diff-changed"
        assert annotate(make_row("Contact", False)).row_class == "diff-unchanged"

    def test_keeps_key_flag_and_fields(self):
        """annotate should carry the key, flag and payload through."""
        row = make_row("Account", True, profile1Read=True)
        annotated = annotate(row)

        assert annotated.key == "Account"
        assert annotated.is_different is True
        assert annotated.fields["profile1Read"] is True

    def test_does_not_modify_original(self):
        """annotate should copy the payload, never share or mutate it."""
        row = make_row("Account", True)
        before = dict(row.fields)

        annotated = annotate(row)
        annotated.fields["extra"] = "x"

        assert dict(row.fields) == before
        assert annotated.fields is not row.fields

    def test_explicit_flag_overrides_class_only(self):
        """An explicit flag selects the class but leaves the data alone."""
        annotated = annotate(make_row("Contact", False), True)
        assert annotated.row_class == "diff-changed"
        assert annotated.is_different is False

    def test_repeated_annotation_is_stable(self):
        """Annotating the same row twice gives equal results."""
        row = make_row("Account", True)
        assert annotate(row) == annotate(row)


class TestFilterRows:
    """Tests for filter_rows and annotate_rows."""

    def test_all_keeps_everything_in_order(self):
        """FilterMode.ALL should keep every row in source order."""
        rows = [make_row("B", False), make_row("A", True), make_row("C", False)]
        assert [r.key for r in filter_rows(rows, FilterMode.ALL)] == ["B", "A", "C"]

    def test_differences_only(self):
        """FilterMode.DIFFERENCES_ONLY should keep differing rows only."""
        rows = [make_row("B", True), make_row("A", False), make_row("C", True)]
        assert [r.key for r in filter_rows(rows, FilterMode.DIFFERENCES_ONLY)] == ["B", "C"]

    def test_differences_only_is_idempotent(self):
        """Filtering twice should equal filtering once."""
        rows = [make_row("B", True), make_row("A", False)]
        once = filter_rows(rows, FilterMode.DIFFERENCES_ONLY)
        assert filter_rows(once, FilterMode.DIFFERENCES_ONLY) == once

    def test_annotate_rows(self):
        """annotate_rows should filter then annotate."""
        rows = [make_row("A", False), make_row("B", True)]
        annotated = annotate_rows(rows, FilterMode.DIFFERENCES_ONLY)
        assert [(r.key, r.row_class) for r in annotated] == [("B", "diff-changed")]


class TestGetCategorySummary:
    """Tests for get_category_summary function."""

    def test_counts(self):
        """Summary should count total and differing rows."""
        rows = [make_row("A", True), make_row("B", False), make_row("C", True)]
        summary = get_category_summary(Category.OBJECT_SETTINGS, rows)

        assert summary.total == 3
        assert summary.different == 2
        assert summary.card_class == "card-warning"
        assert summary.label == "Objects"

    def test_empty(self):
        """An empty category has zero counts and a success card."""
        summary = get_category_summary(Category.APEX_CLASSES, [])
        assert (summary.total, summary.different) == (0, 0)
        assert summary.card_class == "card-success"
