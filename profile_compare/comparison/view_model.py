"""
Comparison view model.

Owns the comparison tree for the current session, the global filter mode
and one DetailCache per drill-down category, and derives everything the
view renders: filtered and annotated rows, tab labels and summary cards.

Nothing here depends on the UI toolkit. The view calls the user-intent
entry points (select a profile, change the filter, toggle a row, run a
comparison) and re-reads the projections afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from profile_compare.comparison.detail_cache import DetailCache
from profile_compare.comparison.models import (
    AnnotatedRow,
    Category,
    CategorySummary,
    ComparisonResult,
    ComparisonRow,
    ExpandableRow,
    FilterMode,
    ProfileOption,
    SessionState,
)
from profile_compare.comparison.row_annotator import (
    annotate,
    annotate_rows,
    filter_rows,
    get_category_summary,
)
from profile_compare.service.base import ComparisonService, ServiceError

logger = logging.getLogger(__name__)


# Called as notify(message, title=..., severity=...), like Textual's App.notify
Notify = Callable[..., None]

COMPARE_ERROR_MESSAGE = "Comparison failed"
PROFILES_ERROR_MESSAGE = "Failed to load profiles"

EXPAND_ICON_EXPANDED = "▼"
EXPAND_ICON_COLLAPSED = "▶"


def _no_notify(message: str, **kwargs: object) -> None:
    return None


class ComparisonViewModel:
    """State and derived projections for a two-profile comparison.

    Session lifecycle: IDLE -> LOADING -> READY or FAILED, and back to
    LOADING on every new comparison. Entering LOADING drops the previous
    tree and resets every DetailCache.
    """

    def __init__(
        self,
        service: ComparisonService,
        notify: Notify | None = None,
        filter_mode: FilterMode = FilterMode.ALL,
    ) -> None:
        """Initialize the view model.

        Args:
            service: Backend used for profile lists, comparisons and
                field-level detail.
            notify: Callback for user-visible errors.
            filter_mode: Initial filter mode.
        """
        self._service = service
        self._notify = notify or _no_notify
        self._filter_mode = filter_mode
        self._result: ComparisonResult | None = None
        self._state = SessionState.IDLE
        self._busy = False
        self.profile_options: list[ProfileOption] = []
        self.profile1_id: str | None = None
        self.profile2_id: str | None = None
        self.last_error: str | None = None
        # Profile pair the loaded result was compared for
        self._compared_ids: tuple[str, str] | None = None
        self._caches: dict[Category, DetailCache] = {
            category: DetailCache(service.fetch_field_comparison)
            for category in Category
            if category.supports_detail
        }

    # -- state ----------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_busy(self) -> bool:
        """True while a comparison is in flight."""
        return self._busy

    @property
    def result(self) -> ComparisonResult | None:
        return self._result

    @property
    def filter_mode(self) -> FilterMode:
        return self._filter_mode

    @property
    def show_differences_only(self) -> bool:
        return self._filter_mode is FilterMode.DIFFERENCES_ONLY

    @property
    def can_compare(self) -> bool:
        """Whether a comparison can be started with the current selection."""
        return (
            bool(self.profile1_id)
            and bool(self.profile2_id)
            and self.profile1_id != self.profile2_id
            and not self._busy
        )

    def detail_cache(self, category: Category) -> DetailCache:
        """Return the DetailCache for a drill-down category.

        Raises:
            ValueError: If the category has no detail rows.
        """
        try:
            return self._caches[category]
        except KeyError:
            raise ValueError(f"{category.title} rows have no detail") from None

    # -- user intents ---------------------------------------------------

    def select_profile1(self, profile_id: str | None) -> None:
        self.profile1_id = profile_id or None

    def select_profile2(self, profile_id: str | None) -> None:
        self.profile2_id = profile_id or None

    def set_filter_mode(self, mode: FilterMode | str) -> None:
        """Change the global filter mode.

        Args:
            mode: A FilterMode or its value ("all" or "differences").
        """
        self._filter_mode = FilterMode(mode)

    def toggle_filter_mode(self) -> FilterMode:
        """Switch between showing all rows and differences only."""
        if self._filter_mode is FilterMode.ALL:
            self._filter_mode = FilterMode.DIFFERENCES_ONLY
        else:
            self._filter_mode = FilterMode.ALL
        return self._filter_mode

    def toggle_detail(
        self, category: Category, key: str
    ) -> asyncio.Task[None] | None:
        """Expand or collapse a row's detail.

        Args:
            category: A category that supports detail rows.
            key: The row key.

        Returns:
            The in-flight fetch task for the row, or None.
        """
        return self.detail_cache(category).toggle(key)

    async def load_profiles(self) -> bool:
        """Load the selectable profiles once.

        Returns:
            True if the profiles were loaded.
        """
        try:
            options = await self._service.list_profiles()
        except Exception:
            logger.error("Failed to load profiles", exc_info=True)
            self.profile_options = []
            self._report_error(PROFILES_ERROR_MESSAGE)
            return False

        self.profile_options = list(options)
        logger.info("Loaded %d profiles", len(self.profile_options))
        return True

    async def load_comparison(
        self, profile_id1: str | None = None, profile_id2: str | None = None
    ) -> bool:
        """Run a comparison of the selected profiles.

        Does nothing when ``can_compare`` is false. Otherwise clears the
        previous session, calls the service and stores the new tree.

        Args:
            profile_id1: Optional new selection for profile 1.
            profile_id2: Optional new selection for profile 2.

        Returns:
            True if a new comparison was loaded.
        """
        if profile_id1 is not None:
            self.select_profile1(profile_id1)
        if profile_id2 is not None:
            self.select_profile2(profile_id2)
        if not self.can_compare:
            logger.debug(
                "Comparison blocked for %r and %r", self.profile1_id, self.profile2_id
            )
            return False

        profile_ids = (self.profile1_id, self.profile2_id)
        self._result = None
        self._compared_ids = None
        self.last_error = None
        self._reset_caches(profile_ids)
        self._state = SessionState.LOADING
        self._busy = True
        try:
            result = await self._service.compare(*profile_ids)
        except Exception as e:
            message = COMPARE_ERROR_MESSAGE
            if isinstance(e, ServiceError) and e.message:
                message = e.message
            logger.error(
                "Comparison of %s and %s failed", *profile_ids, exc_info=True
            )
            self._state = SessionState.FAILED
            self._report_error(message)
            return False
        else:
            self._result = result
            self._compared_ids = profile_ids
            self._reset_caches(profile_ids)
            self._state = SessionState.READY
            logger.info("Compared %s and %s", *profile_ids)
            return True
        finally:
            self._busy = False

    # -- projections ----------------------------------------------------

    def projection_for(self, category: Category) -> list[AnnotatedRow]:
        """Filtered, annotated rows for a category, in source order.

        Rows of drill-down categories are ExpandableRows carrying their
        expansion state, loading flag and filtered detail rows.
        """
        if self._result is None:
            return []
        rows = filter_rows(self._result.rows_for(category), self._filter_mode)
        if not category.supports_detail:
            return [annotate(row) for row in rows]
        cache = self._caches[category]
        return [self._expandable_row(row, cache) for row in rows]

    def _expandable_row(self, row: ComparisonRow, cache: DetailCache) -> ExpandableRow:
        base = annotate(row)
        is_expanded = cache.is_expanded(row.key)
        return ExpandableRow(
            key=base.key,
            is_different=base.is_different,
            fields=base.fields,
            row_class=base.row_class,
            is_expanded=is_expanded,
            is_loading=cache.is_loading(row.key),
            expand_icon=EXPAND_ICON_EXPANDED if is_expanded else EXPAND_ICON_COLLAPSED,
            details=tuple(annotate_rows(cache.detail_for(row.key), self._filter_mode)),
        )

    def summary(self) -> dict[Category, CategorySummary]:
        """Total and differing counts per category, ignoring the filter."""
        if self._result is None:
            return {}
        return {
            category: get_category_summary(category, self._result.rows_for(category))
            for category in Category
        }

    def summary_cards(self) -> list[CategorySummary]:
        return list(self.summary().values())

    def tab_label(self, category: Category) -> str:
        """Tab title, with the differing count once a comparison is loaded."""
        summary = self.summary().get(category)
        if summary is None:
            return category.title
        return f"{category.title} ({summary.different})"

    def profile_label(self, which: int) -> str:
        """Display name of profile 1 or 2.

        While a comparison is loaded the label names the profile that was
        compared, not the current selection. Prefers the option's name,
        then the name reported by the comparison, then a placeholder.
        """
        if self._compared_ids is not None:
            profile_id = self._compared_ids[which - 1]
        else:
            profile_id = self.profile1_id if which == 1 else self.profile2_id
        for option in self.profile_options:
            if option.profile_id == profile_id:
                return option.profile_name
        if self._result is not None:
            name = self._result.profile1 if which == 1 else self._result.profile2
            if name:
                return name
        return f"Profile {which}"

    # -- internals ------------------------------------------------------

    def _reset_caches(self, profile_ids: tuple[str, str]) -> None:
        for cache in self._caches.values():
            cache.reset(profile_ids)

    def _report_error(self, message: str) -> None:
        self.last_error = message
        self._notify(message, title="Error", severity="error")
