"""
Comparison Screen for side-by-side profile comparison.

Lets the user pick two profiles, run a comparison and browse the result
as one tab per category. Object settings rows expand to show field-level
permissions, fetched on first expansion.
"""

from __future__ import annotations

import asyncio

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Select,
    TabbedContent,
    TabPane,
)

from profile_compare.comparison.models import Category, FilterMode
from profile_compare.comparison.view_model import ComparisonViewModel
from profile_compare.service.base import ComparisonService
from profile_compare.tui.widgets import ComparisonTable, ObjectSettingsTable, SummaryCards


FILTER_OPTIONS = [
    ("All", FilterMode.ALL.value),
    ("Differences Only", FilterMode.DIFFERENCES_ONLY.value),
]


def pane_id(category: Category) -> str:
    return f"tab-{category.wire_name}"


def table_id(category: Category) -> str:
    return f"table-{category.wire_name}"


class ComparisonScreen(Screen):
    """Profile selection, summary and per-category comparison tabs."""

    CSS = """
    ComparisonScreen {
        layout: vertical;
    }

    #controls {
        height: auto;
        padding: 0 1;
    }

    #controls Select {
        width: 1fr;
    }

    #filter-select {
        max-width: 24;
    }

    #compare-button {
        margin-left: 1;
    }

    #summary-cards {
        margin: 1 0;
    }

    #category-tabs {
        height: 1fr;
    }

    Header { dock: top; }
    Footer { dock: bottom; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("c", "compare", "Compare"),
        Binding("f", "toggle_filter", "Toggle Filter"),
    ]

    def __init__(
        self,
        service: ComparisonService,
        filter_mode: FilterMode = FilterMode.ALL,
        profile1_id: str | None = None,
        profile2_id: str | None = None,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the ComparisonScreen.

        Args:
            service: Backend for profiles, comparisons and field detail.
            filter_mode: Initial filter mode.
            profile1_id: Profile to preselect on the left.
            profile2_id: Profile to preselect on the right.
            name: Optional name for the screen.
            id: Optional ID for the screen.
            classes: Optional CSS classes for the screen.
        """
        super().__init__(name=name, id=id, classes=classes)
        self.view_model = ComparisonViewModel(
            service, notify=self._notify_error, filter_mode=filter_mode
        )
        self._initial_profiles = (profile1_id, profile2_id)

    def compose(self) -> ComposeResult:
        """Compose the screen layout."""
        yield Header()
        with Horizontal(id="controls"):
            yield Select([], prompt="Profile 1", id="profile1-select")
            yield Select([], prompt="Profile 2", id="profile2-select")
            yield Select(
                FILTER_OPTIONS,
                value=self.view_model.filter_mode.value,
                allow_blank=False,
                id="filter-select",
            )
            yield Button("Compare", id="compare-button", variant="primary", disabled=True)
        yield SummaryCards(id="summary-cards")
        with TabbedContent(id="category-tabs"):
            for category in Category:
                with TabPane(category.title, id=pane_id(category)):
                    if category.supports_detail:
                        yield ObjectSettingsTable(id=table_id(category))
                    else:
                        yield ComparisonTable(category, id=table_id(category))
        yield Footer()

    def on_mount(self) -> None:
        """Load the selectable profiles once."""
        self.title = "Profile Comparison"
        self.call_after_refresh(self._render_all)
        self._load_profiles()

    # -- workers ----------------------------------------------------------

    @work(exclusive=True, group="profiles")
    async def _load_profiles(self) -> None:
        """Fetch profiles and fill both selectors."""
        if not await self.view_model.load_profiles():
            return

        options = [(option.label, option.profile_id) for option in self.view_model.profile_options]
        for select_id in ("#profile1-select", "#profile2-select"):
            self.query_one(select_id, Select).set_options(options)

        known = {option.profile_id for option in self.view_model.profile_options}
        profile1_id, profile2_id = self._initial_profiles
        if profile1_id in known:
            self.query_one("#profile1-select", Select).value = profile1_id
            self.view_model.select_profile1(profile1_id)
        if profile2_id in known:
            self.query_one("#profile2-select", Select).value = profile2_id
            self.view_model.select_profile2(profile2_id)
        self._update_compare_button()

        if profile1_id and profile2_id and self.view_model.can_compare:
            self._run_comparison()

    @work(exclusive=True, group="compare")
    async def _run_comparison(self) -> None:
        """Run the comparison and re-render everything."""
        tabs = self.query_one("#category-tabs", TabbedContent)
        self.query_one("#compare-button", Button).disabled = True
        tabs.loading = True
        try:
            loaded = await self.view_model.load_comparison()
        finally:
            tabs.loading = False
            self._render_all()

        if loaded:
            self.notify(
                f"Compared {self.view_model.profile_label(1)} "
                f"with {self.view_model.profile_label(2)}"
            )

    @work(group="detail")
    async def _wait_for_detail(self, pending: asyncio.Task[None]) -> None:
        """Re-render object settings once a field detail fetch finishes."""
        await pending
        self._render_category(Category.OBJECT_SETTINGS)

    # -- rendering --------------------------------------------------------

    def _render_all(self) -> None:
        tabs = self.query_one("#category-tabs", TabbedContent)
        for category in Category:
            tabs.get_tab(pane_id(category)).label = self.view_model.tab_label(category)
            self._render_category(category)
        self.query_one("#summary-cards", SummaryCards).update_cards(
            self.view_model.summary_cards()
        )
        self._update_compare_button()

    def _render_category(self, category: Category) -> None:
        table = self.query_one(f"#{table_id(category)}", ComparisonTable)
        if isinstance(table, ObjectSettingsTable):
            table.show_differences_only = self.view_model.show_differences_only

        if self.view_model.result is None:
            empty_message = "No comparison loaded"
        elif self.view_model.show_differences_only:
            empty_message = "No differences"
        else:
            empty_message = "No data"

        table.render_rows(
            self.view_model.projection_for(category),
            profile_labels=(self.view_model.profile_label(1), self.view_model.profile_label(2)),
            empty_message=empty_message,
        )

    def _update_compare_button(self) -> None:
        self.query_one("#compare-button", Button).disabled = not self.view_model.can_compare

    def _notify_error(self, message: str, **kwargs) -> None:
        self.notify(message, **kwargs)

    # -- events -----------------------------------------------------------

    def on_select_changed(self, event: Select.Changed) -> None:
        """Route selector changes to the view model."""
        value = event.value if isinstance(event.value, str) else None
        select_id = event.select.id

        if select_id == "profile1-select":
            self.view_model.select_profile1(value)
            self._update_compare_button()
        elif select_id == "profile2-select":
            self.view_model.select_profile2(value)
            self._update_compare_button()
        elif select_id == "filter-select" and value is not None:
            if FilterMode(value) is not self.view_model.filter_mode:
                self.view_model.set_filter_mode(value)
                self._render_all()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "compare-button":
            self.action_compare()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Toggle field detail when an object row is selected (Enter)."""
        if not isinstance(event.data_table, ObjectSettingsTable):
            return

        object_key = event.data_table.selected_object_key(event)
        if object_key is None:
            return

        pending = self.view_model.toggle_detail(Category.OBJECT_SETTINGS, object_key)
        self._render_category(Category.OBJECT_SETTINGS)
        if pending is not None:
            self._wait_for_detail(pending)

    # -- actions ----------------------------------------------------------

    def action_compare(self) -> None:
        """Run a comparison of the selected profiles."""
        if not self.view_model.can_compare:
            if not self.view_model.is_busy:
                self.notify("Select two different profiles to compare", severity="warning")
            return
        self._run_comparison()

    def action_toggle_filter(self) -> None:
        """Switch between all rows and differences only."""
        mode = self.view_model.toggle_filter_mode()
        self.query_one("#filter-select", Select).value = mode.value
        self._render_all()

    async def action_quit(self) -> None:
        """Quit the application."""
        await self.app.action_quit()
