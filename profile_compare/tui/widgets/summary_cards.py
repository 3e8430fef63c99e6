"""Summary cards showing total and differing counts per category."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from profile_compare.comparison.models import CategorySummary


CARD_STYLES: dict[str, str] = {
    "card-warning": "bold black on yellow",
    "card-success": "bold black on green",
}


def render_cards(cards: list[CategorySummary]) -> Text:
    """Render summary cards as a single line of styled text.

    Args:
        cards: One summary per category.

    Returns:
        Rich Text such as " Apps 2/10  Objects 0/4 ".
    """
    text = Text()
    for i, card in enumerate(cards):
        if i:
            text.append("  ")
        text.append(
            f" {card.label} {card.different}/{card.total} ",
            style=CARD_STYLES.get(card.card_class, ""),
        )
    return text


class SummaryCards(Static):
    """One-line strip of per-category summary cards."""

    DEFAULT_CSS = """
    SummaryCards {
        height: auto;
        padding: 0 1;
    }
    """

    PLACEHOLDER = "Select two profiles and press Compare"

    def on_mount(self) -> None:
        self.update(self.PLACEHOLDER)

    def update_cards(self, cards: list[CategorySummary]) -> None:
        """Show the given cards, or the placeholder if there are none."""
        if not cards:
            self.update(self.PLACEHOLDER)
            return
        self.update(render_cards(cards))
