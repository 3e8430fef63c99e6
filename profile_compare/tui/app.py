"""
Main Textual application for the Profile Comparison Viewer.

Compares two permission profiles category by category (assigned apps,
object settings, system permissions, Apex classes, Visualforce pages and
custom permissions), with on-demand field-level detail for objects.

Sources:
    - Remote API (--url): JSON comparison service over HTTP
    - Local exports (--profiles-dir): directory of profile JSON exports
"""

import argparse
import logging
import os
import sys

from textual.app import App
from textual.binding import Binding
from textual.logging import TextualHandler

from profile_compare.comparison.models import FilterMode
from profile_compare.service import (
    ComparisonService,
    DirectoryComparisonService,
    HttpComparisonService,
)
from profile_compare.tui.views.comparison_screen import ComparisonScreen

logger = logging.getLogger(__name__)


URL_ENV_VAR = "PROFILE_COMPARE_URL"


class ProfileComparisonApp(App):
    """A Textual app for comparing two permission profiles."""

    TITLE = "Profile Comparison"

    CSS = """
    Screen {
        background: $surface;
    }

    DataTable > .datatable--header {
        background: $primary-darken-1;
        color: $text;
        text-style: bold;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
        color: $text;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        service: ComparisonService,
        filter_mode: FilterMode = FilterMode.ALL,
        profile1_id: str | None = None,
        profile2_id: str | None = None,
    ):
        """Initialize the app with a comparison service.

        Args:
            service: Backend for profiles, comparisons and field detail.
            filter_mode: Initial filter mode.
            profile1_id: Profile to preselect on the left.
            profile2_id: Profile to preselect on the right. When both are
                given the comparison runs as soon as profiles are loaded.
        """
        super().__init__()
        self._service = service
        self._filter_mode = filter_mode
        self._profile1_id = profile1_id
        self._profile2_id = profile2_id

    @property
    def service(self) -> ComparisonService:
        return self._service

    def on_mount(self) -> None:
        """Push the comparison screen."""
        self.push_screen(
            ComparisonScreen(
                self._service,
                filter_mode=self._filter_mode,
                profile1_id=self._profile1_id,
                profile2_id=self._profile2_id,
            )
        )

    async def action_quit(self) -> None:
        """Close the service and quit."""
        await self._service.close()
        self.exit()


def configure_logging(log_file: str | None, verbose: bool) -> None:
    """Send log records to a file, or to the Textual dev console.

    Args:
        log_file: Path of the log file, or None for the Textual console.
        verbose: Log at DEBUG instead of INFO.
    """
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = TextualHandler()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[handler],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="profile-compare",
        description="Compare two permission profiles in a terminal UI. "
        "Reads from a remote comparison API or a directory of profile exports.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--url",
        default=os.environ.get(URL_ENV_VAR),
        help=f"Base URL of the comparison API (default: ${URL_ENV_VAR})",
    )
    source.add_argument(
        "--profiles-dir",
        "-d",
        default=None,
        help="Directory of profile JSON exports to compare locally",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=HttpComparisonService.DEFAULT_TIMEOUT,
        help="Request timeout in seconds for --url (default: %(default)s)",
    )
    parser.add_argument(
        "--filter",
        choices=[mode.value for mode in FilterMode],
        default=FilterMode.ALL.value,
        help="Initial row filter (default: %(default)s)",
    )
    parser.add_argument("--profile1", default=None, help="Profile ID to preselect on the left")
    parser.add_argument("--profile2", default=None, help="Profile ID to preselect on the right")
    parser.add_argument("--log-file", default=None, help="Write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def build_service(args: argparse.Namespace) -> ComparisonService:
    """Create the comparison service selected on the command line."""
    if args.profiles_dir:
        return DirectoryComparisonService(args.profiles_dir)
    return HttpComparisonService(args.url, timeout=args.timeout)


def main() -> None:
    """Parse arguments and run the application."""
    parser = build_parser()
    args = parser.parse_args()

    if args.profiles_dir:
        # Verify the directory exists
        if not os.path.isdir(args.profiles_dir):
            print(f"Error: Directory not found: {args.profiles_dir}", file=sys.stderr)
            sys.exit(1)
        if not os.access(args.profiles_dir, os.R_OK):
            print(f"Error: Permission denied: {args.profiles_dir}", file=sys.stderr)
            sys.exit(1)
    elif not args.url:
        print(
            f"Error: Provide --url, --profiles-dir or set {URL_ENV_VAR}",
            file=sys.stderr,
        )
        sys.exit(1)

    configure_logging(args.log_file, args.verbose)
    logger.info("Starting profile comparison (%s)", args.profiles_dir or args.url)

    app = ProfileComparisonApp(
        service=build_service(args),
        filter_mode=FilterMode(args.filter),
        profile1_id=args.profile1,
        profile2_id=args.profile2,
    )
    app.run()


if __name__ == "__main__":
    main()
