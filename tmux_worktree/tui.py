"""Interactive TUI for tmux-worktree using Textual."""

import asyncio
import time
from typing import List, Optional, Sequence, Tuple

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.events import Click
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Static, Tree
from rich.text import Text

from .__version__ import __version__
from .constants import LEGEND_TEXT
from .core.session_keeper import SessionKeeper
from .formatters import build_node_text, format_node_details
from .models.node import ErrorNode, FilterCategory, GroupNode, Node
from .services.display_service import count_by_classification
from .logging_config import get_logger

logger = get_logger(__name__)


class InfoScreen(ModalScreen):
    """Modal info display dialog."""

    DEFAULT_CSS = """
    InfoScreen {
        align: center middle;
    }

    #info-dialog {
        width: 80%;
        height: auto;
        border: thick $background 80%;
        background: $surface;
        padding: 1 2;
    }

    #info-content {
        width: 100%;
        height: auto;
        padding: 1 0;
    }

    #info-button-container {
        width: 100%;
        height: auto;
        align: center middle;
        padding: 1 0;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("i", "close", "Close", show=False),
    ]

    def __init__(self, info: str):
        super().__init__()
        self.info = info

    def compose(self) -> ComposeResult:
        with Vertical(id="info-dialog"):
            yield Static(self.info, id="info-content")
            with Container(id="info-button-container"):
                yield Button("Close", variant="primary", id="close")

    def action_close(self) -> None:
        self.dismiss()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press."""
        self.dismiss()


class NonExpandingHeader(Header):
    """Header widget that doesn't expand/contract on click."""

    def on_click(self, event: Click) -> None:
        event.stop()


def next_filter(current: FilterCategory) -> FilterCategory:
    """The filter category after ``current``, wrapping around."""
    categories = list(FilterCategory)
    return categories[(categories.index(current) + 1) % len(categories)]


class TmuxWorktreeApp(App):
    """Interactive TUI for tmux-worktree."""

    TITLE = "tmux-worktree"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    Tree {
        height: 1fr;
    }

    #status-bar {
        dock: bottom;
        height: auto;
        background: $panel;
        padding: 1;
    }

    ToastRack {
        offset: 0 -3;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("f", "cycle_filter", "Filter"),
        Binding("i", "show_info", "Show Info"),
        Binding("l", "show_legend", "Legend"),
    ]

    def __init__(
        self,
        keepers: Sequence[SessionKeeper],
        filter_category: FilterCategory = FilterCategory.ALL,
    ):
        super().__init__()
        self.keepers = list(keepers)
        self.filter_category = filter_category
        self.results: List[Tuple[SessionKeeper, List[Node]]] = []
        self.now = 0

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield NonExpandingHeader(show_clock=False, icon="")
        yield Tree("tmux-worktree", id="session-tree")
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Load data in the background once the app is up."""
        tree = self.query_one(Tree)
        tree.show_root = False
        tree.guide_depth = 3
        self.refresh_data()  # @work decorator handles Worker creation

    def _populate_tree(self) -> None:
        tree = self.query_one(Tree)
        tree.clear()

        for keeper, nodes in self.results:
            repo_branch = tree.root.add(Text(keeper.repo_name, style="bold"), expand=True)
            if not nodes:
                repo_branch.add_leaf(Text("no sessions or worktrees to show", style="dim"))
                continue

            for node in nodes:
                label = build_node_text(node, keeper.repo_name, self.now)
                if isinstance(node, GroupNode):
                    group = repo_branch.add(label, data=node, expand=True)
                    for child in node.children:
                        group.add_leaf(build_node_text(child, keeper.repo_name, self.now), data=child)
                else:
                    repo_branch.add_leaf(label, data=node)

        tree.root.expand()

    def _update_status(self) -> None:
        status_bar = self.query_one("#status-bar", Static)
        nodes = [node for _, results in self.results for node in results]
        counts = count_by_classification(nodes)
        errors = sum(1 for node in nodes if isinstance(node, ErrorNode))

        parts = [f"Filter: {self.filter_category.value}"]
        parts.extend(f"{c.value}: {n}" for c, n in sorted(counts.items(), key=lambda i: i[0].priority))
        if errors:
            parts.append(f"errors: {errors}")
        status_bar.update(" | ".join(parts))

    def _selected_node(self) -> Optional[Node]:
        cursor = self.query_one(Tree).cursor_node
        if cursor is None:
            return None
        return cursor.data

    def action_refresh(self) -> None:
        """Trigger refresh of session data."""
        self.refresh_data()

    def action_cycle_filter(self) -> None:
        """Switch to the next filter category and reload."""
        self.filter_category = next_filter(self.filter_category)
        self.notify(f"Filter: {self.filter_category.value}")
        self.refresh_data()

    def action_show_info(self) -> None:
        """Show details of the highlighted node."""
        node = self._selected_node()
        if node is None:
            self.notify("Select a session or worktree first", severity="warning")
            return
        self.push_screen(InfoScreen(format_node_details(node, self.now)))

    def action_show_legend(self) -> None:
        self.push_screen(InfoScreen(LEGEND_TEXT.strip()))

    @work(exclusive=True, thread=False)
    async def refresh_data(self) -> None:
        """Run one refresh pass per repository (runs in background).

        The worker is exclusive: starting a new pass cancels the running one,
        so an older pass never overwrites a newer result.
        """
        tree = self.query_one(Tree)
        tree.loading = True

        filter_category = self.filter_category
        now = int(time.time())

        try:
            results = []
            for keeper in self.keepers:
                # keeper methods are sync; keep the event loop responsive
                nodes = await asyncio.to_thread(keeper.refresh, filter_category, now)
                results.append((keeper, nodes))

            self.results = results
            self.now = now
            self._populate_tree()
            self._update_status()
        except Exception as e:
            logger.error(f"Error refreshing: {e}", exc_info=True)
            error_msg = f"Error refreshing sessions:\n\n{str(e)}\n\nCheck the logs for more details."
            self.push_screen(InfoScreen(error_msg))
        finally:
            tree.loading = False

    async def action_quit(self) -> None:
        """Cancel running workers before exiting."""
        self.workers.cancel_all()
        self.exit()
