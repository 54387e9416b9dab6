"""Display and formatting service for reconciled nodes"""
from collections import Counter
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from tmux_worktree.constants import CLASSIFICATION_SYMBOLS, CLI_COLORS, ERROR_COLOR, LEGEND_TEXT, SYMBOL_ERROR
from tmux_worktree.formatters import build_node_text
from tmux_worktree.models.node import ErrorNode, GroupNode, Node
from tmux_worktree.models.session import Classification
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def _leaf_classifications(nodes: Iterable[Node]) -> Iterable[Classification]:
    for node in nodes:
        match node:
            case GroupNode(children=children):
                yield from (child.classification for child in children)
            case ErrorNode():
                continue
            case _:
                yield node.classification


def count_by_classification(nodes: Sequence[Node]) -> Counter:
    """Count sessions (and stopped worktrees) per classification."""
    return Counter(_leaf_classifications(nodes))


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False, console: Optional[Console] = None):
        self.verbose = verbose
        self.debug_mode = debug
        self.console = console or Console()

    def build_tree(self, repo_name: str, nodes: Sequence[Node], now: int) -> Tree:
        """Build the rich tree for one repository."""
        tree = Tree(Text(repo_name, style="bold"))
        for node in nodes:
            branch = tree.add(build_node_text(node, repo_name, now, show_path=self.verbose))
            if isinstance(node, GroupNode):
                for child in node.children:
                    branch.add(build_node_text(child, repo_name, now, show_path=self.verbose))
        return tree

    def display_tree(
        self, repo_name: str, nodes: Sequence[Node], now: int, show_summary: bool = False
    ) -> None:
        """Print the tree of one repository."""
        if not nodes:
            self.console.print(f"[dim]{repo_name}: no sessions or worktrees to show[/dim]")
            return

        self.console.print(self.build_tree(repo_name, nodes, now))

        if show_summary:
            self.display_summary(nodes)

    def display_summary(self, nodes: Sequence[Node]) -> None:
        counts = count_by_classification(nodes)
        errors = sum(1 for node in nodes if isinstance(node, ErrorNode))

        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("State")
        table.add_column("Count", justify="right")
        for classification in sorted(Classification, key=lambda c: c.priority):
            symbol = CLASSIFICATION_SYMBOLS[classification]
            table.add_row(
                Text(f"{symbol} {classification.value}", style=CLI_COLORS[classification]),
                str(counts.get(classification, 0)),
            )
        if errors:
            table.add_row(Text(f"{SYMBOL_ERROR} error", style=ERROR_COLOR), str(errors))

        self.console.print("\nSummary:")
        self.console.print(table)
        if self.verbose:
            self.console.print(LEGEND_TEXT)

    def display_cleanup_results(self, results: Sequence, dry_run: bool) -> None:
        """Print the outcome of a cleanup run."""
        if not results:
            self.console.print("\n[green]Nothing to clean up![/green]")
            return

        for result in results:
            if result.success and dry_run:
                self.console.print(f"[yellow]Would remove {result.kind} {result.target}[/yellow]")
            elif result.success:
                self.console.print(f"[green]✓ Removed {result.kind} {result.target}[/green]")
            else:
                self.console.print(
                    f"[red]✗ Failed to remove {result.kind} {result.target}: {result.error}[/red]"
                )

        failed = sum(1 for r in results if not r.success)
        if dry_run:
            self.console.print("\n[dim]Dry run: nothing was changed[/dim]")
        elif failed:
            self.console.print(f"\n[red]{failed} of {len(results)} cleanup operations failed[/red]")
