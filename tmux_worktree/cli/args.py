"""Command-line argument parsing for tmux-worktree."""

import argparse
from tmux_worktree.__version__ import __version__
from tmux_worktree.models.node import FilterCategory


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Show tmux sessions grouped by the git worktree they belong to",
        epilog="Settings are read from ~/.config/tmux-worktree/config.json; "
        "command-line flags take precedence.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"tmux-worktree {__version__}")
    parser.add_argument(
        "--repo",
        metavar="PATH",
        help="Repository to inspect (default: current directory)",
    )
    parser.add_argument(
        "--all-repos",
        action="store_true",
        help="Inspect every repository found under the configured search paths",
    )
    parser.add_argument(
        "--filter",
        choices=FilterCategory.choices(),
        default=None,
        help="Only show sessions in this category (default: all)",
    )
    parser.add_argument("--json", action="store_true", help="Print the node list as JSON")
    parser.add_argument(
        "--interactive", action="store_true", help="Launch interactive TUI mode (default for TTY)"
    )
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Force non-interactive CLI mode (for scripts/automation)",
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Kill tmux sessions whose working directory matches no worktree",
    )
    parser.add_argument(
        "--include-worktrees",
        action="store_true",
        help="With --cleanup, also remove worktrees that have no session",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what cleanup would remove without removing it",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Skip confirmations and remove worktrees with uncommitted changes",
    )
    parser.add_argument(
        "--alive-threshold",
        type=int,
        metavar="SECONDS",
        help="Seconds of inactivity before a detached session counts as idle (default: 600)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for git status (default: auto-detect)",
    )
    parser.add_argument(
        "--no-recent",
        action="store_true",
        help="Skip scanning worktrees for recent file changes",
    )
    parser.add_argument("--config", metavar="PATH", help="Path to the JSON config file")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )

    return parser.parse_args(argv)
