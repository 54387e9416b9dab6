"""Formatting utilities for tmux-worktree.

This package provides the formatting functions used by the CLI and the TUI:
- date: Date and relative time formatting
- node: Node label, classification and git change formatting
"""

# Date formatters
from .date import format_date, format_relative_time

# Node formatters
from .node import (
    build_node_text,
    format_activity,
    format_classification,
    format_git_counts,
    format_label,
    format_node_details,
    format_panes,
    format_status_counts,
    get_node_style,
    node_git_status,
)

__all__ = [
    # Date
    "format_date",
    "format_relative_time",
    # Node
    "build_node_text",
    "format_activity",
    "format_classification",
    "format_git_counts",
    "format_label",
    "format_node_details",
    "format_panes",
    "format_status_counts",
    "get_node_style",
    "node_git_status",
]
