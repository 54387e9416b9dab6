"""Node label, status and change formatting."""

from typing import Optional

from rich.text import Text

from tmux_worktree.constants import (
    CLASSIFICATION_SYMBOLS,
    CLI_COLORS,
    ERROR_COLOR,
    ROOT_SLUG,
    SYMBOL_DIRTY,
    SYMBOL_ERROR,
)
from tmux_worktree.models.node import (
    DetailNode,
    ErrorNode,
    GroupNode,
    InactiveNode,
    Node,
    SessionNode,
)
from tmux_worktree.models.session import Classification
from tmux_worktree.models.worktree import GitStatusFact
from tmux_worktree.formatters.date import format_relative_time


def format_label(node: Node, repo_name: str) -> str:
    """
    Display name of a node.

    The root checkout is shown as "(root) <repo>" rather than its slug.
    """
    if node.label == ROOT_SLUG and not isinstance(node, (DetailNode, ErrorNode)):
        return f"(root) {repo_name}"
    return node.label


def format_git_counts(modified: int, added: int, deleted: int, untracked: int = 0) -> str:
    """
    Format change counts as "M:n A:n D:n", omitting zero buckets.

    Returns:
        Empty string when nothing changed
    """
    parts = []
    if modified:
        parts.append(f"M:{modified}")
    if added:
        parts.append(f"A:{added}")
    if deleted:
        parts.append(f"D:{deleted}")
    if untracked:
        parts.append(f"?:{untracked}")
    return " ".join(parts)


def format_status_counts(status: Optional[GitStatusFact]) -> str:
    if status is None:
        return ""
    counts = format_git_counts(status.modified, status.added, status.deleted, status.untracked)
    if status.dirty:
        return f"{SYMBOL_DIRTY} {counts}"
    return counts


def node_git_status(node: Node) -> Optional[GitStatusFact]:
    """The git status shown for a node, if it has one."""
    match node:
        case InactiveNode(git_status=git_status):
            return git_status
        case SessionNode(member=member) | DetailNode(member=member):
            status = member.status
            return GitStatusFact(
                modified=status.git_modified,
                added=status.git_added,
                deleted=status.git_deleted,
                untracked=status.git_untracked,
            )
        case GroupNode(children=children) if children:
            return node_git_status(children[0])
    return None


def format_classification(classification: Optional[Classification]) -> str:
    """Symbol and name of a classification, e.g. "● attached"."""
    if classification is None:
        return f"{SYMBOL_ERROR} error"
    return f"{CLASSIFICATION_SYMBOLS[classification]} {classification.value}"


def get_node_style(node: Node) -> str:
    """Rich style for a node, by classification."""
    if isinstance(node, ErrorNode):
        return ERROR_COLOR
    return CLI_COLORS.get(node.classification, "")


def format_activity(node: Node, now: int) -> str:
    """Relative last activity of a node's session(s), or of a stopped worktree's files."""
    match node:
        case SessionNode(member=member) | DetailNode(member=member):
            return format_relative_time(member.status.last_activity, now)
        case GroupNode(children=children):
            latest = max((child.member.status.last_activity for child in children), default=0)
            return format_relative_time(latest, now)
        case InactiveNode(recent_time=recent_time) if recent_time:
            return f"changed {format_relative_time(recent_time, now)}"
    return ""


def format_panes(node: Node) -> str:
    match node:
        case SessionNode(member=member) | DetailNode(member=member):
            count = member.status.pane_count
            return f"{count} pane" if count == 1 else f"{count} panes"
        case GroupNode(children=children):
            return f"{len(children)} sessions"
    return ""


def build_node_text(node: Node, repo_name: str, now: int, show_path: bool = False) -> Text:
    """One-line rich rendering of a node, shared by the CLI tree and the TUI."""
    style = get_node_style(node)
    text = Text()

    if isinstance(node, ErrorNode):
        text.append(f"{SYMBOL_ERROR} {node.label}", style=style)
        text.append(f"  {node.message}", style=style)
        return text

    text.append(format_classification(node.classification), style=style)
    text.append("  ")
    text.append(format_label(node, repo_name), style=f"bold {style}".strip())

    details = [format_activity(node, now), format_panes(node)]
    if not isinstance(node, DetailNode):
        details.append(format_status_counts(node_git_status(node)))
    if isinstance(node, InactiveNode):
        details.append(f"-> {node.target_session_name}")
    details = [d for d in details if d]

    if details:
        text.append("  " + "  ".join(details), style=style or "dim")

    path = getattr(node, "path", None)
    if show_path and path:
        text.append(f"  {path}", style="dim")
    return text


def format_node_details(node: Node, now: int) -> str:
    """Multi-line description of a node for the info dialog."""
    lines = [f"Kind: {node.kind.value}", f"Key: {node.key}"]

    if isinstance(node, ErrorNode):
        lines.append(f"Error: {node.message}")
        return "\n".join(lines)

    lines.append(f"State: {format_classification(node.classification)}")

    path = getattr(node, "path", None)
    if path:
        lines.append(f"Path: {path}")
    worktree = getattr(node, "worktree", None)
    if worktree is not None:
        lines.append(f"Branch: {worktree.branch or '(detached)'}")
        if worktree.is_main:
            lines.append("Main worktree: yes")

    changes = format_status_counts(node_git_status(node))
    if changes:
        lines.append(f"Changes: {changes}")
    recent_time = getattr(node, "recent_time", 0)
    if recent_time:
        lines.append(f"Last change: {format_relative_time(recent_time, now)}")

    match node:
        case InactiveNode(target_session_name=target):
            lines.append(f"Session to create: {target}")
        case SessionNode(member=member) | DetailNode(member=member):
            lines.append(f"Session: {member.name}")
            lines.append(f"Attached: {'yes' if member.status.attached else 'no'}")
            lines.append(f"Panes: {member.status.pane_count}")
            lines.append(f"Last activity: {format_relative_time(member.status.last_activity, now)}")
            if member.session.workdir:
                lines.append(f"Working directory: {member.session.workdir}")
        case GroupNode(children=children):
            lines.append("Sessions:")
            lines.extend(
                f"  {format_classification(child.classification)}  {child.label}"
                for child in children
            )

    return "\n".join(lines)
