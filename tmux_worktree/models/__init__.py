"""Data models for tmux-worktree."""

from .session import Classification, SessionFact, SessionStatus
from .worktree import WorktreeFact, GitStatusFact
from .node import (
    Association,
    ClassifiedSession,
    DetailNode,
    ErrorNode,
    FilterCategory,
    GroupNode,
    InactiveNode,
    Node,
    NodeKind,
    SessionNode,
)

__all__ = [
    "Classification",
    "SessionFact",
    "SessionStatus",
    "WorktreeFact",
    "GitStatusFact",
    "Association",
    "ClassifiedSession",
    "DetailNode",
    "ErrorNode",
    "FilterCategory",
    "GroupNode",
    "InactiveNode",
    "Node",
    "NodeKind",
    "SessionNode",
]
