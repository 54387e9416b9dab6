"""Session model and related enums"""
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Optional


class Classification(Enum):
    """Activity state of a session (or, for STOPPED, of a worktree without one)."""
    ATTACHED = "attached"
    ALIVE = "alive"
    IDLE = "idle"
    ORPHAN = "orphan"
    STOPPED = "stopped"

    @property
    def priority(self) -> int:
        """Sort rank; lower is more active."""
        return CLASSIFICATION_PRIORITY[self]


# Lower sorts first. A group ranks as its most active child.
CLASSIFICATION_PRIORITY: Dict[Classification, int] = {
    Classification.ATTACHED: 1,
    Classification.ALIVE: 2,
    Classification.IDLE: 3,
    Classification.STOPPED: 4,
    Classification.ORPHAN: 5,
}


@dataclass(frozen=True)
class SessionFact:
    """A live tmux session as reported by the multiplexer."""
    name: str
    attached: bool
    last_activity: int  # Unix seconds, 0 = unknown
    pane_count: int = 1
    workdir: Optional[str] = None  # @workdir tag, may be stale


@dataclass(frozen=True)
class SessionStatus:
    """Runtime status of a session at evaluation time."""
    attached: bool
    pane_count: int
    last_activity: int
    git_dirty: bool = False
    git_modified: int = 0
    git_added: int = 0
    git_deleted: int = 0
    git_untracked: int = 0
