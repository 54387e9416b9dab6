"""Association and presentation node models.

Associations are the engine's intermediate result: one per worktree path plus
one per orphaned session. Nodes are what the CLI/TUI render. Each node
variant is its own frozen dataclass carrying only the fields that make sense
for it, tagged with a ``kind`` so consumers can ``match`` on it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from .session import Classification, SessionFact, SessionStatus
from .worktree import GitStatusFact, WorktreeFact


class NodeKind(Enum):
    """Presentation node variants."""
    GROUP = "group"
    SESSION = "session"
    DETAIL = "detail"
    INACTIVE = "inactive"
    ERROR = "error"


class FilterCategory(Enum):
    """Category selector applied to the sorted node list."""
    ALL = "all"
    ATTACHED = "attached"
    ALIVE = "alive"
    IDLE = "idle"
    STOPPED = "stopped"
    ORPHANS = "orphans"

    @property
    def classification(self) -> Optional[Classification]:
        """Classification a leaf must carry to pass this filter (None for ALL)."""
        if self is FilterCategory.ALL:
            return None
        if self is FilterCategory.ORPHANS:
            return Classification.ORPHAN
        return Classification(self.value)

    @classmethod
    def choices(cls) -> list[str]:
        return [category.value for category in cls]


@dataclass(frozen=True)
class ClassifiedSession:
    """A session together with its evaluated status and classification."""
    session: SessionFact
    status: SessionStatus
    classification: Classification
    slug: str

    @property
    def name(self) -> str:
        return self.session.name


@dataclass(frozen=True)
class Association:
    """Sessions and (at most) one worktree sharing a normalized path.

    ``key`` is the normalized path, or ``orphan:<session-name>`` when the
    session's working directory matches no worktree.
    """
    key: str
    path: Optional[str]
    worktree: Optional[WorktreeFact] = None
    members: Tuple[ClassifiedSession, ...] = ()
    git_status: Optional[GitStatusFact] = None
    recent_time: int = 0  # newest file change or agent use in the worktree, 0 = unknown

    @property
    def is_orphan(self) -> bool:
        return self.worktree is None

    @property
    def is_inactive(self) -> bool:
        return self.worktree is not None and not self.members


def _worktree_dict(worktree: Optional[WorktreeFact]) -> Optional[Dict[str, Any]]:
    if worktree is None:
        return None
    return {
        "path": worktree.path,
        "branch": worktree.branch,
        "is_main": worktree.is_main,
        "head": worktree.head,
    }


def _member_dict(member: ClassifiedSession) -> Dict[str, Any]:
    status = member.status
    return {
        "name": member.session.name,
        "slug": member.slug,
        "classification": member.classification.value,
        "attached": status.attached,
        "pane_count": status.pane_count,
        "last_activity": status.last_activity,
        "workdir": member.session.workdir,
        "git": {
            "dirty": status.git_dirty,
            "modified": status.git_modified,
            "added": status.git_added,
            "deleted": status.git_deleted,
            "untracked": status.git_untracked,
        },
    }


@dataclass(frozen=True)
class SessionNode:
    """A path with exactly one session (or a single orphaned session)."""
    key: str
    label: str
    member: ClassifiedSession
    path: Optional[str] = None
    worktree: Optional[WorktreeFact] = None
    recent_time: int = 0

    kind: ClassVar[NodeKind] = NodeKind.SESSION

    @property
    def classification(self) -> Classification:
        return self.member.classification

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "label": self.label,
            "path": self.path,
            "classification": self.classification.value,
            "worktree": _worktree_dict(self.worktree),
            "recent_time": self.recent_time,
            "session": _member_dict(self.member),
        }


@dataclass(frozen=True)
class DetailNode:
    """One session inside a group."""
    key: str
    label: str
    member: ClassifiedSession

    kind: ClassVar[NodeKind] = NodeKind.DETAIL

    @property
    def classification(self) -> Classification:
        return self.member.classification

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "label": self.label,
            "classification": self.classification.value,
            "session": _member_dict(self.member),
        }


@dataclass(frozen=True)
class GroupNode:
    """A path declared as working directory by several sessions."""
    key: str
    label: str
    children: Tuple[DetailNode, ...]
    path: Optional[str] = None
    worktree: Optional[WorktreeFact] = None
    recent_time: int = 0

    kind: ClassVar[NodeKind] = NodeKind.GROUP

    @property
    def classification(self) -> Classification:
        """The most active child's classification."""
        return min((child.classification for child in self.children), key=lambda c: c.priority)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "label": self.label,
            "path": self.path,
            "classification": self.classification.value,
            "worktree": _worktree_dict(self.worktree),
            "recent_time": self.recent_time,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class InactiveNode:
    """A worktree without a session; the session is created on demand."""
    key: str
    label: str
    path: str
    worktree: WorktreeFact
    target_session_name: str
    git_status: Optional[GitStatusFact] = None
    recent_time: int = 0

    kind: ClassVar[NodeKind] = NodeKind.INACTIVE

    @property
    def classification(self) -> Classification:
        return Classification.STOPPED

    def to_dict(self) -> Dict[str, Any]:
        git_status = self.git_status or GitStatusFact()
        return {
            "kind": self.kind.value,
            "key": self.key,
            "label": self.label,
            "path": self.path,
            "classification": self.classification.value,
            "worktree": _worktree_dict(self.worktree),
            "target_session_name": self.target_session_name,
            "recent_time": self.recent_time,
            "git": {
                "dirty": git_status.dirty,
                "modified": git_status.modified,
                "added": git_status.added,
                "deleted": git_status.deleted,
                "untracked": git_status.untracked,
            },
        }


@dataclass(frozen=True)
class ErrorNode:
    """Replaces a repository's whole tree when its sources could not be read."""
    key: str
    label: str
    message: str

    kind: ClassVar[NodeKind] = NodeKind.ERROR

    @property
    def classification(self) -> None:
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "label": self.label,
            "message": self.message,
        }


Node = Union[GroupNode, SessionNode, DetailNode, InactiveNode, ErrorNode]
