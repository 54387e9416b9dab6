"""Worktree data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WorktreeFact:
    """A git worktree as reported by `git worktree list`."""

    path: str
    branch: str  # Empty for detached HEAD
    is_main: bool  # Is this the main working tree?
    prunable: bool = False
    head: str = ""

    def __str__(self) -> str:
        main_marker = " (main)" if self.is_main else ""
        prunable_marker = " [prunable]" if self.prunable else ""
        return f"{self.branch or '(detached)'} @ {self.path}{main_marker}{prunable_marker}"


@dataclass(frozen=True)
class GitStatusFact:
    """File counts from `git status --porcelain` for one worktree."""

    modified: int = 0
    added: int = 0
    deleted: int = 0
    untracked: int = 0  # Shown, but does not make a worktree dirty

    @property
    def dirty(self) -> bool:
        return self.modified + self.added + self.deleted > 0
