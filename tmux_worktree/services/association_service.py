"""Session naming and path association.

Sessions are named ``<repo>_<slug>`` and tagged with the worktree they were
created for (tmux ``@workdir``). This module pairs them with worktrees by
normalized path. Any session whose path cannot be resolved, or resolves to
no known worktree, ends up in its own ``orphan:<name>`` association.
"""

import os
import re
import time
from typing import Dict, List, Mapping, Optional, Sequence

from tmux_worktree.constants import (
    ALIVE_THRESHOLD_SECONDS,
    ORPHAN_KEY_PREFIX,
    ROOT_SLUG,
    SESSION_NAME_SEPARATOR,
)
from tmux_worktree.exceptions import PathResolutionError
from tmux_worktree.models.node import Association, ClassifiedSession
from tmux_worktree.models.session import Classification, SessionFact
from tmux_worktree.models.worktree import GitStatusFact, WorktreeFact
from tmux_worktree.services.status_service import classify, evaluate_status
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-z0-9_-]")
_UNSAFE_SLUG_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_repo_name(name: str) -> str:
    """Lowercase a repository name and replace characters tmux rejects."""
    return _UNSAFE_NAME_CHARS.sub("-", name.strip().lower())


def sanitize_slug(slug: str) -> str:
    """Replace characters tmux would rewrite in a session name (e.g. "." and ":"); case is kept."""
    return _UNSAFE_SLUG_CHARS.sub("-", slug.strip())


def session_prefix(repo_name: str) -> str:
    return sanitize_repo_name(repo_name) + SESSION_NAME_SEPARATOR


def build_session_name(repo_name: str, slug: str) -> str:
    """Session name for a slug of the given repository."""
    return session_prefix(repo_name) + sanitize_slug(slug)


def select_repo_sessions(sessions: Sequence[SessionFact], repo_name: str) -> List[SessionFact]:
    """Keep only the sessions that belong to this repository."""
    base = sanitize_repo_name(repo_name)
    prefix = session_prefix(repo_name)
    return [s for s in sessions if s.name == base or s.name.startswith(prefix)]


def session_slug(session_name: str, repo_name: str) -> str:
    """Display slug of a session: its name without the repository prefix."""
    base = sanitize_repo_name(repo_name)
    if session_name == base:
        return ROOT_SLUG

    prefix = session_prefix(repo_name)
    if not session_name.startswith(prefix):
        return session_name

    return session_name[len(prefix):] or ROOT_SLUG


def normalize_path(path: Optional[str]) -> str:
    """Normalize a path for association lookups.

    Expands ``~`` and collapses separators and dot segments. Does not touch
    the filesystem, so paths of deleted worktrees normalize the same way.

    Raises:
        PathResolutionError: If the path is empty or not absolute
    """
    if not isinstance(path, str) or not path.strip():
        raise PathResolutionError(path, "empty path")

    expanded = os.path.expanduser(path.strip())
    if not os.path.isabs(expanded):
        raise PathResolutionError(path, "not an absolute path")

    return os.path.normpath(expanded)


def orphan_key(session_name: str) -> str:
    return f"{ORPHAN_KEY_PREFIX}{session_name}"


def associate(
    sessions: Sequence[SessionFact],
    worktrees: Sequence[WorktreeFact],
    repo_name: str,
    git_statuses: Optional[Mapping[str, GitStatusFact]] = None,
    now: Optional[int] = None,
    alive_threshold: int = ALIVE_THRESHOLD_SECONDS,
    recent_times: Optional[Mapping[str, int]] = None,
) -> List[Association]:
    """Pair sessions with worktrees by normalized path.

    Every session and every non-prunable worktree lands in exactly one
    association. Worktree associations come first in input order, followed
    by orphan associations in session order.

    Args:
        sessions: Sessions of one repository
        worktrees: Worktrees of the same repository
        repo_name: Repository name used to derive slugs
        git_statuses: Git status facts keyed by normalized path
        now: Current Unix time (defaults to time.time())
        alive_threshold: Seconds of inactivity before a session is idle
        recent_times: Last file change or agent use keyed by normalized path

    Returns:
        List of Association objects
    """
    if now is None:
        now = int(time.time())

    worktree_by_path: Dict[str, WorktreeFact] = {}
    for worktree in worktrees:
        if worktree.prunable:
            logger.debug(f"Skipping prunable worktree {worktree.path}")
            continue
        try:
            path = normalize_path(worktree.path)
        except PathResolutionError as e:
            # git always reports absolute paths; keep the raw string as key anyway
            logger.warning(f"Worktree path not normalizable, using it verbatim: {e}")
            path = worktree.path
        if path in worktree_by_path:
            logger.warning(f"Duplicate worktree entry for {path}, keeping the first")
            continue
        worktree_by_path[path] = worktree

    members_by_path: Dict[str, List[ClassifiedSession]] = {path: [] for path in worktree_by_path}
    orphans: Dict[str, List[ClassifiedSession]] = {}

    for session in sessions:
        slug = session_slug(session.name, repo_name)
        try:
            path = normalize_path(session.workdir)
        except PathResolutionError as e:
            logger.debug(f"Session {session.name} has no usable workdir ({e.message})")
            path = None

        if path is not None and path in members_by_path:
            status = evaluate_status(session, path, git_statuses)
            classification = classify(status, now, alive_threshold)
            logger.debug(f"Session {session.name} -> {path} [{classification.value}]")
            members_by_path[path].append(ClassifiedSession(session, status, classification, slug))
            continue

        if path is not None:
            logger.debug(f"Session {session.name} points at unknown path {path}, marking orphan")
        status = evaluate_status(session)
        orphans.setdefault(orphan_key(session.name), []).append(
            ClassifiedSession(session, status, Classification.ORPHAN, slug)
        )

    associations = []
    for path, worktree in worktree_by_path.items():
        git_status = git_statuses.get(path) if git_statuses else None
        associations.append(
            Association(
                key=path,
                path=path,
                worktree=worktree,
                members=tuple(members_by_path[path]),
                git_status=git_status,
                recent_time=(recent_times or {}).get(path, 0),
            )
        )
    for key, members in orphans.items():
        associations.append(Association(key=key, path=None, members=tuple(members)))

    logger.debug(
        f"Associated {len(sessions)} sessions with {len(worktree_by_path)} worktrees "
        f"({len(orphans)} orphan associations)"
    )
    return associations
