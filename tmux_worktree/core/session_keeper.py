"""Refresh orchestration for tmux-worktree"""

import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, List, Optional, Sequence, Tuple, Union

from tmux_worktree.config import Config
from tmux_worktree.core.reconciler import error_nodes, reconcile
from tmux_worktree.exceptions import (
    PathResolutionError,
    ReconcileError,
    SourceUnavailableError,
    TmuxCommandError,
)
from tmux_worktree.models.node import FilterCategory, GroupNode, InactiveNode, Node, SessionNode
from tmux_worktree.models.session import Classification, SessionFact
from tmux_worktree.models.worktree import GitStatusFact, WorktreeFact
from tmux_worktree.services.association_service import normalize_path
from tmux_worktree.services.git.status import GitStatusService
from tmux_worktree.services.git.worktrees import WorktreeService, get_repo_name, get_repo_root
from tmux_worktree.services.recent_service import RecentService
from tmux_worktree.services.tmux_service import TmuxService
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)

CLEANUP_KIND_SESSION = "session"
CLEANUP_KIND_WORKTREE = "worktree"


@dataclass(frozen=True)
class Snapshot:
    """Everything one refresh pass reads from the outside world."""
    sessions: List[SessionFact]
    worktrees: List[WorktreeFact]
    git_statuses: Dict[str, GitStatusFact] = field(default_factory=dict)
    recent_times: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CleanupCandidate:
    """Something cleanup may remove: an orphaned session or a stopped worktree."""
    target: str  # session name or worktree path
    kind: str
    dirty: bool = False


@dataclass(frozen=True)
class CleanupResult:
    target: str
    kind: str
    success: bool
    error: Optional[str] = None


def get_worker_count(user_specified: Optional[int] = None) -> int:
    """Worker count for the I/O bound git status fan-out."""
    if user_specified is not None and user_specified > 0:
        return user_specified
    return min(32, (os.cpu_count() or 1) + 4)


class SessionKeeper:
    """Reads tmux and git for one repository and reconciles them."""

    def __init__(
        self,
        repo_path: str,
        config: Optional[Union[Config, dict]] = None,
        tmux_service: Optional[TmuxService] = None,
        worktree_service: Optional[WorktreeService] = None,
        git_status_service: Optional[GitStatusService] = None,
        recent_service: Optional[RecentService] = None,
    ):
        """Initialize SessionKeeper.

        Args:
            repo_path: Path inside the repository (any of its worktrees)
            config: Config object or dict
            tmux_service: tmux adapter, created from config when None
            worktree_service: worktree adapter, created for the repository root when None
            git_status_service: git status adapter, created from config when None
            recent_service: recency scanner, created from config when None;
                unused when config.scan_recent is off
        """
        if config is None:
            self.config = Config()
        elif isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config

        try:
            self.repo_root = get_repo_root(repo_path)
        except SourceUnavailableError as e:
            # Listing worktrees will fail too and surface as an error node
            logger.warning(f"{e}; using {repo_path} as repository root")
            self.repo_root = os.path.abspath(os.path.expanduser(repo_path))
        self.repo_name = get_repo_name(self.repo_root)

        self.tmux_service = tmux_service or TmuxService(socket=self.config.tmux_socket)
        self.worktree_service = worktree_service or WorktreeService(self.repo_root)
        self.git_status_service = git_status_service or GitStatusService(
            timeout=self.config.git_status_timeout
        )
        if self.config.scan_recent:
            self.recent_service = recent_service or RecentService(timeout=self.config.recent_timeout)
        else:
            self.recent_service = None

    def collect(self) -> Snapshot:
        """Fetch sessions, worktrees, git status and recency for one pass.

        Sessions and worktrees are read concurrently, then every worktree's
        git status and recency are read concurrently. Nothing is returned
        until all of it has arrived.

        Raises:
            ReconcileError: If tmux or the worktree list cannot be read, for
                whatever reason
        """
        try:
            with ThreadPoolExecutor(max_workers=2) as executor:
                sessions_future = executor.submit(self.tmux_service.list_sessions)
                worktrees_future = executor.submit(self.worktree_service.list_worktrees)
                sessions = sessions_future.result()
                worktrees = worktrees_future.result()
        except SourceUnavailableError as e:
            raise ReconcileError(self.repo_name, e) from e
        except Exception as e:
            logger.error(f"Unexpected error reading sources of {self.repo_name}: {e}", exc_info=True)
            raise ReconcileError(self.repo_name, e) from e

        git_statuses, recent_times = self._collect_path_facts(worktrees)
        logger.debug(
            f"Collected {len(sessions)} sessions, {len(worktrees)} worktrees, "
            f"{len(git_statuses)} git statuses, {len(recent_times)} recency hints "
            f"for {self.repo_name}"
        )
        return Snapshot(
            sessions=sessions,
            worktrees=worktrees,
            git_statuses=git_statuses,
            recent_times=recent_times,
        )

    def _collect_path_facts(
        self, worktrees: Sequence[WorktreeFact]
    ) -> Tuple[Dict[str, GitStatusFact], Dict[str, int]]:
        """Git status and recency of every live worktree, read concurrently.

        A failure for one path only loses that path's fact.
        """
        paths = []
        for worktree in worktrees:
            if worktree.prunable:
                continue
            try:
                paths.append(normalize_path(worktree.path))
            except PathResolutionError as e:
                logger.debug(f"No git status for {worktree.path}: {e}")

        if not paths:
            return {}, {}

        opencode_times = self._load_opencode_times()

        statuses: Dict[str, GitStatusFact] = {}
        recent_times: Dict[str, int] = {}
        max_workers = min(get_worker_count(self.config.workers), len(paths))
        logger.debug(f"Using {max_workers} workers for git status and recency")

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_task = {
                executor.submit(self.git_status_service.get_status, path): ("git status", path)
                for path in paths
            }
            if self.recent_service is not None:
                future_to_task.update(
                    {
                        executor.submit(
                            self.recent_service.get_recent_time, path, opencode_times
                        ): ("recency", path)
                        for path in paths
                    }
                )

            for future in as_completed(future_to_task):
                task, path = future_to_task[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.error(f"Error reading {task} of {path}: {e}")
                    continue

                if task == "recency":
                    if result:
                        recent_times[path] = result
                elif result is not None:
                    statuses[path] = result

        return statuses, recent_times

    def _load_opencode_times(self) -> Dict[str, int]:
        if self.recent_service is None:
            return {}
        try:
            return self.recent_service.load_opencode_times()
        except Exception as e:
            logger.error(f"Error reading OpenCode sessions: {e}")
            return {}

    def refresh(
        self, filter_category: Optional[FilterCategory] = None, now: Optional[int] = None
    ) -> List[Node]:
        """Run one full pass and return the nodes to display.

        A pass whose sources cannot be read yields a single error node
        instead of a partial tree.
        """
        if filter_category is None:
            filter_category = self.config.filter
        if now is None:
            now = int(time.time())

        try:
            snapshot = self.collect()
        except ReconcileError as e:
            logger.error(str(e))
            return error_nodes(self.repo_name, str(e.cause or e))

        return reconcile(
            snapshot.sessions,
            snapshot.worktrees,
            snapshot.git_statuses,
            filter_category,
            now,
            self.repo_name,
            alive_threshold=self.config.alive_threshold,
            worktrees_dir=self.config.worktrees_dir,
            recent_times=snapshot.recent_times,
        )

    def _is_managed_worktree(self, node: InactiveNode) -> bool:
        return not node.worktree.is_main and self.config.worktrees_dir in PurePath(node.path).parts

    def find_cleanup_candidates(self, nodes: Sequence[Node]) -> List[CleanupCandidate]:
        """Orphaned sessions and stopped worktrees that cleanup may remove.

        Only secondary worktrees inside the worktrees directory qualify; the
        main checkout is never a candidate.
        """
        candidates = []
        for node in nodes:
            match node:
                case SessionNode(member=member) if member.classification is Classification.ORPHAN:
                    candidates.append(CleanupCandidate(member.name, CLEANUP_KIND_SESSION))
                case GroupNode(children=children):
                    candidates.extend(
                        CleanupCandidate(child.member.name, CLEANUP_KIND_SESSION)
                        for child in children
                        if child.classification is Classification.ORPHAN
                    )
                case InactiveNode(git_status=git_status) if self._is_managed_worktree(node):
                    dirty = git_status.dirty if git_status else False
                    candidates.append(CleanupCandidate(node.path, CLEANUP_KIND_WORKTREE, dirty))
        return candidates

    def _kill_orphan(self, candidate: CleanupCandidate) -> CleanupResult:
        try:
            self.tmux_service.kill_session(candidate.target)
        except TmuxCommandError as e:
            logger.error(str(e))
            return CleanupResult(candidate.target, candidate.kind, False, e.message or str(e))
        return CleanupResult(candidate.target, candidate.kind, True)

    def _remove_worktree(self, candidate: CleanupCandidate, force: bool) -> CleanupResult:
        success, error = self.worktree_service.remove_worktree(candidate.target, force=force)
        return CleanupResult(candidate.target, candidate.kind, success, error)

    def cleanup(
        self,
        candidates: Sequence[CleanupCandidate],
        dry_run: bool = True,
        include_worktrees: bool = False,
        force: bool = False,
    ) -> List[CleanupResult]:
        """Kill orphaned sessions and optionally remove stopped worktrees.

        Args:
            candidates: Output of find_cleanup_candidates
            dry_run: Report what would happen without changing anything
            include_worktrees: Also remove stopped worktrees
            force: Remove worktrees even when they have uncommitted changes

        Returns:
            One CleanupResult per candidate acted on; failures never raise
        """
        results = []
        for candidate in candidates:
            if candidate.kind == CLEANUP_KIND_WORKTREE:
                if not include_worktrees:
                    continue
                if candidate.dirty and not force:
                    results.append(
                        CleanupResult(
                            candidate.target, candidate.kind, False, "uncommitted changes (use --force)"
                        )
                    )
                    continue

            if dry_run:
                logger.info(f"Would remove {candidate.kind} {candidate.target}")
                results.append(CleanupResult(candidate.target, candidate.kind, True))
                continue

            if candidate.kind == CLEANUP_KIND_SESSION:
                results.append(self._kill_orphan(candidate))
            else:
                results.append(self._remove_worktree(candidate, force))

        failed = sum(1 for r in results if not r.success)
        logger.debug(f"Cleanup: {len(results) - failed} ok, {failed} failed (dry_run={dry_run})")
        return results
