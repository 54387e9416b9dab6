"""Recent activity inside worktrees.

A worktree's recency is the newer of two signals: the newest file
modification found by a shallow, .gitignore-aware scan, and the last time an
OpenCode agent session ran in that directory. Both are display hints; nothing
sorts or classifies on them.
"""

import json
import os
import time
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import pathspec

from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)

# Build output, dependencies and caches; never scanned
EXCLUDED_DIRS = frozenset({
    ".git",
    "node_modules",
    "dist",
    "build",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
})

OPENCODE_SESSION_DIR = Path.home() / ".local" / "share" / "opencode" / "storage" / "session"


def load_gitignore(root: Union[str, Path]) -> Optional[pathspec.PathSpec]:
    """Patterns of the .gitignore at the root of a worktree, or None."""
    gitignore = Path(root) / ".gitignore"
    try:
        lines = gitignore.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _join(rel_dir: str, name: str) -> str:
    # gitignore patterns always use forward slashes
    if rel_dir == ".":
        return name
    return f"{rel_dir.replace(os.sep, '/')}/{name}"


def _opencode_entry(data) -> Optional[Tuple[str, int]]:
    """(directory, updated seconds) from one OpenCode session file."""
    if not isinstance(data, dict):
        return None
    directory = data.get("directory")
    times = data.get("time")
    if not isinstance(directory, str) or not directory or not isinstance(times, dict):
        return None
    updated = times.get("updated")
    if not isinstance(updated, (int, float)) or updated <= 0:
        return None
    return os.path.normpath(directory), int(updated // 1000)  # stored in milliseconds


class RecentService:
    """Finds when each worktree was last worked in."""

    def __init__(
        self,
        timeout: float = 2.0,
        max_depth: int = 1,
        opencode_dir: Optional[Union[str, Path]] = None,
    ):
        """Initialize the recency scanner.

        Args:
            timeout: Seconds one worktree scan may take; the newest time seen
                so far is used when it runs out
            max_depth: Directory levels below the worktree root that are entered
            opencode_dir: OpenCode session storage, defaults to
                ~/.local/share/opencode/storage/session
        """
        self.timeout = timeout
        self.max_depth = max_depth
        self.opencode_dir = Path(opencode_dir) if opencode_dir else OPENCODE_SESSION_DIR

    def get_mtime(self, path: str) -> int:
        """Newest modification time (Unix seconds) of the files in a worktree.

        Files at the root and in directories up to max_depth levels down are
        considered. Excluded and ignored directories are not entered, ignored
        files are skipped. Returns 0 when nothing was found.
        """
        spec = load_gitignore(path)
        deadline = time.monotonic() + self.timeout
        newest = 0.0

        for dirpath, dirnames, filenames in os.walk(path):
            rel_dir = os.path.relpath(dirpath, path)
            depth = 0 if rel_dir == "." else rel_dir.count(os.sep) + 1

            if depth >= self.max_depth:
                dirnames[:] = []
            else:
                dirnames[:] = [
                    d for d in dirnames
                    if d not in EXCLUDED_DIRS
                    and not (spec and spec.match_file(_join(rel_dir, d) + "/"))
                ]

            for name in filenames:
                rel = _join(rel_dir, name)
                if spec and spec.match_file(rel):
                    continue
                try:
                    newest = max(newest, os.stat(os.path.join(dirpath, name)).st_mtime)
                except OSError:
                    continue

            if time.monotonic() > deadline:
                logger.debug(f"Recency scan of {path} timed out after {self.timeout}s")
                break

        return int(newest)

    def load_opencode_times(self) -> Dict[str, int]:
        """Last OpenCode use per directory, from all stored session files."""
        times: Dict[str, int] = {}
        if not self.opencode_dir.is_dir():
            return times

        for session_file in self.opencode_dir.glob("*/ses_*.json"):
            try:
                data = json.loads(session_file.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.debug(f"Skipping OpenCode session {session_file}: {e}")
                continue

            entry = _opencode_entry(data)
            if entry is None:
                continue
            directory, updated = entry
            times[directory] = max(times.get(directory, 0), updated)

        logger.debug(f"Loaded OpenCode activity for {len(times)} directories")
        return times

    def get_recent_time(self, path: str, opencode_times: Optional[Dict[str, int]] = None) -> int:
        """The newer of file activity and OpenCode activity for a worktree."""
        if opencode_times is None:
            opencode_times = self.load_opencode_times()
        return max(self.get_mtime(path), opencode_times.get(os.path.normpath(path), 0))

