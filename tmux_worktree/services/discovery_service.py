"""Discovery of git repositories below configured search paths"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def _is_repo(path: str) -> bool:
    # .git is a directory in a main checkout and a file in a secondary worktree
    return os.path.lexists(os.path.join(path, ".git"))


def _scan(root: str, depth: int) -> List[str]:
    if depth < 0:
        return []

    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"Cannot read {root}: {e}")
        return []

    if _is_repo(root):
        return [root]

    results: List[str] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue

        if entry.is_symlink():
            resolved = os.path.realpath(entry.path)
            if os.path.isdir(resolved):
                results.extend(_scan(resolved, depth - 1))
            continue

        if entry.is_dir():
            results.extend(_scan(entry.path, depth - 1))

    return results


def find_git_repos(roots: Sequence[str], max_depth: int = 2) -> List[str]:
    """Find git repositories under ``roots``.

    Scanning stops at a repository root, skips hidden directories and
    follows symlinked directories. ``~`` is expanded in every root.

    Args:
        roots: Directories to search
        max_depth: How many directory levels below each root to descend

    Returns:
        Repository paths in discovery order, each listed once
    """
    if not roots:
        return []

    expanded = [os.path.expanduser(root) for root in roots]
    with ThreadPoolExecutor(max_workers=min(8, len(expanded))) as executor:
        found = list(executor.map(lambda root: _scan(root, max_depth), expanded))

    repos: List[str] = []
    seen = set()
    for paths in found:
        for path in paths:
            key = os.path.realpath(path)
            if key in seen:
                continue
            seen.add(key)
            repos.append(path)

    logger.debug(f"Discovered {len(repos)} repositories under {list(roots)}")
    return repos
