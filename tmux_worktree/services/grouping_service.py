"""Turn associations into presentation nodes and collapse duplicates"""

import os
from pathlib import PurePath
from typing import Dict, Iterable, List, Sequence, Tuple

from tmux_worktree.constants import DEFAULT_WORKTREES_DIR, ROOT_SLUG
from tmux_worktree.models.node import (
    Association,
    ClassifiedSession,
    DetailNode,
    GroupNode,
    InactiveNode,
    Node,
    SessionNode,
)
from tmux_worktree.services.association_service import build_session_name
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def worktree_slug(
    path: str, repo_name: str, is_main: bool, worktrees_dir: str = DEFAULT_WORKTREES_DIR
) -> str:
    """Derive the slug of a worktree from its path.

    The main checkout (outside the worktrees directory) and any directory
    named after the repository itself map to the root slug.
    """
    slug = os.path.basename(os.path.normpath(path))

    if is_main and worktrees_dir not in PurePath(path).parts:
        return ROOT_SLUG
    if slug == repo_name:
        return ROOT_SLUG

    return slug


def _detail_nodes(key: str, members: Iterable[ClassifiedSession]) -> Tuple[DetailNode, ...]:
    ordered = sorted(members, key=lambda m: (m.classification.priority, m.name))
    return tuple(DetailNode(key=f"{key}#{m.name}", label=m.name, member=m) for m in ordered)


def build_node(
    association: Association, repo_name: str, worktrees_dir: str = DEFAULT_WORKTREES_DIR
) -> Node:
    """Build the node for one association."""
    worktree = association.worktree

    if not association.members:
        if worktree is None or association.path is None:
            raise ValueError(f"Association {association.key} has neither sessions nor a worktree")
        slug = worktree_slug(association.path, repo_name, worktree.is_main, worktrees_dir)
        return InactiveNode(
            key=association.key,
            label=slug,
            path=association.path,
            worktree=worktree,
            target_session_name=build_session_name(repo_name, slug),
            git_status=association.git_status,
            recent_time=association.recent_time,
        )

    if len(association.members) == 1:
        member = association.members[0]
        return SessionNode(
            key=association.key,
            label=member.slug,
            member=member,
            path=association.path,
            worktree=worktree,
            recent_time=association.recent_time,
        )

    if worktree is not None and association.path is not None:
        label = worktree_slug(association.path, repo_name, worktree.is_main, worktrees_dir)
    else:
        label = association.members[0].slug
    logger.debug(f"Grouping {len(association.members)} sessions under {association.key}")
    return GroupNode(
        key=association.key,
        label=label,
        children=_detail_nodes(association.key, association.members),
        path=association.path,
        worktree=worktree,
        recent_time=association.recent_time,
    )


def build_nodes(
    associations: Sequence[Association],
    repo_name: str,
    worktrees_dir: str = DEFAULT_WORKTREES_DIR,
) -> List[Node]:
    """Build one node per association, in association order."""
    return [build_node(a, repo_name, worktrees_dir) for a in associations]


def _members_of(node: Node) -> List[ClassifiedSession]:
    match node:
        case SessionNode(member=member):
            return [member]
        case GroupNode(children=children):
            return [child.member for child in children]
    return []


def _merge_active(existing: Node, incoming: Node) -> GroupNode:
    """Fold two active nodes for the same path into one group."""
    members = _members_of(existing)
    known = {m.name for m in members}
    members += [m for m in _members_of(incoming) if m.name not in known]
    return GroupNode(
        key=existing.key,
        label=existing.label,
        children=_detail_nodes(existing.key, members),
        path=existing.path,
        worktree=existing.worktree or incoming.worktree,
        recent_time=max(existing.recent_time, incoming.recent_time),
    )


def dedup_nodes(nodes: Sequence[Node]) -> List[Node]:
    """Collapse nodes that share a path.

    An active node (session or group) always beats an inactive placeholder
    for the same path. Nodes without a path pass through untouched.
    """
    result: List[Node] = []
    index_by_path: Dict[str, int] = {}

    for node in nodes:
        path = getattr(node, "path", None)
        if path is None:
            result.append(node)
            continue

        idx = index_by_path.get(path)
        if idx is None:
            index_by_path[path] = len(result)
            result.append(node)
            continue

        existing = result[idx]
        match (existing, node):
            case (InactiveNode(), InactiveNode()):
                logger.warning(f"Duplicate placeholder for {path}, keeping the first")
            case (InactiveNode(), _):
                logger.warning(f"Active node replaces placeholder for {path}")
                result[idx] = node
            case (_, InactiveNode()):
                logger.warning(f"Dropping placeholder for {path}, an active node exists")
            case _:
                logger.warning(f"Two active nodes for {path}, merging them into a group")
                result[idx] = _merge_active(existing, node)

    return result
