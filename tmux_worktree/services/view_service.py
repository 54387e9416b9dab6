"""Ordering and category filtering of presentation nodes"""

from dataclasses import replace
from typing import List, Sequence, Tuple

from tmux_worktree.models.node import (
    DetailNode,
    ErrorNode,
    FilterCategory,
    GroupNode,
    InactiveNode,
    Node,
    SessionNode,
)
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def node_priority(node: Node) -> int:
    """Rank of a node; errors sort first, groups take their best child's rank."""
    match node:
        case ErrorNode():
            return 0
        case _:
            return node.classification.priority


def sort_key(node: Node) -> Tuple[int, str, str]:
    # Independent of last_activity
    return (node_priority(node), node.label, node.key)


def sort_nodes(nodes: Sequence[Node]) -> List[Node]:
    """Order nodes by classification priority, then label."""
    return sorted(nodes, key=sort_key)


def matches_filter(node: Node, category: FilterCategory) -> bool:
    """Whether a node passes the category filter."""
    if category is FilterCategory.ALL:
        return True

    match node:
        case ErrorNode():
            return True
        case InactiveNode():
            return category is FilterCategory.STOPPED
        case GroupNode(children=children):
            if category is FilterCategory.STOPPED:
                return False
            return any(matches_filter(child, category) for child in children)
        case SessionNode() | DetailNode():
            return node.classification is category.classification
    return False


def filter_nodes(nodes: Sequence[Node], category: FilterCategory) -> List[Node]:
    """Keep the nodes matching ``category``, preserving order."""
    if category is FilterCategory.ALL:
        return list(nodes)

    kept = []
    for node in nodes:
        if not matches_filter(node, category):
            continue
        if isinstance(node, GroupNode):
            # only the matching sessions stay visible under the group
            node = replace(
                node, children=tuple(c for c in node.children if matches_filter(c, category))
            )
        kept.append(node)
    logger.debug(f"Filter '{category.value}' kept {len(kept)} of {len(nodes)} nodes")
    return kept
