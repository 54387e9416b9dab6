"""Tests for node building and duplicate collapsing"""

import pytest

from tmux_worktree.models.node import (
    Association,
    ClassifiedSession,
    GroupNode,
    InactiveNode,
    SessionNode,
)
from tmux_worktree.models.session import Classification, SessionStatus
from tmux_worktree.services.grouping_service import (
    build_node,
    build_nodes,
    dedup_nodes,
    worktree_slug,
)


def _member(session, classification, slug="x"):
    status = SessionStatus(
        attached=session.attached,
        pane_count=session.pane_count,
        last_activity=session.last_activity,
    )
    return ClassifiedSession(session, status, classification, slug)


class TestWorktreeSlug:
    """Test slug derivation from worktree paths."""

    def test_secondary_worktree(self):
        """A secondary worktree's slug is its directory name."""
        assert worktree_slug("/r/proj/.worktrees/featureA", "proj", False) == "featureA"

    def test_main_checkout_is_root(self):
        """The main checkout maps to the root slug."""
        assert worktree_slug("/r/some-checkout", "proj", True) == "main"

    def test_directory_named_after_repo_is_root(self):
        """A directory named after the repository maps to the root slug."""
        assert worktree_slug("/elsewhere/proj", "proj", False) == "main"

    def test_main_flag_inside_worktrees_dir(self):
        """A main-flagged path inside the worktrees directory keeps its name."""
        assert worktree_slug("/r/proj/.worktrees/featureA", "proj", True) == "featureA"


class TestBuildNode:
    """Test one node per association."""

    def test_inactive_placeholder(self, make_worktree):
        """A worktree without sessions becomes a placeholder with a target session name."""
        worktree = make_worktree("/r/proj/.worktrees/featureB")
        association = Association(key=worktree.path, path=worktree.path, worktree=worktree)

        node = build_node(association, "proj")

        assert isinstance(node, InactiveNode)
        assert node.label == "featureB"
        assert node.target_session_name == "proj_featureB"
        assert node.classification is Classification.STOPPED

    def test_placeholder_target_name_is_tmux_safe(self, make_worktree):
        """A dotted worktree directory still yields a name tmux keeps as is."""
        worktree = make_worktree("/r/proj/.worktrees/release.2.1")
        association = Association(key=worktree.path, path=worktree.path, worktree=worktree)

        node = build_node(association, "proj")

        assert node.label == "release.2.1"
        assert node.target_session_name == "proj_release-2-1"

    def test_single_session(self, make_session, make_worktree):
        """One session yields a session node labelled by its slug."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        member = _member(make_session("proj_featureA"), Classification.ALIVE, "featureA")
        association = Association(
            key=worktree.path, path=worktree.path, worktree=worktree, members=(member,)
        )

        node = build_node(association, "proj")

        assert isinstance(node, SessionNode)
        assert node.label == "featureA"
        assert node.classification is Classification.ALIVE

    def test_several_sessions_form_group(self, make_session, make_worktree):
        """Several sessions on one path become a group with ordered details."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        idle = _member(make_session("proj_a2"), Classification.IDLE)
        attached = _member(make_session("proj_a1", attached=True), Classification.ATTACHED)
        association = Association(
            key=worktree.path, path=worktree.path, worktree=worktree, members=(idle, attached)
        )

        node = build_node(association, "proj")

        assert isinstance(node, GroupNode)
        assert node.label == "featureA"
        assert node.classification is Classification.ATTACHED
        assert [child.label for child in node.children] == ["proj_a1", "proj_a2"]
        assert node.children[0].key == "/r/proj/.worktrees/featureA#proj_a1"

    def test_empty_orphan_association_is_invalid(self):
        """An association with neither sessions nor worktree cannot become a node."""
        with pytest.raises(ValueError):
            build_node(Association(key="orphan:x", path=None), "proj")


class TestDedup:
    """Test collapsing nodes that share a path."""

    def _placeholder(self, worktree):
        return InactiveNode(
            key=worktree.path,
            label="featureA",
            path=worktree.path,
            worktree=worktree,
            target_session_name="proj_featureA",
        )

    def _session_node(self, session, worktree, classification=Classification.ATTACHED):
        return SessionNode(
            key=worktree.path,
            label="featureA",
            member=_member(session, classification, "featureA"),
            path=worktree.path,
            worktree=worktree,
        )

    def test_active_replaces_placeholder(self, make_session, make_worktree):
        """An attached session beats an inactive placeholder for the same path."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        active = self._session_node(make_session("proj_featureA", attached=True), worktree)

        result = dedup_nodes([self._placeholder(worktree), active])

        assert result == [active]

    def test_placeholder_after_active_is_dropped(self, make_session, make_worktree):
        """Order does not matter: the active node survives."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        active = self._session_node(make_session("proj_featureA", attached=True), worktree)

        result = dedup_nodes([active, self._placeholder(worktree)])

        assert result == [active]

    def test_two_placeholders_keep_first(self, make_worktree):
        """Duplicate placeholders collapse to the first one."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        first = self._placeholder(worktree)

        result = dedup_nodes([first, self._placeholder(worktree)])

        assert result == [first]

    def test_two_active_nodes_merge(self, make_session, make_worktree):
        """Two active nodes for one path merge into a group without losing a session."""
        worktree = make_worktree("/r/proj/.worktrees/featureA")
        a = self._session_node(make_session("proj_a", attached=True), worktree)
        b = self._session_node(make_session("proj_b"), worktree, Classification.IDLE)

        result = dedup_nodes([a, b])

        assert len(result) == 1
        assert isinstance(result[0], GroupNode)
        assert [child.label for child in result[0].children] == ["proj_a", "proj_b"]

    def test_pathless_nodes_pass_through(self, make_session):
        """Orphan nodes without a path are never collapsed."""
        nodes = [
            SessionNode(
                key=f"orphan:{name}",
                label=name,
                member=_member(make_session(name), Classification.ORPHAN, name),
            )
            for name in ("proj_x", "proj_y")
        ]

        assert dedup_nodes(nodes) == nodes

    def test_build_nodes_keeps_association_order(self, make_worktree):
        """build_nodes returns one node per association, in order."""
        worktrees = [make_worktree("/r/proj/.worktrees/b"), make_worktree("/r/proj/.worktrees/a")]
        associations = [Association(key=w.path, path=w.path, worktree=w) for w in worktrees]

        nodes = build_nodes(associations, "proj")

        assert [n.label for n in nodes] == ["b", "a"]
