"""Tests for node ordering and category filtering"""

import pytest

from tmux_worktree.models.node import (
    ClassifiedSession,
    DetailNode,
    ErrorNode,
    FilterCategory,
    GroupNode,
    InactiveNode,
    SessionNode,
)
from tmux_worktree.models.session import Classification, SessionStatus
from tmux_worktree.services.view_service import filter_nodes, matches_filter, sort_nodes


@pytest.fixture
def session_node(make_session):
    def _make(name, classification, label=None, path=None):
        session = make_session(name)
        status = SessionStatus(attached=False, pane_count=1, last_activity=session.last_activity)
        member = ClassifiedSession(session, status, classification, label or name)
        return SessionNode(key=path or f"orphan:{name}", label=label or name, member=member, path=path)
    return _make


@pytest.fixture
def placeholder(make_worktree):
    def _make(label):
        worktree = make_worktree(f"/r/proj/.worktrees/{label}")
        return InactiveNode(
            key=worktree.path,
            label=label,
            path=worktree.path,
            worktree=worktree,
            target_session_name=f"proj_{label}",
        )
    return _make


def _group(*session_nodes):
    children = tuple(
        DetailNode(key=f"g#{n.member.name}", label=n.member.name, member=n.member)
        for n in session_nodes
    )
    return GroupNode(key="/r/proj/.worktrees/g", label="g", children=children, path="/r/proj/.worktrees/g")


class TestSort:
    """Test ordering by classification priority."""

    def test_priority_order(self, session_node, placeholder):
        """attached < alive < idle < stopped < orphan."""
        nodes = [
            session_node("proj_o", Classification.ORPHAN),
            placeholder("s"),
            session_node("proj_i", Classification.IDLE, path="/i"),
            session_node("proj_a", Classification.ATTACHED, path="/a"),
            session_node("proj_l", Classification.ALIVE, path="/l"),
        ]

        ordered = sort_nodes(nodes)

        assert [n.classification for n in ordered] == [
            Classification.ATTACHED,
            Classification.ALIVE,
            Classification.IDLE,
            Classification.STOPPED,
            Classification.ORPHAN,
        ]

    def test_label_breaks_ties(self, placeholder):
        """Nodes with the same classification sort by label."""
        ordered = sort_nodes([placeholder("zeta"), placeholder("alpha"), placeholder("mid")])

        assert [n.label for n in ordered] == ["alpha", "mid", "zeta"]

    def test_group_ranks_as_best_child(self, session_node):
        """A group sorts with its most active child."""
        group = _group(
            session_node("proj_g1", Classification.IDLE),
            session_node("proj_g2", Classification.ATTACHED),
        )
        alive = session_node("proj_alive", Classification.ALIVE, path="/alive")

        assert sort_nodes([alive, group]) == [group, alive]

    def test_error_sorts_first(self, session_node):
        """Error nodes come before everything else."""
        error = ErrorNode(key="error:proj", label="proj", message="boom")
        attached = session_node("proj_a", Classification.ATTACHED, path="/a")

        assert sort_nodes([attached, error]) == [error, attached]

    def test_sorting_is_stable(self, placeholder, session_node):
        """Sorting the same input twice gives the same order."""
        nodes = [placeholder("b"), session_node("proj_x", Classification.ORPHAN), placeholder("a")]

        assert sort_nodes(nodes) == sort_nodes(list(reversed(nodes)))


class TestFilter:
    """Test filter soundness."""

    def test_all_keeps_everything(self, session_node, placeholder):
        """The 'all' filter is the identity."""
        nodes = [placeholder("a"), session_node("proj_o", Classification.ORPHAN)]

        assert filter_nodes(nodes, FilterCategory.ALL) == nodes

    @pytest.mark.parametrize(
        "category,classification",
        [
            (FilterCategory.ATTACHED, Classification.ATTACHED),
            (FilterCategory.ALIVE, Classification.ALIVE),
            (FilterCategory.IDLE, Classification.IDLE),
            (FilterCategory.ORPHANS, Classification.ORPHAN),
        ],
    )
    def test_session_filters(self, session_node, placeholder, category, classification):
        """Session filters keep exactly the leaves of that classification."""
        nodes = [
            session_node("proj_a", Classification.ATTACHED, path="/a"),
            session_node("proj_l", Classification.ALIVE, path="/l"),
            session_node("proj_i", Classification.IDLE, path="/i"),
            session_node("proj_o", Classification.ORPHAN),
            placeholder("s"),
        ]

        kept = filter_nodes(nodes, category)

        assert len(kept) == 1
        assert kept[0].classification is classification

    def test_stopped_keeps_placeholders_only(self, session_node, placeholder):
        """The stopped filter keeps inactive placeholders and nothing else."""
        group = _group(session_node("proj_g", Classification.IDLE))
        nodes = [placeholder("s"), session_node("proj_i", Classification.IDLE, path="/i"), group]

        kept = filter_nodes(nodes, FilterCategory.STOPPED)

        assert [type(n) for n in kept] == [InactiveNode]

    def test_group_matches_on_any_child(self, session_node):
        """A group passes a filter when one of its sessions does."""
        group = _group(
            session_node("proj_g1", Classification.IDLE),
            session_node("proj_g2", Classification.ALIVE),
        )

        assert matches_filter(group, FilterCategory.ALIVE)
        assert matches_filter(group, FilterCategory.IDLE)
        assert not matches_filter(group, FilterCategory.ATTACHED)

    def test_error_passes_every_filter(self):
        """Errors are never hidden by a filter."""
        error = ErrorNode(key="error:proj", label="proj", message="boom")

        assert all(matches_filter(error, category) for category in FilterCategory)

    def test_filtered_is_subset_of_all(self, session_node, placeholder):
        """Every filtered result is contained in the unfiltered one, in the same order."""
        nodes = sort_nodes([
            session_node("proj_a", Classification.ATTACHED, path="/a"),
            session_node("proj_o", Classification.ORPHAN),
            placeholder("s"),
        ])

        for category in FilterCategory:
            kept = filter_nodes(nodes, category)
            assert [n for n in nodes if n in kept] == kept
