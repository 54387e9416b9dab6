"""Tests for the git worktree and status adapters"""

from pathlib import Path
from unittest.mock import Mock, patch

import git
import pytest

from tmux_worktree.exceptions import SourceUnavailableError
from tmux_worktree.services.git.status import GitStatusService, parse_status_porcelain
from tmux_worktree.services.git.worktrees import (
    WorktreeService,
    get_repo_name,
    get_repo_root,
    parse_worktree_porcelain,
)

PORCELAIN = """worktree /r/proj
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /r/proj/.worktrees/featureA
HEAD 2222222222222222222222222222222222222222
branch refs/heads/task/featureA

worktree /r/proj/.worktrees/detached
HEAD 3333333333333333333333333333333333333333
detached

worktree /r/proj/.worktrees/gone
HEAD 4444444444444444444444444444444444444444
branch refs/heads/task/gone
prunable gitdir file points to non-existent location
"""


class TestWorktreePorcelain:
    """Test parsing of git worktree list --porcelain."""

    def test_parses_all_entries(self):
        """Every block becomes one fact; the first is the main worktree."""
        worktrees = parse_worktree_porcelain(PORCELAIN)

        assert [w.path for w in worktrees] == [
            "/r/proj",
            "/r/proj/.worktrees/featureA",
            "/r/proj/.worktrees/detached",
            "/r/proj/.worktrees/gone",
        ]
        assert [w.is_main for w in worktrees] == [True, False, False, False]

    def test_branch_names(self):
        """Branch refs are shortened; detached worktrees have no branch."""
        worktrees = parse_worktree_porcelain(PORCELAIN)

        assert worktrees[1].branch == "task/featureA"
        assert worktrees[2].branch == ""
        assert worktrees[0].head.startswith("1111")

    def test_prunable(self):
        """Prunable entries are flagged."""
        worktrees = parse_worktree_porcelain(PORCELAIN)

        assert [w.prunable for w in worktrees] == [False, False, False, True]

    def test_empty_output(self):
        """No output means no worktrees."""
        assert parse_worktree_porcelain("") == []


class TestWorktreeService:
    """Test WorktreeService against mocked and real repositories."""

    def test_command_failure_is_unavailable(self):
        """A failing git command makes the source unavailable."""
        service = WorktreeService("/fake/repo")
        mock_repo = Mock()
        mock_repo.git.worktree.side_effect = git.exc.GitCommandError(
            "worktree", status=128, stderr="fatal: not a git repository"
        )

        with patch.object(service, "_get_repo", return_value=mock_repo):
            with pytest.raises(SourceUnavailableError, match="not a git repository"):
                service.list_worktrees()

    def test_not_a_repository(self, temp_dir):
        """A plain directory makes the source unavailable."""
        with pytest.raises(SourceUnavailableError):
            WorktreeService(str(temp_dir)).list_worktrees()

    def test_lists_real_worktrees(self, git_repo_with_worktree):
        """The main checkout and the added worktree are listed."""
        repo, worktree_path = git_repo_with_worktree

        worktrees = WorktreeService(repo.working_dir).list_worktrees()

        assert len(worktrees) == 2
        assert worktrees[0].is_main
        assert Path(worktrees[0].path) == Path(repo.working_dir)
        assert Path(worktrees[1].path) == worktree_path
        assert worktrees[1].branch == "task/featureA"

    def test_remove_worktree(self, git_repo_with_worktree):
        """Removing a clean worktree succeeds."""
        repo, worktree_path = git_repo_with_worktree

        success, error = WorktreeService(repo.working_dir).remove_worktree(str(worktree_path))

        assert success is True
        assert error is None
        assert not worktree_path.exists()

    def test_remove_dirty_worktree_needs_force(self, git_repo_with_worktree):
        """A worktree with changes is only removed with force."""
        repo, worktree_path = git_repo_with_worktree
        (worktree_path / "README.md").write_text("changed\n")
        service = WorktreeService(repo.working_dir)

        success, error = service.remove_worktree(str(worktree_path))
        assert success is False
        assert "git worktree remove failed" in error

        success, error = service.remove_worktree(str(worktree_path), force=True)
        assert success is True

    def test_repo_root_from_worktree(self, git_repo_with_worktree):
        """The repository root is found from inside a secondary worktree."""
        repo, worktree_path = git_repo_with_worktree

        root = get_repo_root(str(worktree_path))

        assert Path(root) == Path(repo.working_dir)
        assert get_repo_name(root) == "proj"

    def test_repo_root_outside_repository(self, temp_dir):
        """Outside any repository the source is unavailable."""
        with pytest.raises(SourceUnavailableError):
            get_repo_root(str(temp_dir))


class TestStatusPorcelain:
    """Test counting of git status --porcelain lines."""

    def test_counts(self):
        """Each XY code lands in one bucket."""
        output = "\n".join([
            " M modified.txt",
            "M  staged.txt",
            "A  added.txt",
            "AM added-then-modified.txt",
            " D deleted.txt",
            "R  old.txt -> new.txt",
            "UU conflict.txt",
            "?? new-file.txt",
            "?? other.txt",
        ])

        status = parse_status_porcelain(output)

        assert status.modified == 4
        assert status.added == 2
        assert status.deleted == 1
        assert status.untracked == 2
        assert status.dirty

    def test_clean(self):
        """Empty output is a clean tree."""
        status = parse_status_porcelain("")

        assert (status.modified, status.added, status.deleted, status.untracked) == (0, 0, 0, 0)
        assert not status.dirty


class TestGitStatusService:
    """Test GitStatusService against real repositories."""

    def test_real_changes(self, git_repo):
        """Changes in a worktree are counted."""
        repo_path = Path(git_repo.working_dir)
        (repo_path / "README.md").write_text("changed\n")
        (repo_path / "untracked.txt").write_text("new\n")

        status = GitStatusService().get_status(str(repo_path))

        assert status.modified == 1
        assert status.untracked == 1

    def test_missing_path(self, temp_dir):
        """A path that does not exist yields None."""
        assert GitStatusService().get_status(str(temp_dir / "gone")) is None

    def test_not_a_repository(self, temp_dir):
        """A directory outside git yields None."""
        assert GitStatusService().get_status(str(temp_dir)) is None
