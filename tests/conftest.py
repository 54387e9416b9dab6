"""Pytest fixtures for tmux-worktree tests"""
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from tmux_worktree.config import Config
from tmux_worktree.models.session import SessionFact
from tmux_worktree.models.worktree import GitStatusFact, WorktreeFact
from tmux_worktree.services.git.status import GitStatusService
from tmux_worktree.services.git.worktrees import WorktreeService
from tmux_worktree.services.recent_service import RecentService
from tmux_worktree.services.tmux_service import TmuxService

NOW = 1_700_000_000


@pytest.fixture
def now():
    """A fixed point in time (Unix seconds)."""
    return NOW


@pytest.fixture
def make_session(now):
    """Factory for SessionFact objects; sessions are recently active by default."""
    def _make(name, workdir=None, attached=False, last_activity=None, pane_count=1):
        return SessionFact(
            name=name,
            attached=attached,
            last_activity=now - 30 if last_activity is None else last_activity,
            pane_count=pane_count,
            workdir=workdir,
        )
    return _make


@pytest.fixture
def make_worktree():
    """Factory for WorktreeFact objects."""
    def _make(path, branch="", is_main=False, prunable=False):
        return WorktreeFact(path=path, branch=branch, is_main=is_main, prunable=prunable)
    return _make


@pytest.fixture
def proj_worktrees(make_worktree):
    """A repository "proj" with its main checkout and two secondary worktrees."""
    return [
        make_worktree("/r/proj", branch="main", is_main=True),
        make_worktree("/r/proj/.worktrees/featureA", branch="task/featureA"),
        make_worktree("/r/proj/.worktrees/featureB", branch="task/featureB"),
    ]


@pytest.fixture
def config():
    """Default configuration."""
    return Config()


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'alive_threshold': 600,
        'filter_category': 'all',
        'worktrees_dir': '.worktrees',
        'workers': 2,
        'verbose': False,
        'debug': False,
    }


@pytest.fixture
def mock_tmux_service():
    """TmuxService mock with no sessions."""
    service = Mock(spec=TmuxService)
    service.list_sessions = Mock(return_value=[])
    service.kill_session = Mock(return_value=None)
    return service


@pytest.fixture
def mock_worktree_service():
    """WorktreeService mock with no worktrees."""
    service = Mock(spec=WorktreeService)
    service.list_worktrees = Mock(return_value=[])
    service.remove_worktree = Mock(return_value=(True, None))
    return service


@pytest.fixture
def mock_git_status_service():
    """GitStatusService mock reporting clean worktrees."""
    service = Mock(spec=GitStatusService)
    service.get_status = Mock(return_value=GitStatusFact())
    return service


@pytest.fixture
def mock_recent_service():
    """RecentService mock with no recorded activity."""
    service = Mock(spec=RecentService)
    service.load_opencode_times = Mock(return_value={})
    service.get_recent_time = Mock(return_value=0)
    return service


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository named "proj" for testing."""
    repo_path = temp_dir / "proj"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch('-M', 'main')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def git_repo_with_worktree(git_repo):
    """A repository with one secondary worktree under .worktrees/featureA."""
    repo_path = Path(git_repo.working_dir)
    worktree_path = repo_path / ".worktrees" / "featureA"
    git_repo.git.worktree("add", "-b", "task/featureA", str(worktree_path))

    yield git_repo, worktree_path
