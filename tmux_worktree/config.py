"""Configuration handling for tmux-worktree"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from tmux_worktree.constants import ALIVE_THRESHOLD_SECONDS, DEFAULT_WORKTREES_DIR
from tmux_worktree.models.node import FilterCategory
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_PATH = Path.home() / ".config" / "tmux-worktree" / "config.json"


@dataclass
class Config:
    """Configuration for tmux-worktree with validation."""

    # Classification
    alive_threshold: int = ALIVE_THRESHOLD_SECONDS
    filter_category: str = "all"

    # Repository layout
    worktrees_dir: str = DEFAULT_WORKTREES_DIR

    # Multi-repository discovery
    search_paths: List[str] = field(default_factory=list)
    depth: int = 2

    # Sources
    tmux_socket: Optional[str] = None  # tmux -L <socket>
    git_status_timeout: float = 2.0
    workers: Optional[int] = None  # None = auto-detect

    # Recency hint per worktree (file changes, OpenCode sessions)
    scan_recent: bool = True
    recent_timeout: float = 2.0

    # Output
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_alive_threshold()
        self._validate_filter_category()
        self._validate_worktrees_dir()
        self._validate_search_paths()
        self._validate_depth()
        self._validate_git_status_timeout()
        self._validate_workers()
        self._validate_recent_timeout()

    def _validate_alive_threshold(self):
        if self.alive_threshold <= 0:
            raise ValueError(f"alive_threshold must be positive, got {self.alive_threshold}")

    def _validate_filter_category(self):
        allowed = FilterCategory.choices()
        if self.filter_category not in allowed:
            raise ValueError(
                f"filter_category must be one of {allowed}, got '{self.filter_category}'"
            )

    def _validate_worktrees_dir(self):
        if not self.worktrees_dir or not self.worktrees_dir.strip():
            raise ValueError("worktrees_dir cannot be empty")
        self.worktrees_dir = self.worktrees_dir.strip()

    def _validate_search_paths(self):
        if not isinstance(self.search_paths, list):
            raise ValueError("search_paths must be a list")

    def _validate_depth(self):
        if self.depth < 0:
            raise ValueError(f"depth must not be negative, got {self.depth}")

    def _validate_git_status_timeout(self):
        if self.git_status_timeout <= 0:
            raise ValueError(
                f"git_status_timeout must be positive, got {self.git_status_timeout}"
            )

    def _validate_workers(self):
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def _validate_recent_timeout(self):
        if self.recent_timeout <= 0:
            raise ValueError(f"recent_timeout must be positive, got {self.recent_timeout}")

    @property
    def filter(self) -> FilterCategory:
        return FilterCategory(self.filter_category)

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "alive_threshold": self.alive_threshold,
            "filter_category": self.filter_category,
            "worktrees_dir": self.worktrees_dir,
            "search_paths": self.search_paths,
            "depth": self.depth,
            "tmux_socket": self.tmux_socket,
            "git_status_timeout": self.git_status_timeout,
            "workers": self.workers,
            "scan_recent": self.scan_recent,
            "recent_timeout": self.recent_timeout,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {
            "alive_threshold",
            "filter_category",
            "worktrees_dir",
            "search_paths",
            "depth",
            "tmux_socket",
            "git_status_timeout",
            "workers",
            "scan_recent",
            "recent_timeout",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


def load_config_file(path: Optional[Union[str, Path]] = None) -> dict:
    """Read the JSON config file.

    Args:
        path: Config file location, defaults to ~/.config/tmux-worktree/config.json

    Returns:
        Raw settings dict; empty when the file does not exist

    Raises:
        ValueError: If the file is not a JSON object
    """
    config_path = Path(path) if path else CONFIG_PATH
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return {}

    try:
        data = json.loads(config_path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config {config_path} must contain a JSON object")

    logger.debug(f"Loaded config from {config_path}: {sorted(data)}")
    return data


def build_config(file_settings: dict, **overrides) -> Config:
    """Merge file settings with explicit overrides (None values are ignored)."""
    merged = dict(file_settings)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return Config.from_dict(merged)
