"""tmux session listing and control"""

import subprocess
from typing import Dict, List, Optional

from tmux_worktree.exceptions import SourceUnavailableError, TmuxCommandError
from tmux_worktree.models.session import SessionFact
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = "\t"

SESSION_FORMAT = FIELD_SEPARATOR.join(
    [
        "#{session_name}",
        "#{session_attached}",
        "#{session_activity}",
        "#{session_path}",
        "#{@workdir}",
    ]
)

# stderr fragments meaning "tmux works, there are just no sessions"
NO_SERVER_MARKERS = ("no server running", "no sessions")

# "error connecting to <socket> (<reason>)" only means no server for these reasons
MISSING_SOCKET_REASONS = ("no such file or directory", "connection refused")


def _is_no_server(stderr: str) -> bool:
    lowered = stderr.lower()
    if any(marker in lowered for marker in NO_SERVER_MARKERS):
        return True
    return "error connecting to" in lowered and any(
        reason in lowered for reason in MISSING_SOCKET_REASONS
    )


def _parse_int(value: str, default: int = 0) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def parse_session_line(line: str, pane_counts: Optional[Dict[str, int]] = None) -> Optional[SessionFact]:
    """Parse one ``list-sessions`` line produced with SESSION_FORMAT."""
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) < 4 or not parts[0]:
        return None

    name = parts[0]
    session_path = parts[3].strip()
    tagged_workdir = parts[4].strip() if len(parts) > 4 else ""

    return SessionFact(
        name=name,
        attached=parts[1].strip() not in ("", "0"),
        last_activity=_parse_int(parts[2]),
        pane_count=(pane_counts or {}).get(name, 1),
        workdir=tagged_workdir or session_path or None,
    )


class TmuxService:
    """Reads sessions from a tmux server and performs the few writes the tool needs."""

    def __init__(self, socket: Optional[str] = None, timeout: float = 5.0):
        """Initialize the tmux service.

        Args:
            socket: Socket name passed as ``tmux -L <socket>``; default server when None
            timeout: Seconds before a tmux invocation is abandoned
        """
        self.socket = socket
        self.timeout = timeout

    def _command(self, *args: str) -> List[str]:
        cmd = ["tmux"]
        if self.socket:
            cmd += ["-L", self.socket]
        cmd.extend(args)
        return cmd

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        cmd = self._command(*args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",  # session paths are raw bytes, not always UTF-8
            timeout=self.timeout,
            check=False,
        )

    def _query(self, *args: str) -> Optional[str]:
        """Run a read-only tmux command.

        Returns:
            stdout, or None when no tmux server is running

        Raises:
            SourceUnavailableError: If tmux is missing or the command fails
        """
        try:
            result = self._run(*args)
        except FileNotFoundError as e:
            raise SourceUnavailableError("tmux", "tmux executable not found") from e
        except subprocess.TimeoutExpired as e:
            raise SourceUnavailableError("tmux", f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise SourceUnavailableError("tmux", str(e)) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if _is_no_server(stderr):
                logger.debug(f"No tmux server: {stderr}")
                return None
            raise SourceUnavailableError(
                "tmux", stderr or f"{args[0]} exited with code {result.returncode}"
            )

        return result.stdout

    def _pane_counts(self) -> Dict[str, int]:
        output = self._query("list-panes", "-a", "-F", "#{session_name}")
        counts: Dict[str, int] = {}
        for line in (output or "").splitlines():
            name = line.strip()
            if name:
                counts[name] = counts.get(name, 0) + 1
        return counts

    def list_sessions(self) -> List[SessionFact]:
        """List all sessions on the server.

        Returns:
            SessionFact per session; empty when no server is running

        Raises:
            SourceUnavailableError: If tmux is missing or cannot be queried
        """
        output = self._query("list-sessions", "-F", SESSION_FORMAT)
        if output is None:
            return []

        pane_counts = self._pane_counts()
        sessions = []
        for line in output.splitlines():
            session = parse_session_line(line, pane_counts)
            if session is None:
                if line.strip():
                    logger.warning(f"Unparseable tmux session line: {line!r}")
                continue
            sessions.append(session)

        logger.debug(f"tmux reported {len(sessions)} sessions")
        return sessions

    def kill_session(self, name: str) -> None:
        """Kill a session.

        Raises:
            TmuxCommandError: If tmux refuses or cannot be run
        """
        try:
            result = self._run("kill-session", "-t", f"={name}")
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TmuxCommandError("kill-session", name, str(e)) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise TmuxCommandError(
                "kill-session", name, stderr or f"exit code {result.returncode}"
            )
        logger.info(f"Killed tmux session {name}")
