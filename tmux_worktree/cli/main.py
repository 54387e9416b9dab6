"""Command-line interface for tmux-worktree"""

import os
import sys
import time
from typing import List, Sequence

from rich.console import Console

from tmux_worktree.cli.args import parse_args
from tmux_worktree.config import Config, build_config, load_config_file
from tmux_worktree.core.session_keeper import CLEANUP_KIND_WORKTREE, CleanupCandidate, SessionKeeper
from tmux_worktree.models.node import ErrorNode, FilterCategory
from tmux_worktree.services.discovery_service import find_git_repos
from tmux_worktree.services.display_service import DisplayService
from tmux_worktree.services.tmux_service import TmuxService
from tmux_worktree.logging_config import setup_logging

console = Console()


def _repo_paths(parsed_args, config: Config) -> List[str]:
    if not parsed_args.all_repos:
        return [parsed_args.repo or os.getcwd()]
    if not config.search_paths:
        raise ValueError("--all-repos needs 'search_paths' in the config file")
    return find_git_repos(config.search_paths, config.depth)


def _confirm_cleanup(candidates: Sequence[CleanupCandidate]) -> bool:
    """Show what cleanup will remove and ask for confirmation."""
    console.print("\nThe following will be removed:")
    for candidate in candidates:
        note = ", uncommitted changes" if candidate.dirty else ""
        console.print(f"  • {candidate.kind} {candidate.target}{note}")

    response = console.input("\nProceed with cleanup? [y/N] ")
    return response.lower() == "y"


def _run_cleanup(keepers, parsed_args, display: DisplayService, now: int) -> bool:
    """Clean up every repository; returns False when anything failed."""
    ok = True
    for keeper in keepers:
        nodes = keeper.refresh(FilterCategory.ALL, now)
        if any(isinstance(node, ErrorNode) for node in nodes):
            display.display_tree(keeper.repo_name, nodes, now)
            ok = False
            continue

        candidates = [
            c
            for c in keeper.find_cleanup_candidates(nodes)
            if c.kind != CLEANUP_KIND_WORKTREE or parsed_args.include_worktrees
        ]
        console.print(f"\n[bold]{keeper.repo_name}[/bold]")
        if not candidates:
            display.display_cleanup_results([], parsed_args.dry_run)
            continue

        if not parsed_args.dry_run and not parsed_args.force:
            if not _confirm_cleanup(candidates):
                console.print("[yellow]Cleanup cancelled[/yellow]")
                ok = False
                continue

        results = keeper.cleanup(
            candidates,
            dry_run=parsed_args.dry_run,
            include_worktrees=parsed_args.include_worktrees,
            force=parsed_args.force,
        )
        display.display_cleanup_results(results, parsed_args.dry_run)
        ok = ok and all(result.success for result in results)
    return ok


def main(argv=None):
    """Main entry point for the application."""
    parsed_args = None
    try:
        # Parse command line arguments
        parsed_args = parse_args(argv)

        # Default to interactive if running in a TTY, unless output is meant for scripts
        use_interactive = parsed_args.interactive or (
            sys.stdin.isatty()
            and sys.stdout.isatty()
            and not parsed_args.no_interactive
            and not parsed_args.json
            and not parsed_args.cleanup
        )

        # Setup logging before anything else logs
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, tui_mode=use_interactive)

        # File settings first, explicit flags override them
        config = build_config(
            load_config_file(parsed_args.config),
            filter_category=parsed_args.filter,
            alive_threshold=parsed_args.alive_threshold,
            workers=parsed_args.workers,
            scan_recent=False if parsed_args.no_recent else None,
            verbose=parsed_args.verbose or None,
            debug=parsed_args.debug or None,
        )

        if parsed_args.debug and not use_interactive:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        repo_paths = _repo_paths(parsed_args, config)
        if not repo_paths:
            console.print("[yellow]No git repositories found under the search paths[/yellow]")
            return 1

        tmux_service = TmuxService(socket=config.tmux_socket)
        keepers = [SessionKeeper(path, config, tmux_service=tmux_service) for path in repo_paths]

        if use_interactive:
            # TUI loads data in background with a loading indicator
            from tmux_worktree.tui import TmuxWorktreeApp

            app = TmuxWorktreeApp(keepers, filter_category=config.filter)
            app.run()
            return 0

        display = DisplayService(verbose=config.verbose, debug=config.debug, console=console)
        now = int(time.time())

        if parsed_args.cleanup:
            return 0 if _run_cleanup(keepers, parsed_args, display, now) else 1

        results = [(keeper, keeper.refresh(config.filter, now)) for keeper in keepers]

        if parsed_args.json:
            if parsed_args.all_repos:
                payload = [
                    {
                        "repo": keeper.repo_name,
                        "path": keeper.repo_root,
                        "nodes": [node.to_dict() for node in nodes],
                    }
                    for keeper, nodes in results
                ]
            else:
                payload = [node.to_dict() for node in results[0][1]]
            console.print_json(data=payload)
        else:
            for keeper, nodes in results:
                display.display_tree(
                    keeper.repo_name, nodes, now, show_summary=not parsed_args.all_repos
                )

        has_errors = any(isinstance(node, ErrorNode) for _, nodes in results for node in nodes)
        return 1 if has_errors else 0
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
