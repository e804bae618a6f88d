from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from elocatalog.app import (
    adjust_priority,
    cancel_evaluation,
    create_user,
    import_games,
    list_evaluation_jobs,
    list_games,
    request_evaluation,
    retry_evaluation,
    run_evaluation,
    sync_games,
)
from elocatalog.config import ConfigurationError, configure_logging, get_catalog_config
from elocatalog.domain.catalog import GameFilters
from elocatalog.domain.errors import ValidationError
from elocatalog.domain.model import JobStatus, Source

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Catalog chess games and their evaluations")
    subparsers = parser.add_subparsers(dest="command", required=True)

    user = subparsers.add_parser("user", help="User management commands")
    user_sub = user.add_subparsers(dest="user_command", required=True)
    user_create = user_sub.add_parser("create", help="Create a user")
    user_create.add_argument("--display-name", type=str, required=True)
    user_create.add_argument("--email", type=str, help="Optional email address")
    user_create.add_argument("--chesscom", type=str, help="Chess.com username to link")
    user_create.add_argument("--lichess", type=str, help="Lichess username to link")

    games = subparsers.add_parser("games", help="List, import and sync games")
    games_sub = games.add_subparsers(dest="games_command", required=True)

    games_list = games_sub.add_parser("list", help="List unified games")
    games_list.add_argument("--user-id", type=str, required=True)
    games_list.add_argument(
        "--source",
        choices=[source.value for source in Source],
        help="Only list games from this source",
    )
    evaluated = games_list.add_mutually_exclusive_group()
    evaluated.add_argument(
        "--evaluated",
        dest="evaluated",
        action="store_true",
        default=None,
        help="Only list evaluated games",
    )
    evaluated.add_argument(
        "--unevaluated",
        dest="evaluated",
        action="store_false",
        help="Hide evaluated games",
    )
    games_list.add_argument("--page", type=int, default=1)
    games_list.add_argument(
        "--limit",
        type=int,
        default=get_catalog_config().page_size,
        help="Games per page (default: %(default)s)",
    )

    games_import = games_sub.add_parser("import", help="Import pasted PGN text")
    games_import.add_argument("--user-id", type=str, required=True)
    games_import.add_argument(
        "--file",
        type=str,
        default="-",
        help="File holding one or more records ('-' reads stdin, the default)",
    )

    games_sync = games_sub.add_parser("sync", help="Store unseen archive games")
    games_sync.add_argument("--user-id", type=str, required=True)
    games_sync.add_argument("--limit", type=int, help="Games to request per source")

    jobs = subparsers.add_parser("eval", help="Evaluation job commands")
    jobs_sub = jobs.add_subparsers(dest="eval_command", required=True)

    eval_request = jobs_sub.add_parser("request", help="Queue an evaluation for a game")
    eval_request.add_argument("--game-id", type=str, required=True)
    eval_request.add_argument("--depth", type=int, help="Engine depth (defaults to config)")
    eval_request.add_argument("--priority", type=int, help="Priority 1-10 (defaults to config)")

    eval_priority = jobs_sub.add_parser("priority", help="Raise or lower a queued job")
    eval_priority.add_argument("--job-id", type=str, required=True)
    eval_priority.add_argument("--delta", type=int, required=True)

    for name, help_text in (
        ("cancel", "Cancel a queued or running job"),
        ("retry", "Requeue a failed job"),
        ("run", "Run a queued job against the evaluation service"),
    ):
        command = jobs_sub.add_parser(name, help=help_text)
        command.add_argument("--job-id", type=str, required=True)

    eval_list = jobs_sub.add_parser("list", help="List jobs by priority")
    eval_list.add_argument("--status", choices=[status.value for status in JobStatus])

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _run_games(args: argparse.Namespace) -> None:
    user_id = _parse_uuid(args.user_id)
    if args.games_command == "list":
        filters = GameFilters(
            source=Source(args.source) if args.source else None,
            evaluated=args.evaluated,
            page=args.page,
            limit=args.limit,
        )
        listing = list_games(user_id, filters)
        for game in listing.games:
            log.info(
                "%s  %-9s %s vs %s  %s  [%s] %s",
                game.played_at.strftime("%Y-%m-%d %H:%M"),
                game.source,
                game.white_player,
                game.black_player,
                game.result,
                game.evaluation_status,
                game.game_id or game.external_id,
            )
        log.info("Page %s/%s, %s game(s)", listing.page, listing.total_pages, listing.total)
        for source, warning in listing.warnings.items():
            log.warning("%s unavailable: %s", source, warning)
    elif args.games_command == "import":
        report = import_games(user_id, _read_text(args.file))
        for error in report.errors:
            log.warning("Rejected: %s", error)
    elif args.games_command == "sync":
        sync_games(user_id, limit=args.limit)
    else:
        raise ValueError(f"Unsupported games command: {args.games_command}")


def _run_eval(args: argparse.Namespace) -> None:
    if args.eval_command == "request":
        job_id = request_evaluation(
            _parse_uuid(args.game_id),
            depth=args.depth,
            priority=args.priority,
        )
        log.info("Queued evaluation job %s", job_id)
    elif args.eval_command == "priority":
        job = adjust_priority(_parse_uuid(args.job_id), args.delta)
        log.info("Job %s now has priority %s", job.id, job.priority)
    elif args.eval_command == "cancel":
        cancel_evaluation(_parse_uuid(args.job_id))
    elif args.eval_command == "retry":
        job = retry_evaluation(_parse_uuid(args.job_id))
        log.info("Job %s requeued (retry %s)", job.id, job.retry_count)
    elif args.eval_command == "run":
        run_evaluation(_parse_uuid(args.job_id))
    elif args.eval_command == "list":
        status = JobStatus(args.status) if args.status else None
        for job in list_evaluation_jobs(status=status):
            log.info(
                "%s  game=%s  %-9s priority=%s  %s/%s",
                job.id,
                job.game_id,
                job.status,
                job.priority,
                job.analyzed_positions,
                job.total_positions,
            )
    else:
        raise ValueError(f"Unsupported eval command: {args.eval_command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        configure_logging()
    except ConfigurationError as exc:
        configure_logging(level=logging.INFO)
        log.warning("%s; logging at INFO", exc)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "user" and parsed_args.user_command == "create":
            user = create_user(
                display_name=parsed_args.display_name,
                email=parsed_args.email,
                chesscom_username=parsed_args.chesscom,
                lichess_username=parsed_args.lichess,
            )
            log.info("Created user %s", user.id)
        elif parsed_args.command == "games":
            _run_games(parsed_args)
        elif parsed_args.command == "eval":
            _run_eval(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ValidationError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
