"""CLI entrypoint for capturing thoughts and reviewing reflections and plans."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from history import Priority, Timeframe

from .advisor_stub import AdvisorStub
from .config import MODEL_NAME, SQLITE_PATH, CounselConfig
from .entitlements import PRO_MONTHLY, StaticEntitlements
from .session import CounselSession
from .storage import HistoryStore, PlanAlreadyCommittedError, RecordNotFoundError
from .ui import build_history_table, build_plan_table, build_reflections_renderable

console = Console()
logger = logging.getLogger("counsel")


def build_parser() -> argparse.ArgumentParser:
    """Build command line interface parser."""
    parser = argparse.ArgumentParser(
        description="Capture thoughts, review derived reflections, and commit to a next step.",
    )
    parser.add_argument(
        "--sqlite-path",
        type=Path,
        default=SQLITE_PATH,
        help="SQLite file holding the history log.",
    )
    parser.add_argument(
        "--model-name",
        default=MODEL_NAME,
        help="Ollama model used when --use-model is set.",
    )
    parser.add_argument(
        "--use-model",
        action="store_true",
        help="Generate responses with a local Ollama model instead of the built-in stub.",
    )
    parser.add_argument(
        "--pro",
        action="store_true",
        help="Treat the user as a Counsel Pro subscriber.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log derivation and storage details.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    capture = commands.add_parser("capture", help="Record a new thought.")
    capture.add_argument("text", nargs="+", help="What's on your mind.")

    history = commands.add_parser("history", help="List captured thoughts, newest first.")
    history.add_argument("--search", default=None, help="Filter by title or summary.")

    commands.add_parser("reflections", help="Show reflections derived from history.")

    for name, help_text in (("plan", "Offer next actions for a record."), ("commit", "Lock in a next action.")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("record_id", help="History record id.")
        sub.add_argument(
            "--timeframe",
            choices=[item.value for item in Timeframe],
            default=Timeframe.today.value,
            help="When you will act.",
        )
        sub.add_argument(
            "--priority",
            choices=[item.value for item in Priority],
            default=Priority.important.value,
            help="Focus flavor for the actions.",
        )
        if name == "commit":
            sub.add_argument("--choice", type=int, required=True, help="1-based index of the offered action.")

    clear = commands.add_parser("clear", help="Delete all history.")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion.")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    if args.command == "commit" and args.choice <= 0:
        raise ValueError("--choice must be greater than 0")
    if args.command == "clear" and not args.yes:
        raise ValueError("clear requires --yes")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_advisor(args: argparse.Namespace):
    if args.use_model:
        from .llm_client import LLMAdvisor

        return LLMAdvisor(model_name=args.model_name)
    return AdvisorStub()


async def run_command(args: argparse.Namespace) -> None:
    config = CounselConfig(model_name=args.model_name, sqlite_path=args.sqlite_path)
    entitlements = StaticEntitlements([PRO_MONTHLY] if args.pro else [])

    async with HistoryStore(config.sqlite_path) as store:
        session = CounselSession(store, build_advisor(args), entitlements, config)

        if args.command == "capture":
            record = await session.record_interaction(" ".join(args.text))
            console.print(f"[bold]{record.title}[/bold]\n{record.summary}")
            for bullet in record.organized:
                console.print(f"  • {bullet}")
            console.print(f"[dim]{record.next_step_prompt}[/dim]  ({record.id})")
            if record.memory_snippet:
                console.print("[green]I'll remember this.[/green]")
        elif args.command == "history":
            records = await session.history(args.search)
            console.print(build_history_table(records, searched=bool(args.search)))
        elif args.command == "reflections":
            await session.refresh_reflections()
            visible = session.reflections
            hidden = len(session.all_reflections) - len(visible)
            console.print(build_reflections_renderable(visible, hidden_count=hidden))
        elif args.command == "plan":
            record = await store.get(args.record_id)
            actions = await session.plan_options(record.id, args.timeframe, args.priority)
            console.print(build_plan_table(record, actions))
        elif args.command == "commit":
            actions = await session.plan_options(args.record_id, args.timeframe, args.priority)
            if args.choice > len(actions):
                raise ValueError(f"--choice must be between 1 and {len(actions)}")
            await session.commit_plan(args.record_id, args.timeframe, args.priority, actions[args.choice - 1])
            console.print("Nice. You've locked in your next step.")
        elif args.command == "clear":
            deleted = await session.clear_all()
            console.print(f"Deleted {deleted} entries.")


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)
    try:
        validate_args(args)
        asyncio.run(run_command(args))
    except (ValueError, RecordNotFoundError, PlanAlreadyCommittedError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
