"""Command line host for the conversation store."""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from chatstore.commands import CommandResponse, ConversationCommands
from chatstore.context import Context
from chatstore.services.conversation_store.errors import StorageInitError
from chatstore.services.constructor import construct_services_manager
from chatstore.utils import build_conversation_filename, resolve_log_dir

logger = logging.getLogger(__name__)


def configure_logging(log_dir: str = "logs") -> None:
    """Standard logging for host start-up, before AsyncLoggingService exists."""
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(logs_dir / f"cli_{timestamp}.log", mode="a", encoding="utf-8"),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatstore", description="Manage locally stored chat conversations."
    )
    parser.add_argument("--data-dir", help="Application data directory (default: CHAT_APP_DATA_DIR)")
    parser.add_argument("--log-dir", help="Log directory (default: CHAT_LOG_DIR or ./logs)")
    parser.add_argument(
        "--verbose", action="store_true", help="Echo service log lines to stdout"
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List conversation filenames, newest first")

    get = sub.add_parser("get", help="Print a conversation")
    get.add_argument("filename")

    save = sub.add_parser("save", help="Create or replace a conversation")
    save.add_argument("filename")
    save.add_argument("content", help="JSON document, or '-' to read it from stdin")

    delete = sub.add_parser("delete", help="Delete a conversation")
    delete.add_argument("filename")

    sub.add_parser("clear", help="Delete every conversation")
    sub.add_parser("new-name", help="Print a timestamp-derived conversation filename")
    return parser


def _load_content(raw: str):
    if raw == "-":
        raw = sys.stdin.read()
    return json.loads(raw)


async def dispatch(commands: ConversationCommands, args: argparse.Namespace) -> CommandResponse:
    """Run one parsed sub-command."""
    if args.command == "list":
        return await commands.get_conversations_index()
    if args.command == "get":
        return await commands.get_conversation(args.filename)
    if args.command == "save":
        try:
            content = _load_content(args.content)
        except ValueError as e:
            return CommandResponse(success=False, error=f"Invalid JSON content: {e}")
        return await commands.save_conversation(args.filename, content)
    if args.command == "delete":
        return await commands.delete_conversation(args.filename)
    if args.command == "clear":
        return await commands.clear_all_conversations()
    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "new-name":
        print(build_conversation_filename())
        return 0

    context = Context()
    services_manager = construct_services_manager(
        context=context,
        app_data_dir=args.data_dir,
        default_logging_path=args.log_dir,
        log_file="chatstore.log",
        console_output=args.verbose,
    )

    try:
        await services_manager.initialize_all()
    except (StorageInitError, OSError) as e:
        logger.critical("Conversation storage unavailable: %s", e)
        await services_manager.logging_service.on_close()
        return 1

    try:
        response = await dispatch(ConversationCommands(services_manager), args)
    finally:
        await services_manager.shutdown_all()

    print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    return 0 if response.success else 1


def run() -> None:
    # .env.local is already loaded by the services constructor on import
    args = build_parser().parse_args()
    configure_logging(resolve_log_dir(args.log_dir))
    sys.exit(asyncio.run(main()))
