from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from rich.console import Console
from rich.table import Table

from .client import BoardController, TaskflowClient
from .config import Settings, load_settings
from .errors import TaskflowError
from .logging_utils import configure_logging
from .notifications import Notification, NotificationLevel, Notifier
from .server import create_app

_STYLES = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.ERROR: "bold red",
    NotificationLevel.INFO: "cyan",
}


def _settings(args: argparse.Namespace) -> Settings:
    data_dir = Path(args.data_dir).expanduser().resolve() if args.data_dir else None
    settings = load_settings(data_dir)
    if args.api_url:
        settings.api_url = args.api_url.rstrip("/")
    if args.token:
        settings.token = args.token
    return settings


def _console_sink(console: Console) -> Callable[[Notification], None]:
    def _sink(notification: Notification) -> None:
        console.print(notification.message, style=_STYLES.get(notification.level))

    return _sink


def _run_board(args: argparse.Namespace, action: Callable[[BoardController], Awaitable[int]]) -> int:
    """Open a client session, load the board and run *action* against it."""
    settings = _settings(args)
    if not settings.token:
        sys.stderr.write("Not logged in: pass --token or set TASKFLOW_TOKEN\n")
        return 1
    console = Console(stderr=True)
    notifier = Notifier()
    notifier.add_sink(_console_sink(console))

    async def _main() -> int:
        async with TaskflowClient(settings.api_url, token=settings.token) as client:
            board = BoardController(client, notifier)
            if not await board.fetch_lists():
                return 1
            return await action(board)

    return asyncio.run(_main())


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def _server(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install server extras: pip install 'taskflow[server]'\n")
        return 1

    settings = _settings(args)
    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def _auth(args: argparse.Namespace) -> int:
    settings = _settings(args)

    async def _main() -> dict[str, Any]:
        async with TaskflowClient(settings.api_url) as client:
            if args.command == "register":
                return await client.register(args.name, args.email, args.password)
            return await client.login(args.email, args.password)

    try:
        payload = asyncio.run(_main())
    except TaskflowError as exc:
        sys.stderr.write(f"{args.command} failed: {exc}\n")
        return 1
    _print_json(payload)
    return 0


def _show(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        if args.json:
            _print_json([tl.to_dict(include_tasks=True) for tl in board.lists])
            return 0
        console = Console()
        if not board.lists:
            console.print("No lists yet.")
        for task_list in board.lists:
            table = Table(title=f"{task_list.title} [dim]({task_list.id})[/dim]")
            table.add_column("#", justify="right")
            table.add_column("Task")
            table.add_column("Priority")
            table.add_column("Deadline")
            table.add_column("Done")
            table.add_column("ID", style="dim")
            for task in task_list.tasks:
                table.add_row(
                    str(task.order),
                    task.title,
                    task.priority.value,
                    task.deadline or "",
                    "x" if task.completed else "",
                    task.id,
                )
            console.print(table)
        return 0

    return _run_board(args, _action)


def _add_list(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        created = await board.add_list(args.title)
        if created is None:
            return 1
        _print_json(created.to_dict())
        return 0

    return _run_board(args, _action)


def _add_task(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        created = await board.add_task(
            args.list_id,
            args.title,
            priority=args.priority,
            deadline=args.deadline,
            description=args.description,
        )
        if created is None:
            return 1
        _print_json(created.to_dict())
        return 0

    return _run_board(args, _action)


def _move(args: argparse.Namespace) -> int:
    """Replay a drag gesture: start on the task, hover and drop on the target."""

    async def _action(board: BoardController) -> int:
        try:
            board.drag_start(args.task_id)
        except TaskflowError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        board.drag_over(args.task_id, args.over_id)
        outcome = await board.drag_end(args.task_id, args.over_id)
        if outcome is None:
            sys.stdout.write("Nothing to move\n")
            return 0
        if not outcome.ok:
            return 1
        _print_json(outcome.plan.to_dict() if outcome.plan else {})
        return 0

    return _run_board(args, _action)


def _update_task(args: argparse.Namespace) -> int:
    changes = {
        key: value
        for key, value in (
            ("title", args.title),
            ("description", args.description),
            ("priority", args.priority),
            ("deadline", args.deadline),
        )
        if value is not None
    }
    if not changes:
        sys.stderr.write("Nothing to update: pass --title, --description, --priority or --deadline\n")
        return 1

    async def _action(board: BoardController) -> int:
        updated = await board.update_task(args.task_id, **changes)
        if updated is None:
            return 1
        _print_json(updated.to_dict())
        return 0

    return _run_board(args, _action)


def _toggle(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        if board.state.get_task(args.task_id) is None:
            sys.stderr.write(f"Unknown task {args.task_id}\n")
            return 1
        updated = await board.toggle_completed(args.task_id)
        if updated is None:
            return 1
        _print_json(updated.to_dict())
        return 0

    return _run_board(args, _action)


def _move_list(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        try:
            outcome = await board.move_list(args.list_id, args.over_list_id)
        except TaskflowError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        if outcome is None:
            sys.stdout.write("Nothing to move\n")
            return 0
        if not outcome.ok:
            return 1
        _print_json([{"id": tl.id, "title": tl.title, "order": tl.order} for tl in board.lists])
        return 0

    return _run_board(args, _action)


def _delete_list(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        return 0 if await board.delete_list(args.list_id) else 1

    return _run_board(args, _action)


def _delete_task(args: argparse.Namespace) -> int:
    async def _action(board: BoardController) -> int:
        return 0 if await board.delete_task(args.task_id) else 1

    return _run_board(args, _action)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Taskflow: ordered task lists")
    parser.add_argument("--data-dir", default=None, help="Server data directory (default: ./.taskflow)")
    parser.add_argument("--api-url", default=None, help="Server URL for client commands")
    parser.add_argument("--token", default=None, help="Bearer token for client commands")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command")

    server = subparsers.add_parser("server", help="Start the API server")
    server.add_argument("--host", default="127.0.0.1")
    server.add_argument("--port", default=8000, type=int)
    server.set_defaults(func=_server)

    register = subparsers.add_parser("register", help="Create an account and print its token")
    register.add_argument("name")
    register.add_argument("email")
    register.add_argument("password")
    register.set_defaults(func=_auth)

    login = subparsers.add_parser("login", help="Log in and print a token")
    login.add_argument("email")
    login.add_argument("password")
    login.set_defaults(func=_auth)

    show = subparsers.add_parser("show", help="Show the board")
    show.add_argument("--json", action="store_true")
    show.set_defaults(func=_show)

    add_list = subparsers.add_parser("add-list", help="Create a list")
    add_list.add_argument("title")
    add_list.set_defaults(func=_add_list)

    add_task = subparsers.add_parser("add-task", help="Create a task at the end of a list")
    add_task.add_argument("list_id")
    add_task.add_argument("title")
    add_task.add_argument("--priority", default="medium", choices=["low", "medium", "high"])
    add_task.add_argument("--deadline", default=None)
    add_task.add_argument("--description", default=None)
    add_task.set_defaults(func=_add_task)

    move = subparsers.add_parser("move", help="Drop a task onto another task or a list")
    move.add_argument("task_id")
    move.add_argument("over_id")
    move.set_defaults(func=_move)

    update_task = subparsers.add_parser("update-task", help="Edit a task's fields")
    update_task.add_argument("task_id")
    update_task.add_argument("--title", default=None)
    update_task.add_argument("--description", default=None)
    update_task.add_argument("--priority", default=None, choices=["low", "medium", "high"])
    update_task.add_argument("--deadline", default=None)
    update_task.set_defaults(func=_update_task)

    toggle = subparsers.add_parser("toggle", help="Flip a task's completed flag")
    toggle.add_argument("task_id")
    toggle.set_defaults(func=_toggle)

    move_list_cmd = subparsers.add_parser("move-list", help="Drop a list onto another list's position")
    move_list_cmd.add_argument("list_id")
    move_list_cmd.add_argument("over_list_id")
    move_list_cmd.set_defaults(func=_move_list)

    delete_list = subparsers.add_parser("delete-list", help="Delete a list and its tasks")
    delete_list.add_argument("list_id")
    delete_list.set_defaults(func=_delete_list)

    delete_task = subparsers.add_parser("delete-task", help="Delete a task")
    delete_task.add_argument("task_id")
    delete_task.set_defaults(func=_delete_task)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    configure_logging(args.log_level or _settings(args).log_level)
    return int(handler(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
