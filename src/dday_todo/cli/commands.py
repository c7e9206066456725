# src/dday_todo/cli/commands.py

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import re
import shlex
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

# "--photo path" or --photo "path with spaces"
PHOTO_OPT_RE = re.compile(r'(?:^|\s)--photo\s+(?:"([^"]+)"|(\S+))')
PHOTO_FLAG_RE = re.compile(r"(?:^|\s)--photo(?:\s|$)")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw_text: bool = False,
    ) -> None:
        """
        raw_text=True: the handler receives everything after the command name
        verbatim as a single argument (quotes and backslashes kept).
        """
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if raw_text:
            self._raw.update(n.lower() for n in [name, *aliases])

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        TodoError subclasses raised by handlers propagate to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(None, 1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if name in self._raw:
            args = [rest] if rest else []
        else:
            try:
                args = shlex.split(rest)
            except ValueError:
                args = rest.split()

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  (any other line adds a new task)")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def resolve_task(state: AppState, token: str) -> Task | None:
    """
    "#3" -> third task of the current list view; otherwise a task id.
    """
    token = token.strip()
    if token.startswith("#"):
        try:
            pos = int(token[1:])
        except ValueError:
            return None
        view = task_api.build_list_view(state)
        if 1 <= pos <= len(view):
            return view[pos - 1].task
        return None
    try:
        return state.store.get(int(token))
    except ValueError:
        return None


def format_task_line(pos: int, task: Task, label_text: str | None) -> str:
    badge = f"[{label_text}] " if label_text else ""
    mark = "x" if task.is_done else " "
    return f"#{pos:<3} [{mark}] {badge}{task.title}  (id={task.id}, logs={len(task.logs)})"


def format_timeline(task: Task) -> str:
    due = task.due_date or "-"
    lines = [f"{task.title}  status={task.status}  due={due}  id={task.id}"]
    for entry in task.logs:
        photo = " [photo]" if entry.image else ""
        note = entry.note or ""
        lines.append(f"  {entry.date} [{entry.action}] {note}{photo}".rstrip())
    return "\n".join(lines)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    total = len(state.store)
    done = sum(1 for t in state.store if t.is_done)
    path = getattr(state.settings, "tasks_path", "?")
    return (
        "Status:\n"
        f"  Tasks: {total} ({total - done} in progress, {done} done)\n"
        f"  Data file: {path}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    view = task_api.build_list_view(state)
    if not view:
        return "No tasks yet. Type something to add one."
    return "\n".join(
        format_task_line(i, item.task, item.label.text if item.label else None)
        for i, item in enumerate(view, start=1)
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    task = task_api.add_todo(state, " ".join(args))
    due = f" (due {task.due_date})" if task.due_date else ""
    return f"Added: {task.title}{due}"


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id|#pos>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    return format_timeline(task)


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <id|#pos>  -> toggle done / in progress
    """
    if not args:
        return "Usage: /done <id|#pos>"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    state.store.toggle_status(task.id)
    return f"{task.title}: {task.status}"


def cmd_note(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /note <id|#pos> <text...>            -> add a note (date phrases reschedule)
    /note <id|#pos> [text] --photo <path> -> attach an image
    """
    usage = "Usage: /note <id|#pos> <text> [--photo <path>]"
    if not args:
        return usage
    parts = args[0].split(None, 1)
    ref = parts[0]
    text = parts[1] if len(parts) > 1 else ""
    task = resolve_task(state, ref)
    if task is None:
        return f"No such task: {ref}"

    photo: str | None = None
    m = PHOTO_OPT_RE.search(text)
    if m:
        photo = m.group(1) if m.group(1) is not None else m.group(2)
        text = text[: m.start()] + text[m.end() :]
    elif PHOTO_FLAG_RE.search(text):
        return usage

    if photo and emit:
        with contextlib.suppress(Exception):
            emit(f"Encoding photo {photo}...")

    before = task.due_date
    updated = asyncio.run(task_api.submit_log(state, task.id, text.strip(), photo))
    if updated is None:
        return f"No such task: {ref}"
    if updated.due_date != before:
        return f"Noted. Due date changed to {updated.due_date}."
    return "Noted."


def cmd_del(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <id|#pos>"
    task = resolve_task(state, args[0])
    if task is None or not state.store.delete(task.id):
        return f"No such task: {args[0]}"
    return f"Deleted: {task.title}"


def cmd_clear(state: AppState, args: list[str]) -> str:
    removed = state.store.clear_completed()
    if removed == 0:
        return "No completed tasks to remove."
    return f"Removed {removed} completed task(s)."


def cmd_export(state: AppState, args: list[str]) -> str:
    path = task_api.export_csv(state, args[0] if args else None)
    return f"Exported to {path}"


def cmd_backup(state: AppState, args: list[str]) -> str:
    """
    /backup          -> back up every task
    /backup <id|#pos> -> back up a single task
    """
    if not args:
        return f"Backed up all tasks to {task_api.backup_all(state)}"
    task = resolve_task(state, args[0])
    if task is None:
        return f"No such task: {args[0]}"
    path = task_api.backup_task(state, task.id)
    return f"Backed up {task.title} to {path}"


def cmd_restore(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /restore <path>"
    result = asyncio.run(task_api.import_file(state, args[0]))
    logger.debug("Restore from %s: %s", args[0], result)
    msg = f"Restore finished: {result.added} added, {result.updated} updated."
    if result.skipped:
        msg += f" {result.skipped} malformed record(s) skipped."
    return msg


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task counts and the data file.")
registry.register("list", cmd_list, help_text="List tasks (urgent first).", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add 내일 보고서 제출.", raw_text=True)
registry.register("show", cmd_show, help_text="Show a task timeline: /show <id|#pos>.")
registry.register("done", cmd_done, help_text="Toggle done/in progress: /done <id|#pos>.")
registry.register(
    "note",
    cmd_note,
    help_text="Add a note/photo: /note <id|#pos> <text> [--photo <path>].",
    raw_text=True,
)
registry.register("del", cmd_del, help_text="Delete a task: /del <id|#pos>.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Remove all completed tasks.")
registry.register("export", cmd_export, help_text="Export logs as CSV: /export [dir].")
registry.register("backup", cmd_backup, help_text="Back up to JSON: /backup [id|#pos].")
registry.register("restore", cmd_restore, help_text="Merge a JSON backup: /restore <path>.")
