# src/dday_todo/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import CommandRegistry
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import PersistenceCapacityError, TodoError
from ..tasks import task_api

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str, registry: CommandRegistry = command_registry) -> str:
    """
    One console line -> reply text.

    Slash lines go to the command registry; anything else becomes a new task.
    Engine errors are turned into user-facing messages here.
    """

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        reply = registry.handle(state, line, emit=emit)
        if reply is None:
            task = task_api.add_todo(state, line)
            due = f" (due {task.due_date})" if task.due_date else ""
            reply = f"Added: {task.title}{due}"
        return reply
    except PersistenceCapacityError as e:
        logger.warning("Change applied in memory but not saved: %s", e)
        return f"[WARN] Change applied but NOT saved: {e}"
    except TodoError as e:
        logger.info("Rejected: %s", e)
        return str(e)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%d).", len(state.store))
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        _print_ts(handle_line(state, user_input))

    logger.info("Console connector finished.")
