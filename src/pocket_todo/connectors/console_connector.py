# src/pocket_todo/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime

from ..cli.commands import cmd_list
from ..cli.commands import registry as command_registry
from ..core.events import ChangeEvent, ChangeKind
from ..core.state import AppState, StorageStatus

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (storage=%s).", state.storage_status)
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.")
    if state.storage_status is not StorageStatus.ENABLED:
        _print_ts(f"[STORAGE] {state.storage_message}")

    # Deleting changes which tasks are in the list: re-run the current view afterwards.
    refresh = asyncio.Event()

    def _on_change(event: ChangeEvent) -> None:
        if event.collection == "tasks" and event.kind is ChangeKind.DELETED:
            refresh.set()

    unsubscribe = state.events.subscribe(_on_change)

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, "> ")).strip()
                _rewrite_prev_line(f"[{_ts_local()}] > {user_input}")
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

            if not user_input.startswith("/"):
                # Plain text is a new task in the default category.
                user_input = f"/add {user_input}"

            try:
                response = await command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                _print_ts(response)

            if refresh.is_set():
                refresh.clear()
                _print_ts(await cmd_list(state, []))
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
