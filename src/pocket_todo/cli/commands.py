# src/pocket_todo/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState, StorageStatus
from ..sharing.share_codec import ShareView, build_share_url, read_share_url
from ..storage.errors import DuplicateCategory, StorageUnavailable, TodoStoreError, ValidationError
from ..tasks.task_models import Priority, Task
from ..tasks.task_query import ALL_CATEGORIES, SortKey, SortOrder, TaskQuery

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except TodoStoreError as e:
            # Storage failures are reported inline; state stays usable.
            logger.warning("Command /%s failed: %s", name, e.to_dict())
            return f"Error: {e.message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering helpers ----


def format_task(state: AppState, task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    star = "★" if task.priority is Priority.HIGH else "☆"
    return f"#{task.id} {box} {star} {task.text} ({state.categories.display_name(task.category)})"


def format_share_view(state: AppState, view: ShareView) -> str:
    snap = view.snapshot
    box = "[x]" if snap.completed else "[ ]"
    added = snap.added_at().strftime("%Y-%m-%d %H:%M:%S")
    return (
        "Shared task:\n"
        f"  {box} {snap.text} ({state.categories.display_name(snap.category)})\n"
        f"  Added: {added}\n"
        f"  Back to the app: {view.back_url}"
    )


def _parse_id(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        return None


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    label = {
        StorageStatus.ENABLED: "Local storage enabled",
        StorageStatus.UNSUPPORTED: "Local storage not supported",
        StorageStatus.FAILED: "Local storage failed to initialize",
    }[state.storage_status]
    v = state.view
    return (
        "Status:\n"
        f"  Storage: {label}\n"
        f"  {state.storage_message}\n"
        f"  View: category={v.category} sort={v.sort_key} order={v.order}"
    )


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add buy milk            -> default category
    /add buy milk #work      -> category "work"
    """
    category = str(getattr(state.settings, "default_category", "default"))
    if args and args[-1].startswith("#") and len(args[-1]) > 1:
        category = args[-1][1:]
        args = args[:-1]

    task = await state.task_store.add(" ".join(args), category)
    if task is None:
        return "Nothing to add. Usage: /add <text> [#category]"
    return f"Added {format_task(state, task)}"


async def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                          -> current view
    /list work priority desc       -> change filter/sort, then show
    /list all                      -> clear the category filter
    """
    category, sort_key, order = state.view.category, state.view.sort_key, state.view.order
    for arg in args:
        a = arg.lower()
        if a in {k.value for k in SortKey}:
            sort_key = SortKey(a)
        elif a in {o.value for o in SortOrder}:
            order = SortOrder(a)
        else:
            category = a
    state.view = TaskQuery(category=category, sort_key=sort_key, order=order)

    tasks = state.view.apply(await state.task_store.get_all())
    if not tasks:
        where = "" if category == ALL_CATEGORIES else f" in {state.categories.display_name(category)}"
        return f"No tasks{where}."
    return "\n".join(format_task(state, t) for t in tasks)


async def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /done <id> or /undo <id>"
    task = await state.task_store.set_completed(task_id, completed)
    if task is None:
        return f"No task #{task_id}."
    return format_task(state, task)


async def cmd_done(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, True)


async def cmd_undo(state: AppState, args: list[str]) -> str:
    return await _set_completed(state, args, False)


async def cmd_star(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /star <id>"
    task = await state.task_store.toggle_priority(task_id)
    if task is None:
        return f"No task #{task_id}."
    return format_task(state, task)


async def cmd_rm(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /rm <id>"
    if not await state.task_store.delete(task_id):
        return f"No task #{task_id}."
    return f"Deleted #{task_id}."


async def cmd_cats(state: AppState, args: list[str]) -> str:
    categories = await state.category_store.list_all()
    lines = ["Categories:"]
    for c in categories:
        lines.append(f"  {c.slug} - {c.name}")
    return "\n".join(lines)


async def cmd_cat(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    name = " ".join(args).strip()
    if not name:
        return "Please enter a category name. Usage: /cat <name>"
    try:
        category = await state.category_store.add(name)
    except DuplicateCategory as e:
        return f"Category already exists ({e.slug})."
    except (ValidationError, StorageUnavailable) as e:
        return e.message
    if emit is not None:
        emit(f"Use it with: /add <text> #{category.slug}")
    return f"Added category {category.name} ({category.slug})."


async def cmd_share(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /share <id>"
    task = await state.task_store.get(task_id)
    if task is None:
        return f"No task #{task_id}."
    base_url = str(getattr(state.settings, "share_base_url", "http://localhost:8000/"))
    return f"Share link:\n{build_share_url(base_url, task)}"


async def cmd_open(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /open <share-url>"
    view = read_share_url(args[0])
    if view is None:
        return "That link does not contain a shared task."
    return format_share_view(state, view)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage status and the current view.")
registry.register("add", cmd_add, help_text="Add a task: /add <text> [#category].")
registry.register(
    "list",
    cmd_list,
    help_text="List tasks: /list [category|all] [date-added|priority|alphabetical] [asc|desc].",
    aliases=["ls"],
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Mark a task not completed: /undo <id>.")
registry.register("star", cmd_star, help_text="Toggle high/low priority: /star <id>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.", aliases=["del"])
registry.register("cats", cmd_cats, help_text="List categories.")
registry.register("cat", cmd_cat, help_text="Add a category: /cat <name>.")
registry.register("share", cmd_share, help_text="Build a share link for a task: /share <id>.")
registry.register("open", cmd_open, help_text="Show a shared task from a link: /open <url>.")
