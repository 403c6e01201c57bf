# src/taskboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, cast

from ..cache.cache_models import LoadStatus, Record
from ..core.state import AppState
from ..readstatus.read_status_api import count_unread, mark_resource_read, unread_records

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler3 = Callable[[AppState, list[str], str], CommandResult]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console loop (/help, /refresh, ...)."""

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
        subject_id: str | None = None,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
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

        subject = subject_id if subject_id is not None else state.subject_id

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        if nparams >= 4:
            result = cast(CommandHandler4, handler)(state, args, subject, emit)
        else:
            result = cast(CommandHandler3, handler)(state, args, subject)

        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float | None) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _summary(record: Record, limit: int = 3) -> str:
    pairs: list[str] = []
    for k, v in record.items():
        if v in (None, ""):
            continue
        text = str(v)
        if len(text) > 40:
            text = text[:37] + "..."
        pairs.append(f"{k}={text}")
        if len(pairs) >= limit:
            break
    return ", ".join(pairs) or "(empty)"


def _resources_from(state: AppState, args: list[str]) -> list[str] | None:
    """None means an unknown resource was named."""
    known = list(state.settings.resources)
    if not args or args[0].lower() == "all":
        return known
    name = args[0]
    return [name] if name in known else None


def cmd_help(state: AppState, args: list[str], subject_id: str) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], subject_id: str) -> str:
    lines = [
        "Status:",
        f"  Subject: {subject_id or '-'}",
        f"  TTL: {state.cache.default_ttl:.0f}s",
        f"  Resources: {', '.join(state.settings.resources)}",
    ]
    running = []
    for r, s in state.scheduler.running():
        reg = state.scheduler.registration(r, s)
        if s == subject_id and reg is not None:
            running.append(f"{r} ({reg.ticks} ticks)")
    lines.append(f"  Auto-refresh: {', '.join(running) if running else 'off'}")

    stats = state.cache.stats()
    if not stats:
        lines.append("  Cache: empty")
    else:
        lines.append("  Cache:")
        for key, info in stats.items():
            fresh = "fresh" if info["fresh"] else "stale"
            lines.append(
                f"    {key}: {info['count']} records, age {info['age_seconds']}s ({fresh})"
            )
    return "\n".join(lines)


async def cmd_show(
    state: AppState,
    args: list[str],
    subject_id: str,
    emit: CommandEmitter | None = None,
) -> str:
    """
    /show <resource> [n]  -> list cached (or freshly fetched) records
    """
    if not args:
        return "Usage: /show <resource> [n]"
    resource_key = args[0]
    fetcher = state.fetchers.get(resource_key)
    if fetcher is None:
        return f"Unknown resource: {resource_key}"

    try:
        limit = int(args[1]) if len(args) > 1 else 10
    except ValueError:
        return "Usage: /show <resource> [n]"

    def interim(items: list[Record]) -> None:
        if emit:
            emit(f"[{resource_key}] showing {len(items)} cached records while refreshing...")

    result = await state.orchestrator.load(resource_key, subject_id, fetcher, on_interim=interim)
    if result.status == LoadStatus.FAILED:
        return f"Could not load {resource_key}: {result.error}"

    read = state.read_status.get_read_identities(subject_id)
    detector = state.cache.detector
    lines = [f"{resource_key}: {len(result.items)} records ({result.status.value})"]
    if result.is_stale:
        lines.append(f"  warning: showing stale data, refresh failed: {result.error}")
    for record in result.items[: max(0, limit)]:
        ident = detector.identity(record, resource_key)
        marker = " " if ident in read else "*"
        lines.append(f" {marker} [{ident}] {_summary(record)}")
    if len(result.items) > limit:
        lines.append(f"  ... {len(result.items) - limit} more")
    return "\n".join(lines)


async def cmd_refresh(state: AppState, args: list[str], subject_id: str) -> str:
    """
    /refresh             -> refresh every resource
    /refresh <resource>  -> refresh one
    """
    resources = _resources_from(state, args)
    if resources is None:
        return f"Unknown resource: {args[0]}"

    lines: list[str] = []
    for resource_key in resources:
        fetcher = state.fetchers.get(resource_key)
        if fetcher is None:
            lines.append(f"  {resource_key}: no fetcher configured")
            continue
        result = await state.orchestrator.refresh(resource_key, subject_id, fetcher, silent=True)
        if result.ok:
            lines.append(f"  {resource_key}: {len(result.items)} records at {_fmt_ts(result.fetched_at)}")
        else:
            lines.append(f"  {resource_key}: {result.status.value} ({result.error})")
    return "Refresh:\n" + "\n".join(lines)


def cmd_clear(state: AppState, args: list[str], subject_id: str) -> str:
    resources = _resources_from(state, args)
    if resources is None:
        return f"Unknown resource: {args[0]}"
    for resource_key in resources:
        state.cache.clear(resource_key, subject_id)
    return f"Cleared cache for: {', '.join(resources)}"


def cmd_read(state: AppState, args: list[str], subject_id: str) -> str:
    resources = _resources_from(state, args)
    if resources is None:
        return f"Unknown resource: {args[0]}"
    total = 0
    for resource_key in resources:
        total += mark_resource_read(state, subject_id, resource_key)
    return f"Marked {total} record(s) as read."


def cmd_unread(state: AppState, args: list[str], subject_id: str) -> str:
    resources = _resources_from(state, args)
    if resources is None:
        return f"Unknown resource: {args[0]}"
    if len(resources) == 1:
        n = len(unread_records(state, subject_id, resources[0]))
        return f"Unread in {resources[0]}: {n}"
    return f"Unread (cached resources): {count_unread(state, subject_id, resources)}"


def describe_event(event: Any) -> str:
    """One-line text for a NewRecordsEvent, used by the console loop."""
    head = ", ".join(_summary(r, limit=2) for r in list(event.records)[:3])
    more = f" (+{event.count - 3} more)" if event.count > 3 else ""
    return f"{event.count} new {event.resource_key} record(s): {head}{more}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show cache and auto-refresh status.")
registry.register("show", cmd_show, help_text="List records: /show <resource> [n].", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Force refresh: /refresh [resource|all].")
registry.register("clear", cmd_clear, help_text="Drop cached data: /clear [resource|all].")
registry.register("read", cmd_read, help_text="Mark cached records read: /read [resource|all].")
registry.register("unread", cmd_unread, help_text="Count unread records: /unread [resource|all].")
