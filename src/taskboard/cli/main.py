# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, warms the cache, starts background
refresh for every configured resource and runs the console loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import print_new_records, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _warm_up(state: AppState) -> None:
    """First load for each resource; failures are reported, not fatal."""
    subject_id = state.subject_id
    for resource_key, fetcher in state.fetchers.items():
        result = await state.orchestrator.load(resource_key, subject_id, fetcher, silent=True)
        if result.ok:
            logger.info("Loaded %s: %d records", resource_key, len(result.items))
        else:
            logger.warning("Initial load of %s failed: %s", resource_key, result.error)


async def run(state: AppState) -> None:
    subject_id = state.subject_id
    state.notifier.subscribe(subject_id, print_new_records)

    await _warm_up(state)
    for resource_key, fetcher in state.fetchers.items():
        state.scheduler.start(resource_key, subject_id, fetcher)

    try:
        await run_console_loop(state)
    finally:
        await state.reset()


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        rs = getattr(state, "read_status", None)
        if rs is not None and hasattr(rs, "close"):
            rs.close()
    except Exception:
        logger.debug("Read-status close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    if not settings.subject_id:
        logger.error("TASKBOARD_SUBJECT_ID is not set; nothing to load.")
        raise SystemExit(2)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
