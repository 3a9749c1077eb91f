# src/pocket_todo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- shows a shared task read-only, when started with a share URL
  (pocket-todo "http://host/?share=..."), or
- runs the interactive console.
"""

from __future__ import annotations

import asyncio
import locale
import logging
import sys

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..cli.commands import format_share_view
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..sharing.share_codec import read_share_url

logger = logging.getLogger(__name__)


async def _run(argv: list[str]) -> int:
    settings = get_settings()
    state = await create_initial_state(settings=settings)
    try:
        share_view = read_share_url(argv[0]) if argv else None
        if share_view is not None:
            # A share link replaces the interactive view.
            print(format_share_view(state, share_view))
            return 0
        if argv:
            logger.info("Argument is not a share link; starting the console.")
        await run_console_loop(state)
        return 0
    finally:
        await shutdown_state(state)


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    if argv is None:
        argv = sys.argv[1:]

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=getattr(settings, "data_dir", ".local/pocket_todo"), console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "pocket-todo"))

    try:
        # Alphabetical sorting collates with the user's locale.
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("Could not apply the system collation locale: %s", e)

    try:
        code = asyncio.run(_run(argv))
    except KeyboardInterrupt:
        code = 130
    logger.info("Bye.")
    return code


if __name__ == "__main__":
    sys.exit(main())
