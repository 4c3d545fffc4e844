"""Command-line entry point that configures logging and runs the server."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Optional, Sequence

from itemserver.app import AppState, create_app, run_server

logger = logging.getLogger(__name__)

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
_PRETTY_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s [%(threadName)s:%(thread)d] "
    "%(filename)s:%(lineno)d: %(message)s"
)
_PORT = re.compile(r"\+?[0-9]+")

_installed: Optional[logging.Handler] = None


class _JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "target": record.name,
            "threadId": record.thread,
            "threadName": record.threadName,
            "filename": record.filename,
            "line_number": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def init_tracing() -> logging.Handler:
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT; return its handler."""
    global _installed
    level = _LEVELS.get(os.environ.get("LOG_LEVEL", "").strip().lower(), logging.INFO)
    handler = logging.StreamHandler()
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PRETTY_FORMAT))

    root = logging.getLogger()
    if _installed is not None:
        root.removeHandler(_installed)
    root.addHandler(handler)
    root.setLevel(level)
    _installed = handler
    return handler


def _port_from_env(environ: Mapping[str, str]) -> int:
    raw = environ.get("PORT", "3000")
    if not _PORT.fullmatch(raw) or int(raw) > 65535:
        raise SystemExit(f"Invalid PORT: {raw!r}")
    return int(raw)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the HTTP server on 0.0.0.0 and the port named by PORT (default 3000)."""
    argparse.ArgumentParser(
        prog="itemserver",
        description="Serve the item API over HTTP. Configured through PORT, "
        "APP_ENV, LOG_LEVEL and LOG_FORMAT.",
    ).parse_args(argv)

    init_tracing()
    port = _port_from_env(os.environ)

    logger.info("Initializing HTTP server")
    logger.info("Environment: %s", os.environ.get("APP_ENV", "development"))

    state = AppState()
    logger.info("App: %s v%s", state.app_name, state.version)

    asyncio.run(run_server(create_app(state), "0.0.0.0", port))

    logger.info("Server shutdown complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())