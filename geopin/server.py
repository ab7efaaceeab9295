#!/usr/bin/env python3
"""
GeoPin Server Runner
====================

Runs the ASGI app under uvicorn and owns the process lifecycle:

- SIGTERM / SIGINT: stop accepting connections, let in-flight responses
  finish, exit 0. A second signal forces the exit.
- Uncaught exceptions (main loop or worker threads) and exceptions from
  asyncio tasks nobody awaited: log, shut down the same way, exit 1.

The server is either LISTENING or SHUTTING_DOWN; the second state is terminal
and the first trigger decides the exit code.
"""

import argparse
import asyncio
import contextlib
import signal
import sys
import threading
from enum import Enum

import uvicorn
from loguru import logger

from geopin.core.config import Settings, get_settings
from geopin.core.logging_config import configure_logging
from geopin.main import create_app
from geopin.startup_check import run_startup_checks

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ServerState(Enum):
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"


class _UvicornServer(uvicorn.Server):
    """uvicorn server whose signal handling is left to GeoPinServer."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class GeoPinServer:
    def __init__(self, settings: Settings, app=None):
        self.settings = settings
        self.state = ServerState.LISTENING
        self.exit_code = 0
        self._lock = threading.Lock()

        config = uvicorn.Config(
            app or create_app(settings),
            host=settings.HOST,
            port=settings.PORT,
            server_header=False,
            log_config=None,
            access_log=True,
            timeout_graceful_shutdown=settings.GRACEFUL_SHUTDOWN_TIMEOUT,
        )
        self.server = _UvicornServer(config)

    def request_shutdown(self, reason: str, exit_code: int = 0) -> bool:
        """Move to SHUTTING_DOWN. Returns False if already shutting down."""
        with self._lock:
            if self.state is ServerState.SHUTTING_DOWN:
                return False
            self.state = ServerState.SHUTTING_DOWN
            self.exit_code = exit_code

        if exit_code:
            logger.error(f"{reason}. Shutting down")
        else:
            logger.info(f"{reason}. Shutting down gracefully")
        self.server.should_exit = True
        return True

    def handle_signal(self, signum: int) -> None:
        name = signal.Signals(signum).name
        if not self.request_shutdown(f"{name} received"):
            logger.warning(f"{name} received again, forcing exit")
            self.server.force_exit = True

    def handle_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        exc = context.get("exception")
        message = context.get("message", "Unhandled exception in event loop")
        if exc is None or "future" not in context:
            # transport errors, destroyed pending tasks and the like
            logger.opt(exception=exc).warning(f"Event loop reported: {message}")
            return
        logger.opt(exception=exc).error(f"Unhandled task exception: {message}")
        self.request_shutdown("Unhandled task exception", exit_code=1)

    def handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread else "unknown"
        logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).error(
            f"Uncaught exception in thread {thread_name}"
        )
        self.request_shutdown("Uncaught exception", exit_code=1)

    def install_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        loop.set_exception_handler(self.handle_loop_exception)
        threading.excepthook = self.handle_thread_exception

        for sig in HANDLED_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.handle_signal, sig)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(self.handle_signal, signum))

    async def serve(self) -> None:
        self.install_handlers(asyncio.get_running_loop())

        mode = "production" if self.settings.is_production else "development"
        logger.info(f"Server is running in {mode} mode")
        logger.info(f"Server is running on http://localhost:{self.settings.PORT}")
        logger.info("Press Ctrl+C to stop the server")

        await self.server.serve()

    def run(self) -> int:
        try:
            asyncio.run(self.serve())
        except Exception as e:
            logger.opt(exception=e).error("Uncaught exception")
            self.request_shutdown("Uncaught exception", exit_code=1)

        logger.info("Process terminated")
        return self.exit_code


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the GeoPin static content server")
    parser.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Listen port (default: PORT or 3000)")
    parser.add_argument(
        "--production",
        action="store_true",
        help="Enable long-lived asset caching and cross-origin isolation",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.host:
        overrides["HOST"] = args.host
    if args.port is not None:
        overrides["PORT"] = args.port
    if args.production:
        overrides["ENVIRONMENT"] = "production"
    return get_settings().model_copy(update=overrides)


def main(argv: list[str] | None = None) -> int:
    settings = build_settings(parse_args(argv))
    configure_logging(settings)

    if not run_startup_checks(settings):
        return 1

    return GeoPinServer(settings).run()


if __name__ == "__main__":
    sys.exit(main())
