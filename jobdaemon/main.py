"""
Command line entry point for the worker daemon.

Loads a handler from an import path, builds run limits from configuration
and command line flags, and hands control to the Supervisor. The process
exit status tells the outer process manager why the worker stopped.

Maintenance mode is file based: while the maintenance file exists the worker
stays up but does not invoke its handler. ``down`` and ``up`` toggle it.
"""

import argparse
import importlib
import logging
from logging.handlers import RotatingFileHandler

from pydantic import ValidationError

from .config import config
from .handlers import JobHandler
from .options import RunLimits
from .worker import Supervisor

logger = logging.getLogger(__name__)


class HandlerLoadError(ValueError):
    """A handler could not be loaded from its import path."""


def configure_logging(level: str | None = None):
    """Log to a rotating file in the data dir and to the console."""
    log_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Rotating file handler (auto-compaction)
    file_handler = RotatingFileHandler(
        config.log_file,
        maxBytes=config.log_max_bytes,
        backupCount=config.log_backup_count,
    )
    file_handler.setFormatter(log_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)

    logging.basicConfig(
        level=(level or config.log_level).upper(),
        handlers=[file_handler, console_handler],
        force=True,
    )


def load_handler(path: str) -> JobHandler:
    """Load a handler from ``package.module:attribute``.

    Classes are instantiated without arguments; any other object is used as is.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise HandlerLoadError(f"Handler must be given as 'module:attribute', got '{path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise HandlerLoadError(f"Cannot import handler module '{module_name}': {e}") from e

    try:
        target = getattr(module, attr)
    except AttributeError as e:
        raise HandlerLoadError(f"Module '{module_name}' has no attribute '{attr}'") from e

    handler = target() if isinstance(target, type) else target
    if not isinstance(handler, JobHandler) or not callable(handler.handle):
        raise HandlerLoadError(f"Handler '{path}' does not define handle()")
    return handler


def is_down_for_maintenance() -> bool:
    """Check if the maintenance file is present."""
    return config.maintenance_file.exists()


def build_limits(args: argparse.Namespace) -> RunLimits:
    """Build run limits from configuration, with command line flags taking precedence."""
    limits = config.run_limits()
    overrides = {
        "timeout_seconds": args.timeout,
        "sleep_seconds": args.sleep,
        "memory_limit_mb": args.memory,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if not overrides:
        return limits
    return RunLimits(**{**limits.model_dump(), **overrides})


def _run(args: argparse.Namespace):
    try:
        handler = load_handler(args.handler)
    except HandlerLoadError as e:
        args.parser.error(str(e))

    try:
        limits = build_limits(args)
    except ValidationError as e:
        args.parser.error(f"Invalid run limits: {e}")

    configure_logging(args.log_level)

    supervisor = Supervisor(
        is_down_for_maintenance,
        register_signals=not args.no_signals,
    )
    logger.info(f"Running {args.handler} under supervision")
    # Exits the process with the run result status
    supervisor.daemon(handler, limits)


def _down(args: argparse.Namespace) -> int:
    config.maintenance_file.touch()
    print(f"Maintenance mode on ({config.maintenance_file})")
    return 0


def _up(args: argparse.Namespace) -> int:
    config.maintenance_file.unlink(missing_ok=True)
    print("Maintenance mode off")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobdaemon",
        description="Run a job handler in a supervised worker loop.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a handler until it is stopped.")
    run_parser.add_argument("handler", help="Handler import path, e.g. 'myapp.jobs:Mailer'.")
    run_parser.add_argument("--timeout", type=int, help="Max seconds per invocation.")
    run_parser.add_argument("--sleep", type=int, help="Seconds to sleep between invocations.")
    run_parser.add_argument("--memory", type=int, help="Memory limit in MB.")
    run_parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL).")
    run_parser.add_argument(
        "--no-signals",
        action="store_true",
        help="Do not install signal handlers (disables timeouts, pause and quit signals).",
    )
    run_parser.set_defaults(func=_run, parser=run_parser)

    down_parser = subparsers.add_parser("down", help="Put the worker into maintenance mode.")
    down_parser.set_defaults(func=_down)

    up_parser = subparsers.add_parser("up", help="Take the worker out of maintenance mode.")
    up_parser.set_defaults(func=_up)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)
