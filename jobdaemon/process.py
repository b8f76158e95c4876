"""
Process-level primitives for the worker daemon.

Two ways out of the process: stop() exits cooperatively and lets Python
unwind, kill() terminates on the spot and is reserved for handlers that
overran their timeout and may never return control.
"""

import logging
import os
import signal
import sys
import threading

logger = logging.getLogger(__name__)


def supports_async_signals() -> bool:
    """Check whether alarm-based timeouts and signal control can be used.

    Python only runs signal handlers on the main thread, and SIGALRM is
    POSIX-only.
    """
    return hasattr(signal, "SIGALRM") and threading.current_thread() is threading.main_thread()


def stop(status: int = 0):
    """Exit the process with the given status."""
    logger.info(f"Stopping worker with exit status {status}")
    sys.exit(status)


def kill(status: int = 0, sigkill: bool = False):
    """Terminate the process immediately, skipping cleanup.

    With sigkill=True a SIGKILL is sent to ourselves first, in which case the
    process manager sees signal 9 rather than ``status``.
    """
    if sigkill and hasattr(signal, "SIGKILL"):
        os.kill(os.getpid(), signal.SIGKILL)

    os._exit(status)
