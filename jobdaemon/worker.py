"""
The supervised worker loop.

Runs one job handler over and over, guarding each invocation with an alarm so
that a hung handler takes the whole process down (exit 1) instead of stalling
forever. After every invocation the loop decides whether to stop: a quit
request, the memory ceiling (exit 12) or a restart asked for by the handler.

Signals handled while running (POSIX, main thread only):
    SIGTERM  quit after the current invocation
    SIGUSR2  pause, no invocations until resumed
    SIGCONT  resume
    SIGALRM  the invocation timed out, kill the process

Without async signal support (Windows, or run() called from a thread other
than the main one) the loop still runs, but handler timeouts are not
enforced and the process cannot be paused or asked to quit by signal.
"""

import logging
import signal
import threading
import time
from typing import Callable

from . import process
from .config import config
from .handlers import HasExceptionSink, HasRestartPolicy, HasTimeout, JobHandler
from .models import EXIT_TIMEOUT, ExitReason, RunResult
from .monitor import get_memory_usage_mb, memory_exceeded
from .options import RunLimits

logger = logging.getLogger(__name__)


def _has_capability(handler: object, protocol: type, method: str) -> bool:
    """Protocol isinstance checks only see the attribute; it must also be callable."""
    return isinstance(handler, protocol) and callable(getattr(handler, method, None))


class Supervisor:
    """Runs a job handler under timeout, memory and signal control."""

    def __init__(
        self,
        maintenance_check: Callable[[], bool],
        *,
        register_signals: bool = True,
        idle_poll_seconds: float | None = None,
        memory_usage: Callable[[], float] = get_memory_usage_mb,
        kill_with_sigkill: bool | None = None,
        stop_while_gated: bool = False,
    ):
        self._maintenance_check = maintenance_check
        # Off by default: a paused or maintenance worker keeps polling and never exits
        self._stop_while_gated = stop_while_gated
        self._register_signals = register_signals
        self._idle_poll_seconds = (
            config.pause_poll_interval if idle_poll_seconds is None else idle_poll_seconds
        )
        self._memory_usage = memory_usage
        self._kill_with_sigkill = (
            config.kill_with_sigkill if kill_with_sigkill is None else kill_with_sigkill
        )

        # Written from signal handlers, read by the loop
        self._quit = threading.Event()
        self._paused = threading.Event()

        self._signals_active = False
        self._previous_handlers: dict[int, object] = {}
        self._current_timeout = 0
        self._iterations = 0

    @property
    def should_quit(self) -> bool:
        return self._quit.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def signals_active(self) -> bool:
        """True while run() has signal handlers and alarms in place."""
        return self._signals_active

    def request_quit(self):
        """Ask the loop to exit at its next stop check. Cannot be undone."""
        self._quit.set()

    def pause(self):
        self._paused.set()

    def resume(self):
        self._paused.clear()

    def run(self, handler: JobHandler, limits: RunLimits | None = None) -> RunResult:
        """Invoke the handler repeatedly until a stop condition is reached.

        Returns the reason the loop ended. A timed out invocation never
        returns here: the process is killed with exit status 1.
        """
        if not _has_capability(handler, JobHandler, "handle"):
            raise TypeError(f"{type(handler).__name__} does not define handle()")

        limits = limits or RunLimits()
        self._iterations = 0
        self._listen_for_signals()

        logger.info(
            f"Worker started: timeout={limits.timeout_seconds}s, "
            f"sleep={limits.sleep_seconds}s, memory={limits.memory_limit_mb}MB"
        )

        try:
            while True:
                if not self._daemon_should_run():
                    result = self._pause_worker(handler, limits)
                    if result is not None:
                        return result
                    continue

                self._register_timeout(handler, limits)
                try:
                    self._run_handler(handler)
                finally:
                    self._reset_timeout()

                result = self._stop_if_necessary(handler, limits)
                if result is not None:
                    return result

                self._sleep(limits)
        finally:
            self._restore_signals()

    def daemon(self, handler: JobHandler, limits: RunLimits | None = None):
        """Run the handler and exit the process with the resulting status."""
        result = self.run(handler, limits)
        logger.info(f"Worker exiting: {result.to_dict()}")
        self.stop(result.exit_code)

    def stop(self, status: int = 0):
        process.stop(status)

    def kill(self, status: int = 0):
        process.kill(status, sigkill=self._kill_with_sigkill)

    def _daemon_should_run(self) -> bool:
        return not (self._maintenance_check() or self.paused)

    def _pause_worker(self, handler: JobHandler, limits: RunLimits) -> RunResult | None:
        """Idle while paused or in maintenance.

        Skips the stop checks unless stop_while_gated is set, in which case
        quit or memory can end the run without another invocation.
        """
        if self._idle_poll_seconds > 0:
            time.sleep(self._idle_poll_seconds)
        if not self._stop_while_gated:
            return None
        return self._stop_if_necessary(handler, limits, check_restart=False)

    def _timeout_for_job(self, handler: JobHandler, limits: RunLimits) -> int:
        if _has_capability(handler, HasTimeout, "timeout"):
            return handler.timeout()
        return limits.timeout_seconds

    def _register_timeout(self, handler: JobHandler, limits: RunLimits):
        if not self._signals_active:
            return
        # alarm(0) means no alarm, so a timeout of 0 leaves the invocation unbounded
        self._current_timeout = max(int(self._timeout_for_job(handler, limits)), 0)
        signal.alarm(self._current_timeout)

    def _reset_timeout(self):
        if self._signals_active:
            signal.alarm(0)

    def _run_handler(self, handler: JobHandler):
        self._iterations += 1
        try:
            handler.handle()
        except Exception as e:
            if not _has_capability(handler, HasExceptionSink, "on_exception"):
                logger.error(f"Job handler failed: {type(e).__name__}: {e}")
                return

            logger.warning(f"Job handler failed, passing to exception sink: {type(e).__name__}: {e}")
            try:
                handler.on_exception(e)
            except Exception as sink_error:
                logger.error(f"Exception sink failed: {type(sink_error).__name__}: {sink_error}")

    def _should_restart(self, handler: JobHandler) -> bool:
        return _has_capability(handler, HasRestartPolicy, "should_restart") and bool(
            handler.should_restart()
        )

    def _stop_if_necessary(
        self, handler: JobHandler, limits: RunLimits, check_restart: bool = True
    ) -> RunResult | None:
        if self.should_quit:
            reason = ExitReason.QUIT
        elif memory_exceeded(limits.memory_limit_mb, self._memory_usage()):
            reason = ExitReason.MEMORY
        elif check_restart and self._should_restart(handler):
            reason = ExitReason.RESTART
        else:
            return None

        result = RunResult(reason=reason, iterations=self._iterations)
        logger.info(
            f"Worker stopping ({reason.value}) after {self._iterations} invocations, "
            f"exit status {result.exit_code}"
        )
        return result

    def _sleep(self, limits: RunLimits):
        if limits.sleep_seconds > 0:
            time.sleep(limits.sleep_seconds)

    def _listen_for_signals(self):
        self._signals_active = False
        if not self._register_signals:
            logger.info("Signal handling disabled: handler timeouts are not enforced")
            return
        if not process.supports_async_signals():
            logger.warning(
                "Async signals are not available: handler timeouts are not enforced "
                "and the worker cannot be paused or stopped by signal"
            )
            return

        handlers = {
            signal.SIGTERM: self._handle_quit_signal,
            signal.SIGUSR2: self._handle_pause_signal,
            signal.SIGCONT: self._handle_resume_signal,
            signal.SIGALRM: self._handle_alarm,
        }
        for signum, callback in handlers.items():
            self._previous_handlers[signum] = signal.signal(signum, callback)
        self._signals_active = True

    def _restore_signals(self):
        if not self._signals_active:
            return
        signal.alarm(0)
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_handlers.clear()
        self._signals_active = False

    def _handle_quit_signal(self, signum: int, frame):
        logger.info("Received SIGTERM, worker will quit after the current job")
        self.request_quit()

    def _handle_pause_signal(self, signum: int, frame):
        logger.info("Received SIGUSR2, pausing worker")
        self.pause()

    def _handle_resume_signal(self, signum: int, frame):
        logger.info("Received SIGCONT, resuming worker")
        self.resume()

    def _handle_alarm(self, signum: int, frame):
        logger.error(f"Job handler exceeded its {self._current_timeout}s timeout, killing worker")
        self.kill(EXIT_TIMEOUT)
