"""
Handler capabilities understood by the supervisor.

Any object with a ``handle()`` method is a valid handler. The remaining
protocols are optional and independent: the supervisor checks each one with
``isinstance`` on every iteration, so a handler opts in simply by defining
the method.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class JobHandler(Protocol):
    """A unit of work invoked once per loop iteration."""

    def handle(self) -> None: ...


@runtime_checkable
class HasTimeout(Protocol):
    """Overrides RunLimits.timeout_seconds for this handler."""

    def timeout(self) -> int: ...


@runtime_checkable
class HasRestartPolicy(Protocol):
    """Asks for a process restart after an invocation."""

    def should_restart(self) -> bool: ...


@runtime_checkable
class HasExceptionSink(Protocol):
    """Receives exceptions raised by handle()."""

    def on_exception(self, exc: Exception) -> None: ...
