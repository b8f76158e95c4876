"""
Result types for a supervised run.

The exit codes are the contract with the outer process manager: 0 for a
clean stop or requested restart, 1 for a timeout kill and 12 when the
memory ceiling was reached.
"""

from dataclasses import dataclass
from enum import Enum

EXIT_OK = 0
EXIT_TIMEOUT = 1
EXIT_MEMORY = 12


class ExitReason(Enum):
    """Why a run ended.

    TIMEOUT is never returned by run(): a timed out worker is killed on the
    spot. It exists so the timeout exit status has a named reason.
    """

    QUIT = "quit"
    MEMORY = "memory"
    RESTART = "restart"
    TIMEOUT = "timeout"

    @property
    def exit_code(self) -> int:
        if self is ExitReason.MEMORY:
            return EXIT_MEMORY
        if self is ExitReason.TIMEOUT:
            return EXIT_TIMEOUT
        return EXIT_OK


@dataclass(frozen=True)
class RunResult:
    """How and why a run ended."""

    reason: ExitReason
    iterations: int = 0

    @property
    def exit_code(self) -> int:
        return self.reason.exit_code

    def to_dict(self) -> dict:
        return {
            "reason": self.reason.value,
            "exit_code": self.exit_code,
            "iterations": self.iterations,
        }
