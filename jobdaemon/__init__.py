"""
jobdaemon - A supervised worker loop for long-running job handlers.

Invokes a single handler repeatedly inside a daemon process while enforcing
per-invocation timeouts, a memory ceiling, pause/resume signals and graceful
shutdown. Outcomes are reported to the outer process manager as exit codes.
"""

from .handlers import HasExceptionSink, HasRestartPolicy, HasTimeout, JobHandler
from .models import EXIT_MEMORY, EXIT_OK, EXIT_TIMEOUT, ExitReason, RunResult
from .options import RunLimits
from .worker import Supervisor

__version__ = "0.1.0"

__all__ = [
    "EXIT_MEMORY",
    "EXIT_OK",
    "EXIT_TIMEOUT",
    "ExitReason",
    "HasExceptionSink",
    "HasRestartPolicy",
    "HasTimeout",
    "JobHandler",
    "RunLimits",
    "RunResult",
    "Supervisor",
]
