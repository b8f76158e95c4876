import os
import tempfile

# Keep config side effects (data dir, maintenance file) out of the real home dir.
os.environ.setdefault("JOBDAEMON_HOME", tempfile.mkdtemp(prefix="jobdaemon-test-"))

import pytest

from jobdaemon import Supervisor


@pytest.fixture
def make_supervisor():
    """Build a supervisor that does not touch process signals."""

    def factory(maintenance_check=lambda: False, memory_mb: float = 0.0, **kwargs):
        kwargs.setdefault("register_signals", False)
        kwargs.setdefault("idle_poll_seconds", 0.001)
        return Supervisor(maintenance_check, memory_usage=lambda: memory_mb, **kwargs)

    return factory
