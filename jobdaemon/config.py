"""
Configuration for the worker daemon.

Loads settings from environment variables with sensible defaults.
All persistent data is stored in ~/.jobdaemon/ unless JOBDAEMON_HOME is set.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .options import RunLimits

load_dotenv()


@dataclass
class Config:
    """Worker daemon configuration."""

    # Paths
    data_dir: Path = Path(os.environ.get("JOBDAEMON_HOME", str(Path.home() / ".jobdaemon")))
    log_file: Path = None
    maintenance_file: Path = None

    # Logging
    log_level: str = os.environ.get("LOG_LEVEL", "INFO")
    log_max_bytes: int = int(os.environ.get("LOG_MAX_BYTES", str(10 * 1024 * 1024)))  # 10MB
    log_backup_count: int = int(os.environ.get("LOG_BACKUP_COUNT", "5"))

    # Run limits
    worker_timeout: int = int(os.environ.get("WORKER_TIMEOUT", "10"))
    worker_sleep: int = int(os.environ.get("WORKER_SLEEP", "0"))
    worker_memory: int = int(os.environ.get("WORKER_MEMORY", "128"))

    # Seconds to wait between checks while paused or in maintenance (0 = spin)
    pause_poll_interval: float = float(os.environ.get("WORKER_PAUSE_POLL", "0.1"))

    # Send SIGKILL to ourselves on timeout (the manager then sees signal 9, not exit 1)
    kill_with_sigkill: bool = os.environ.get("KILL_WITH_SIGKILL", "false").lower() == "true"

    def __post_init__(self):
        """Initialize derived paths and create directories."""
        self.data_dir = Path(self.data_dir)
        self.log_file = self.data_dir / "jobdaemon.log"
        self.maintenance_file = self.data_dir / "down"

        self.data_dir.mkdir(parents=True, exist_ok=True)

    def run_limits(self) -> RunLimits:
        """Build the default run limits from configuration."""
        return RunLimits(
            timeout_seconds=self.worker_timeout,
            sleep_seconds=self.worker_sleep,
            memory_limit_mb=self.worker_memory,
        )


config = Config()
