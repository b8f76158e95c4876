"""
Run limits for the supervised worker loop.

A RunLimits value is validated once and frozen; a running supervisor never
sees it change. Start a new run to apply different limits.
"""

from pydantic import BaseModel, ConfigDict, Field


class RunLimits(BaseModel):
    """Timeout, idle sleep and memory ceiling for one run."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: int = Field(10, ge=0, description="Max seconds for one handler invocation")
    sleep_seconds: int = Field(0, ge=0, description="Seconds to sleep between iterations")
    memory_limit_mb: int = Field(128, ge=0, description="Resident memory ceiling in MB")
