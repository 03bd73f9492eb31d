"""Agent configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_SHOT_CAP = 5  # Battle ticks before an engagement is abandoned
DEFAULT_MAX_TARGET_ATTEMPTS = 16
TRACE_EVERY = 0  # 0 = no map traces


@dataclass
class AgentConfig:
    shot_cap: int = DEFAULT_SHOT_CAP
    seed: Optional[int] = None
    max_target_attempts: int = DEFAULT_MAX_TARGET_ATTEMPTS
    trace_every: int = TRACE_EVERY
    verbose: bool = True

    def __post_init__(self):
        if self.shot_cap < 1:
            raise ValueError(f"shot_cap must be >= 1, got {self.shot_cap}")
        if self.max_target_attempts < 1:
            raise ValueError(f"max_target_attempts must be >= 1, got {self.max_target_attempts}")
        if self.trace_every < 0:
            raise ValueError(f"trace_every must be >= 0, got {self.trace_every}")
