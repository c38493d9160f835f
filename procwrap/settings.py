"""Environment-driven defaults for procwrap.

Read once and cached; call ``get_settings.cache_clear()`` after changing the
environment (tests do this through a fixture).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    service_name: str = "unknown"
    log_level: str = "INFO"
    # Capacity of limiters created when with_bottleneck gets none
    default_max_concurrent: int = 1

    @classmethod
    def from_env(cls) -> "Settings":
        raw_capacity = os.getenv("PROCWRAP_DEFAULT_MAX_CONCURRENT", "1")
        try:
            capacity = int(raw_capacity)
        except ValueError:
            raise ValueError(
                f"PROCWRAP_DEFAULT_MAX_CONCURRENT must be an integer, got {raw_capacity!r}"
            ) from None
        return cls(
            service_name=os.getenv("SERVICE_NAME", "unknown"),
            log_level=os.getenv("PROCWRAP_LOG_LEVEL", "INFO"),
            default_max_concurrent=capacity,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
