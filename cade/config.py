"""
Engine configuration
====================

High-level knobs for a discovery session, kept in one dataclass.
Values can come from the environment (`EngineConfig.from_env`) and are then
overridden by CLI flags.

Environment variables:
- CADE_PAGE_SIZE         campaigns per "page" (default 12)
- CADE_LOAD_MORE_DELAY   simulated load-more latency in seconds (default 0.5)
- CADE_LOG_LEVEL         DEBUG / INFO / WARNING / ... (default INFO)
- CADE_CATALOG           catalog file to load instead of the bundled sample
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional
import os


@dataclass
class EngineConfig:
    page_size: int = 12
    load_more_delay: float = 0.5
    log_level: str = "INFO"
    catalog_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.load_more_delay < 0:
            raise ValueError("load_more_delay must be >= 0")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if env is None else env
        kwargs = {}
        if env.get("CADE_PAGE_SIZE"):
            kwargs["page_size"] = _parse(env["CADE_PAGE_SIZE"], int, "CADE_PAGE_SIZE")
        if env.get("CADE_LOAD_MORE_DELAY"):
            kwargs["load_more_delay"] = _parse(env["CADE_LOAD_MORE_DELAY"], float, "CADE_LOAD_MORE_DELAY")
        if env.get("CADE_LOG_LEVEL"):
            kwargs["log_level"] = env["CADE_LOG_LEVEL"]
        if env.get("CADE_CATALOG"):
            kwargs["catalog_path"] = env["CADE_CATALOG"]
        return cls(**kwargs)


def _parse(raw: str, typ, name: str):
    try:
        return typ(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a valid {typ.__name__}, got {raw!r}") from e
