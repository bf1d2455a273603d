from __future__ import annotations
import dataclasses
import os
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import load_dotenv

# Load .env early (no error if missing)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else None


def _env_ints(name: str, default: Tuple[int, ...]) -> Tuple[int, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(int(p) for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class CuratorConfig:
    # Cell filters (defaults: German Vodafone LTE cells seen during 2024)
    radio: str = os.getenv("CURATOR_RADIO", "LTE")
    mcc: int = _env_int("CURATOR_MCC", 262)
    mncs: Tuple[int, ...] = _env_ints("CURATOR_MNCS", (2, 4, 9))
    created_after: int = _env_int("CURATOR_CREATED_AFTER", 0)
    updated_after: int = _env_int("CURATOR_UPDATED_AFTER", 1704067200)
    min_samples: int = _env_int("CURATOR_MIN_SAMPLES", 10)
    # Topology; id 1 is reserved for the coordinator
    topology_start_id: int = _env_int("CURATOR_TOPOLOGY_START_ID", 2)
    default_capacity: int = _env_int("CURATOR_DEFAULT_CAPACITY", 65535)
    # Batching: a window of batch_interval_ms simulated time is emitted every batch_gap_ms.
    # batch_interval_ms <= 0 disables batching.
    batch_interval_ms: int = _env_int("CURATOR_BATCH_INTERVAL_MS", 20_000)
    batch_gap_ms: int = _env_int("CURATOR_BATCH_GAP_MS", 500)
    # Source groups
    source_group_size: Optional[int] = _env_optional_int("CURATOR_SOURCE_GROUP_SIZE")
    group_by_route: bool = os.getenv("CURATOR_GROUP_BY_ROUTE", "1") not in ("0", "false", "False")

    @property
    def batching_enabled(self) -> bool:
        return self.batch_interval_ms > 0

    def replace(self, **overrides) -> "CuratorConfig":
        return dataclasses.replace(self, **overrides)

    def validate(self) -> None:
        if self.batching_enabled and self.batch_gap_ms < 0:
            raise ValueError("batch_gap_ms must not be negative")
        if self.source_group_size is not None and self.source_group_size <= 0:
            raise ValueError("source_group_size must be positive")
        if self.default_capacity < 0:
            raise ValueError("default_capacity must not be negative")
