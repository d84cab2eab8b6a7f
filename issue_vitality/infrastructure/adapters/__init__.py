"""Infrastructure adapters: system clock, per-issue lock, persistence."""

from issue_vitality.infrastructure.adapters.keyed_lock import KeyedAsyncLock
from issue_vitality.infrastructure.adapters.system_time_authority import (
    SystemTimeAuthority,
)

__all__: list[str] = ["KeyedAsyncLock", "SystemTimeAuthority"]
