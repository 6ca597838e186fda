"""Usage ledger: per-provider, per-day token and request counters."""

from __future__ import annotations

import copy
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from storeagent.config import ConfigStore
    from storeagent.providers.base import Usage

USAGE_KEY = "api_usage"


@dataclass
class UsageEntry:
    """Counters for one provider on one day."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    requests: int = 0

    def add(self, other: UsageEntry) -> None:
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.total_tokens += other.total_tokens
        self.requests += other.requests


def _utc_today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


class UsageLedger:
    """Accumulates token usage after every successful chat call.

    When a ConfigStore is given, the ledger is loaded from and written back
    to it under ``api_usage`` as ``{provider: {YYYY-MM-DD: counters}}``.
    Updates are serialized with a lock so concurrent conversations can share
    one ledger.
    """

    def __init__(
        self,
        store: ConfigStore | None = None,
        today: Callable[[], str] = _utc_today,
    ):
        self.store = store
        self._today = today
        self._lock = threading.Lock()
        self._data: dict[str, dict[str, UsageEntry]] = {}
        if store is not None:
            self._load(store.get(USAGE_KEY) or {})

    def _load(self, raw: dict) -> None:
        for provider, days in raw.items():
            if not isinstance(days, dict):
                continue
            self._data[provider] = {
                day: UsageEntry(**{k: int(v) for k, v in counters.items()
                                   if k in UsageEntry.__dataclass_fields__})
                for day, counters in days.items()
                if isinstance(counters, dict)
            }

    def record(self, provider: str, usage: Usage, day: str | None = None) -> UsageEntry:
        """Add one request's usage. Returns a snapshot of the updated day entry."""
        day = day or self._today()
        delta = UsageEntry(
            prompt_tokens=int(usage.prompt_tokens),
            completion_tokens=int(usage.completion_tokens),
            total_tokens=int(usage.total_tokens),
            requests=1,
        )
        with self._lock:
            entry = self._data.setdefault(provider, {}).setdefault(day, UsageEntry())
            entry.add(delta)
            snapshot = copy.copy(entry)
            if self.store is not None:
                self.store.set(USAGE_KEY, self._serialize())
        return snapshot

    def entry(self, provider: str, day: str | None = None) -> UsageEntry:
        day = day or self._today()
        with self._lock:
            return copy.copy(self._data.get(provider, {}).get(day, UsageEntry()))

    def for_provider(self, provider: str) -> dict[str, UsageEntry]:
        """All days recorded for a provider, oldest first."""
        with self._lock:
            days = self._data.get(provider, {})
            return {day: copy.copy(days[day]) for day in sorted(days)}

    def totals(self, provider: str) -> UsageEntry:
        total = UsageEntry()
        for entry in self.for_provider(provider).values():
            total.add(entry)
        return total

    def providers(self) -> list[str]:
        with self._lock:
            return sorted(self._data)

    def _serialize(self) -> dict:
        return {
            provider: {day: asdict(entry) for day, entry in days.items()}
            for provider, days in self._data.items()
        }
