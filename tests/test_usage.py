"""Tests for the usage ledger."""

from __future__ import annotations

import threading

from storeagent.config import MemoryConfigStore
from storeagent.providers.base import Usage
from storeagent.usage import USAGE_KEY, UsageEntry, UsageLedger


def test_two_calls_accumulate(ledger):
    ledger.record("openai", Usage(100, 20, 120))
    snapshot = ledger.record("openai", Usage(50, 5, 55))

    entry = ledger.entry("openai")
    assert entry == UsageEntry(prompt_tokens=150, completion_tokens=25, total_tokens=175, requests=2)
    assert snapshot == entry


def test_days_and_providers_are_separate(ledger):
    ledger.record("openai", Usage(1, 1, 2), day="2026-03-13")
    ledger.record("openai", Usage(3, 1, 4))
    ledger.record("google", Usage(5, 5, 10))

    assert list(ledger.for_provider("openai")) == ["2026-03-13", "2026-03-14"]
    assert ledger.totals("openai") == UsageEntry(4, 2, 6, 2)
    assert ledger.providers() == ["google", "openai"]
    assert ledger.entry("anthropic") == UsageEntry()


def test_snapshots_are_copies(ledger):
    snapshot = ledger.record("xai", Usage(1, 1, 2))
    snapshot.requests = 99

    assert ledger.entry("xai").requests == 1


def test_ledger_persists_to_store(store):
    ledger = UsageLedger(store, today=lambda: "2026-01-02")
    ledger.record("deepseek", Usage(7, 3, 10))

    assert store.get(USAGE_KEY) == {"deepseek": {"2026-01-02": {
        "prompt_tokens": 7, "completion_tokens": 3, "total_tokens": 10, "requests": 1,
    }}}

    reloaded = UsageLedger(store, today=lambda: "2026-01-02")
    reloaded.record("deepseek", Usage(1, 0, 1))
    assert reloaded.entry("deepseek").requests == 2


def test_malformed_stored_usage_is_skipped():
    store = MemoryConfigStore({USAGE_KEY: {
        "openai": {"2026-01-01": {"requests": 3, "bogus": 1}},
        "google": "not a mapping",
    }})

    ledger = UsageLedger(store)

    assert ledger.for_provider("openai")["2026-01-01"].requests == 3
    assert ledger.for_provider("google") == {}


def test_concurrent_records_are_not_lost():
    ledger = UsageLedger(today=lambda: "2026-01-01")

    def worker():
        for _ in range(200):
            ledger.record("openai", Usage(1, 1, 2))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert ledger.entry("openai").requests == 1600
    assert ledger.entry("openai").total_tokens == 3200
