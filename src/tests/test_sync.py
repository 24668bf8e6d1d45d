from __future__ import annotations

import os

import pytest

from wallabag_tui.cache import EntryCache
from wallabag_tui.errors import CacheError, DecodeError, TransportError
from wallabag_tui.messages import CountReceived, EntriesLoaded, ErrorKind, ErrorOccurred
from wallabag_tui.sync import Synchronizer, required_api_calls

from conftest import FakeGateway, make_entry


@pytest.fixture
def cache(config):
    return EntryCache(config.cache_path)


@pytest.fixture
def synchronizer(config, gateway, cache):
    return Synchronizer(config, gateway, cache)


def three_pages(gateway: FakeGateway):
    gateway.total = 120
    gateway.pages = {
        1: [make_entry(i) for i in range(1, 56)],
        2: [make_entry(i) for i in range(56, 111)],
        3: [make_entry(i) for i in range(111, 121)],
    }


@pytest.mark.parametrize(
    "total, per_page, calls",
    [(120, 55, 3), (55, 55, 1), (56, 55, 2), (1, 55, 1), (0, 55, 1)],
)
def test_required_api_calls(total, per_page, calls):
    assert required_api_calls(total, per_page) == calls


def test_required_api_calls_rejects_empty_pages():
    with pytest.raises(ValueError):
        required_api_calls(10, 0)


def test_start_counts_remote_entries(synchronizer, gateway):
    gateway.total = 120
    assert synchronizer.start(use_cache=True) == CountReceived(120)


def test_start_count_failure_is_an_error(synchronizer, gateway):
    gateway.count_error = TransportError("down")
    msg = synchronizer.start()
    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.TRANSPORT


def test_start_count_decode_failure(synchronizer, gateway):
    gateway.count_error = DecodeError("no total")
    msg = synchronizer.start()
    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.DECODE


def test_fetch_entries_pages_sequentially_and_caches(synchronizer, gateway, cache):
    three_pages(gateway)
    msg = synchronizer.fetch_entries(120, 55, "updated", "asc")

    assert isinstance(msg, EntriesLoaded)
    assert [e.id for e in msg.entries] == list(range(1, 121))
    assert msg.cache_warning == ""
    assert gateway.calls == [
        ("fetch_page", 55, 1, "updated", "asc"),
        ("fetch_page", 55, 2, "updated", "asc"),
        ("fetch_page", 55, 3, "updated", "asc"),
    ]
    assert cache.read() == list(msg.entries)


def test_page_failure_aborts_and_leaves_cache_untouched(synchronizer, gateway, cache):
    cache.write([make_entry(900)])
    with open(cache.path, "rb") as f:
        before = f.read()

    three_pages(gateway)
    gateway.failing_pages = {2}
    msg = synchronizer.fetch_entries(120, 55, "created", "desc")

    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.TRANSPORT
    # page 3 is never requested once page 2 failed
    assert [c[2] for c in gateway.calls] == [1, 2]
    with open(cache.path, "rb") as f:
        assert f.read() == before


def test_cache_hit_skips_remote_protocol(synchronizer, gateway, cache):
    cached = [make_entry(1), make_entry(2)]
    cache.write(cached)

    msg = synchronizer.start(use_cache=True)

    assert msg == EntriesLoaded(tuple(cached), from_cache=True)
    assert gateway.calls == []


def test_reload_bypasses_cache_contents(synchronizer, gateway, cache):
    cache.write([make_entry(1)])
    gateway.total = 3
    assert synchronizer.start(use_cache=False) == CountReceived(3)


def test_empty_cache_falls_through_to_count(synchronizer, gateway, cache):
    cache.write([])
    gateway.total = 7
    assert synchronizer.start(use_cache=True) == CountReceived(7)


def test_world_readable_cache_is_never_used(synchronizer, gateway, cache):
    cache.write([make_entry(1)])
    os.chmod(cache.path, 0o644)

    msg = synchronizer.start(use_cache=True)

    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.SECURITY
    assert gateway.calls == []


def test_gate_applies_to_reloads_too(synchronizer, gateway, cache):
    cache.write([make_entry(1)])
    os.chmod(cache.path, 0o640)
    msg = synchronizer.start(use_cache=False)
    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.SECURITY


def test_corrupt_cache_is_reported(synchronizer, cache):
    os.makedirs(os.path.dirname(cache.path), exist_ok=True)
    fd = os.open(cache.path, os.O_CREAT | os.O_WRONLY, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write("not json")
    msg = synchronizer.start(use_cache=True)
    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.CACHE


def test_cache_write_failure_keeps_fetched_entries(config, gateway):
    class BrokenCache(EntryCache):
        def write(self, entries):
            raise CacheError("disk full")

    gateway.pages = {1: [make_entry(1), make_entry(2)]}
    synchronizer = Synchronizer(config, gateway, BrokenCache(config.cache_path))

    msg = synchronizer.fetch_entries(2, 55, "created", "desc")

    assert isinstance(msg, EntriesLoaded)
    assert [e.id for e in msg.entries] == [1, 2]
    assert "disk full" in msg.cache_warning


def test_cache_with_bad_timestamp_is_a_cache_error(synchronizer, gateway, cache):
    os.makedirs(os.path.dirname(cache.path), exist_ok=True)
    fd = os.open(cache.path, os.O_CREAT | os.O_WRONLY, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write('{"entries": [{"id": 1, "title": "x", "created": "garbage"}]}')

    msg = synchronizer.start(use_cache=True)

    assert isinstance(msg, ErrorOccurred)
    assert msg.kind is ErrorKind.CACHE
    assert gateway.calls == []
