"""
Tests for the token registry and its read/write lock
"""
import threading
import uuid
from pathlib import Path

from quickdrop.registry import ReadWriteLock, Registry


def run_together(target, count):
    """Start count threads on target behind a barrier; return their results"""
    barrier = threading.Barrier(count)
    results = [None] * count

    def worker(i):
        barrier.wait()
        results[i] = target(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    return results


class TestRegistry:

    def test_insert_then_lookup(self, registry, clock):
        entry = registry.insert('/tmp/blob', filename='a.txt', size=3)

        assert registry.lookup(entry.token) == entry
        assert entry.location == Path('/tmp/blob')
        assert entry.created_at == clock.now
        assert entry.filename == 'a.txt'
        assert entry.size == 3
        assert entry.token in registry
        assert len(registry) == 1

    def test_tokens_are_random_uuids(self, registry):
        entry = registry.insert('/tmp/blob')
        parsed = uuid.UUID(entry.token)
        assert parsed.version == 4
        assert str(parsed) == entry.token

    def test_lookup_unknown_token(self, registry):
        assert registry.lookup('missing') is None
        assert 'missing' not in registry

    def test_lookup_does_not_mutate(self, registry):
        entry = registry.insert('/tmp/blob')
        for _ in range(3):
            registry.lookup(entry.token)
        assert registry.snapshot() == [(entry.token, entry)]

    def test_remove_returns_entry_once(self, registry):
        entry = registry.insert('/tmp/blob')
        assert registry.remove(entry.token) == entry
        assert registry.remove(entry.token) is None
        assert registry.lookup(entry.token) is None

    def test_racing_removes_have_one_winner(self, registry):
        entry = registry.insert('/tmp/blob')
        results = run_together(lambda i: registry.remove(entry.token), 16)
        winners = [r for r in results if r is not None]
        assert winners == [entry]

    def test_concurrent_inserts_are_all_kept(self, registry):
        entries = run_together(lambda i: registry.insert(f'/tmp/blob-{i}'), 50)
        tokens = {e.token for e in entries}
        assert len(tokens) == 50
        assert len(registry) == 50
        for e in entries:
            assert registry.lookup(e.token) == e

    def test_snapshot_is_a_copy(self, registry):
        first = registry.insert('/tmp/one')
        snap = registry.snapshot()
        registry.insert('/tmp/two')
        registry.remove(first.token)
        assert snap == [(first.token, first)]


class TestClaims:

    def test_only_one_claim_wins(self, registry):
        entry = registry.insert('/tmp/blob')
        results = run_together(lambda i: registry.claim(entry.token), 16)
        assert [r for r in results if r is not None] == [entry]
        assert registry.is_claimed(entry.token)

    def test_claimed_entry_still_visible_to_lookup(self, registry):
        entry = registry.insert('/tmp/blob')
        registry.claim(entry.token)
        assert registry.lookup(entry.token) == entry

    def test_claim_unknown_token(self, registry):
        assert registry.claim('missing') is None

    def test_release_allows_new_claim(self, registry):
        entry = registry.insert('/tmp/blob')
        registry.claim(entry.token)
        registry.release(entry.token)
        assert registry.claim(entry.token) == entry

    def test_skip_claimed_leaves_entry(self, registry):
        entry = registry.insert('/tmp/blob')
        registry.claim(entry.token)
        assert registry.remove(entry.token, skip_claimed=True) is None
        assert registry.lookup(entry.token) == entry
        assert registry.remove(entry.token) == entry
        assert not registry.is_claimed(entry.token)


class TestReadWriteLock:

    def test_readers_share(self):
        lock = ReadWriteLock()
        second_in = threading.Event()

        def reader():
            with lock.read_locked():
                second_in.set()

        with lock.read_locked():
            t = threading.Thread(target=reader)
            t.start()
            assert second_in.wait(2)
        t.join(2)

    def test_writer_waits_for_reader(self):
        lock = ReadWriteLock()
        writer_in = threading.Event()

        def writer():
            with lock.write_locked():
                writer_in.set()

        with lock.read_locked():
            t = threading.Thread(target=writer)
            t.start()
            assert not writer_in.wait(0.2)
        assert writer_in.wait(2)
        t.join(2)

    def test_reader_waits_for_writer(self):
        lock = ReadWriteLock()
        reader_in = threading.Event()

        def reader():
            with lock.read_locked():
                reader_in.set()

        with lock.write_locked():
            t = threading.Thread(target=reader)
            t.start()
            assert not reader_in.wait(0.2)
        assert reader_in.wait(2)
        t.join(2)

    def test_writers_are_exclusive(self):
        lock = ReadWriteLock()
        inside = []
        overlaps = []

        def writer(i):
            with lock.write_locked():
                if inside:
                    overlaps.append(i)
                inside.append(i)
                threading.Event().wait(0.01)
                inside.remove(i)

        run_together(writer, 8)
        assert overlaps == []
