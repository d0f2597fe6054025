from __future__ import annotations

"""
Unit tests for the readers/writer lock and concurrent index access.
"""

import threading
import time

import pytest

from pathmanifest.core.index.locking import ReadWriteLock
from pathmanifest.core.index.path_index import PathManifestIndex
from pathmanifest.domain.manifest_models import NodeKind


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = []
    barrier = threading.Barrier(3, timeout=5)

    def reader():
        with lock.read():
            inside.append(1)
            barrier.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert len(inside) == 3


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []
    writer_holding = threading.Event()

    def writer():
        with lock.write():
            writer_holding.set()
            time.sleep(0.1)
            events.append("writer-done")

    def reader():
        writer_holding.wait(timeout=5)
        with lock.read():
            events.append("reader")

    w = threading.Thread(target=writer)
    r = threading.Thread(target=reader)
    w.start()
    r.start()
    w.join(timeout=5)
    r.join(timeout=5)

    assert events == ["writer-done", "reader"]


def test_concurrent_updates_keep_aggregates_consistent():
    index = PathManifestIndex.from_entries([("seed/base.zig", 1)])
    n_threads, per_thread = 4, 50

    def worker(tid):
        for i in range(per_thread):
            index.insert((f"t{tid}/f{i}.zig", 2))
            index.total_lines()
        for i in range(0, per_thread, 2):
            index.remove(f"t{tid}/f{i}.zig")

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    expected = 1 + n_threads * (per_thread // 2) * 2
    assert index.total_lines() == expected
    assert sum(c.lines for c in index.list_children()) == expected
    for child in index.list_children():
        if child.kind is NodeKind.DIRECTORY and child.name.startswith("t"):
            assert child.lines == (per_thread // 2) * 2


def test_rebuild_from_another_thread_invalidates_running_search():
    index = PathManifestIndex.from_entries([("a/b.zig", 10), ("a/c.zig", 5), ("d.zig", 3)])
    results = index.search(lambda segments: True)
    assert next(results) == ("a", "b.zig")

    rebuild = threading.Thread(target=index.build, args=([("x.zig", 1)],))
    rebuild.start()
    rebuild.join(timeout=5)

    with pytest.raises(RuntimeError):
        list(results)


def test_search_created_before_rebuild_walks_the_new_tree():
    index = PathManifestIndex.from_entries([("old.zig", 1)])
    results = index.search(lambda segments: True)

    rebuild = threading.Thread(target=index.build, args=([("new/a.zig", 2), ("new/b.zig", 3)],))
    rebuild.start()
    rebuild.join(timeout=5)

    assert list(results) == [("new", "a.zig"), ("new", "b.zig")]


def test_searches_never_mix_trees_during_rebuilds():
    tree_a = [(f"a/f{i}.zig", 1) for i in range(20)]
    tree_b = [(f"b/f{i}.zig", 1) for i in range(20)]
    paths_a = {tuple(p.split("/")) for p, _ in tree_a}
    paths_b = {tuple(p.split("/")) for p, _ in tree_b}

    index = PathManifestIndex.from_entries(tree_a)
    stop = threading.Event()
    mixed = []

    def rebuilder():
        flip = False
        while not stop.is_set():
            index.build(tree_b if flip else tree_a)
            flip = not flip

    def searcher():
        for _ in range(200):
            try:
                seen = set(index.search(lambda segments: True))
            except RuntimeError:
                continue
            if seen != paths_a and seen != paths_b:
                mixed.append(seen)

    writer = threading.Thread(target=rebuilder)
    readers = [threading.Thread(target=searcher) for _ in range(3)]
    writer.start()
    for r in readers:
        r.start()
    for r in readers:
        r.join(timeout=30)
    stop.set()
    writer.join(timeout=5)

    assert mixed == []
