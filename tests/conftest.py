"""
Shared fixtures for detection tests.
Creates isolated temporary directories with controlled test files.
"""
import os
import hashlib
import threading
from pathlib import Path
from typing import Dict, List

import pytest

from rupes.core.exceptions import FileReadError
from rupes.core.models import CandidatePath


def make_candidates(*paths: Path) -> List[CandidatePath]:
    """CandidatePath list for existing files, sized from disk."""
    return [CandidatePath(path=str(p), size=p.stat().st_size) for p in paths]


@pytest.fixture
def temp_dir(tmp_path):
    """Isolated temporary directory, cleaned up by pytest."""
    return tmp_path


@pytest.fixture
def hello_files(temp_dir) -> Dict[str, Path]:
    """
    a.txt "hello", b.txt "hello", c.txt "world", d.txt "hi!":
    one size bucket of three, one singleton, exactly one duplicate pair.
    """
    files = {}
    for name, content in (("a", b"hello"), ("b", b"hello"), ("c", b"world"), ("d", b"hi!")):
        files[name] = temp_dir / f"{name}.txt"
        files[name].write_bytes(content)
    return files


@pytest.fixture
def test_tree(temp_dir) -> Path:
    """
    Directory tree with duplicates at several depths:

    test/
        a-file.txt            "duplicate content A\\n"  (dup of b-file, .dot-dir file)
        b-file.specialTXT     "duplicate content A\\n"
        unique.txt            "only one of these"
        .dot-dir/file-in-dot-dir.txt   "duplicate content A\\n"
        a-dir/c-file.txt      "another duplicate, longer B\\n"
        a-dir/d-file.txt      "another duplicate, longer B\\n"
        a-dir/.dot-file       "another duplicate, longer B\\n"
    """
    root = temp_dir / "test"
    (root / ".dot-dir").mkdir(parents=True)
    (root / "a-dir").mkdir()

    content_a = b"duplicate content A\n"
    content_b = b"another duplicate, longer B\n"

    (root / "a-file.txt").write_bytes(content_a)
    (root / "b-file.specialTXT").write_bytes(content_a)
    (root / "unique.txt").write_bytes(b"only one of these")
    (root / ".dot-dir" / "file-in-dot-dir.txt").write_bytes(content_a)
    (root / "a-dir" / "c-file.txt").write_bytes(content_b)
    (root / "a-dir" / "d-file.txt").write_bytes(content_b)
    (root / "a-dir" / ".dot-file").write_bytes(content_b)
    return root


class FakeHasher:
    """
    ChunkedHasher stand-in: digests file content with SHA-256, records calls,
    and fails for paths listed in `failing`.
    """

    def __init__(self, failing=(), delay_for=None):
        self.failing = set(failing)
        self.delay_for = delay_for or {}
        self.calls: List[str] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def hash_file(self, path, algorithm, on_chunk=None, stopped_flag=None):
        with self._lock:
            self.calls.append(path)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            delay = self.delay_for.get(path)
            if delay:
                threading.Event().wait(delay)
            if path in self.failing:
                raise FileReadError(path, "permission denied")
            with open(path, "rb") as f:
                data = f.read()
            if on_chunk and data:
                on_chunk(len(data))
            return hashlib.sha256(data).digest()
        finally:
            with self._lock:
                self.active -= 1

    def hash_stream(self, stream, algorithm, on_chunk=None, stopped_flag=None):
        return hashlib.sha256(stream.read()).digest()


@pytest.fixture
def fake_hasher():
    return FakeHasher()


def group_path_sets(groups) -> set:
    """Groups as a set of frozensets of paths, for order-insensitive comparison."""
    return {frozenset(g.paths) for g in groups}


@pytest.fixture
def chdir_tmp(temp_dir):
    previous = os.getcwd()
    os.chdir(temp_dir)
    try:
        yield temp_dir
    finally:
        os.chdir(previous)
