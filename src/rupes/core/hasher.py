"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Full-content hashing with bounded memory.

Files are read in fixed-size chunks fed into an incremental accumulator, so a
one-byte file and a multi-gigabyte file use the same working memory. The
algorithm is chosen at runtime; every implementation exposes the same
update()/digest() interface.
"""

import hashlib
import logging
from typing import BinaryIO, Callable, Dict, Optional

import xxhash

from rupes.core.exceptions import FileReadError, HashingCancelled
from rupes.core.interfaces import ChunkCallback, ChunkedHasher, DigestAccumulator, StoppedFlag
from rupes.core.models import DEFAULT_CHUNK_SIZE, HashAlgorithm

logger = logging.getLogger(__name__)


_ACCUMULATOR_FACTORIES: Dict[HashAlgorithm, Callable[[], DigestAccumulator]] = {
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.XXH128: xxhash.xxh3_128,
}


def new_accumulator(algorithm: HashAlgorithm) -> DigestAccumulator:
    """Create an empty incremental digest for the selected algorithm."""
    try:
        factory = _ACCUMULATOR_FACTORIES[algorithm]
    except KeyError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm!r}")
    return factory()


class ChunkedHasherImpl(ChunkedHasher):
    """
    Computes content digests by streaming a file chunk by chunk.
    Holds no per-file state, so one instance is safe to share across threads.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError("Chunk size must be at least 1 byte")
        self.chunk_size = chunk_size

    def hash_stream(
        self,
        stream: BinaryIO,
        algorithm: HashAlgorithm,
        on_chunk: Optional[ChunkCallback] = None,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> bytes:
        """
        Reads the stream to EOF and returns the digest.
        OSError from read() propagates to the caller untouched.
        """
        accumulator = new_accumulator(algorithm)
        while True:
            if stopped_flag and stopped_flag():
                raise HashingCancelled()
            chunk = stream.read(self.chunk_size)
            if not chunk:
                break
            accumulator.update(chunk)
            if on_chunk:
                on_chunk(len(chunk))
        return accumulator.digest()

    def hash_file(
        self,
        path: str,
        algorithm: HashAlgorithm,
        on_chunk: Optional[ChunkCallback] = None,
        stopped_flag: Optional[StoppedFlag] = None
    ) -> bytes:
        try:
            with open(path, 'rb') as f:
                digest = self.hash_stream(f, algorithm, on_chunk=on_chunk, stopped_flag=stopped_flag)
        except OSError as e:
            logger.debug(f"Failed to hash {path}: {e}")
            raise FileReadError.from_os_error(path, e) from e

        logger.debug(f"Hashed {path} ({algorithm.value}: {digest.hex()})")
        return digest
