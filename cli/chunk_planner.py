"""Chunk threshold and byte-range planning for large uploads."""

import math
from dataclasses import dataclass
from typing import List

from common.constants import MIN_CHUNK_SIZE_BYTES
from common.sizes import parse_size


@dataclass(frozen=True)
class ChunkSpec:
    """Byte range ``[start, end)`` of one chunk."""

    index: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def chunk_threshold(configured_size: str) -> int:
    """
    Effective chunk size: the configured size, but never below 1 MiB.

    An unparseable setting parses to 0 and therefore falls back to the floor.
    """
    return max(MIN_CHUNK_SIZE_BYTES, parse_size(configured_size))


def needs_chunking(file_size: int, chunk_size: int) -> bool:
    """Files strictly larger than the chunk size are sent in chunks."""
    return file_size > chunk_size


def total_chunks(file_size: int, chunk_size: int) -> int:
    return math.ceil(file_size / chunk_size)


def plan_chunks(file_size: int, chunk_size: int) -> List[ChunkSpec]:
    """
    Split a file into consecutive chunk ranges.

    Args:
        file_size: Size of the file in bytes
        chunk_size: Chunk size in bytes (> 0)

    Returns:
        ChunkSpecs covering ``[0, file_size)`` in order; every chunk but the
        last is exactly ``chunk_size`` long
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    return [
        ChunkSpec(index=i, start=i * chunk_size, end=min((i + 1) * chunk_size, file_size))
        for i in range(total_chunks(file_size, chunk_size))
    ]
