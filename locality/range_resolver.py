"""
Pure mapping from a chunk map and a byte range to block locations.

No IO; deterministic for identical inputs.
"""

from typing import List, Sequence

from common.exceptions import PreconditionError
from common.logging_config import get_logger
from common.types import BlockLocation, ChunkLocationRecord

logger = get_logger(__name__)


def check_range(start: int, length: int, file_length: int) -> None:
    """
    Validate a byte range against the file length.

    Raises:
        PreconditionError: If start or length is negative or the range ends
            past the end of the file
    """
    if start < 0:
        raise PreconditionError(f"start must be non-negative, got {start}")
    if length < 0:
        raise PreconditionError(f"length must be non-negative, got {length}")
    if start + length > file_length:
        raise PreconditionError(
            f"start+len must be less or equal than file length "
            f"(start={start}, len={length}, file length={file_length})"
        )


def resolve_range(
    chunk_map: Sequence[ChunkLocationRecord],
    start: int,
    length: int
) -> List[BlockLocation]:
    """
    Compute the block locations covering [start, start + length).

    Records are walked once in order. Records ending at or before the cursor
    are passed over. A record starting after the cursor leaves a gap: the
    uncovered bytes get no block location and the cursor jumps to the record.

    Args:
        chunk_map: Chunk location records sorted by ascending offset
        start: First byte of the range
        length: Number of bytes in the range

    Returns:
        Block locations in ascending offset order, each with the names of the
        up and enabled replicas of its chunk

    Raises:
        PreconditionError: If the range is invalid for the file length
    """
    if chunk_map:
        check_range(start, length, chunk_map[0].file_length)
    elif start < 0 or length < 0:
        check_range(start, length, start + length)

    locations: List[BlockLocation] = []
    begin = start
    remaining = length

    for record in chunk_map:
        if remaining <= 0:
            break
        if record.end <= begin:
            continue
        if begin < record.offset:
            gap = record.offset - begin
            logger.warning(f"Chunk map has no chunk for bytes [{begin}, {record.offset}); leaving them uncovered")
            if gap >= remaining:
                remaining = 0
                break
            begin = record.offset
            remaining -= gap

        segment_length = min(record.end - begin, remaining)
        locations.append(
            BlockLocation(offset=begin, length=segment_length, hosts=tuple(record.serviceable_hosts()))
        )
        begin += segment_length
        remaining -= segment_length

    if remaining > 0:
        logger.warning(f"Chunk map ends before byte {begin + remaining}; bytes [{begin}, {begin + remaining}) uncovered")

    return locations
