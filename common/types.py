"""Shared data type definitions (ReplicaDescriptor, ChunkDescriptor, ChunkLocationRecord, etc.)."""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class ReplicaDescriptor:
    """
    One physical storage node holding a copy of a chunk.
    """
    node_name: str
    address: str
    enabled: bool = True
    up: bool = True

    @property
    def is_serviceable(self) -> bool:
        """A replica can serve data only when it is both up and enabled."""
        return self.up and self.enabled


@total_ordering
@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Contiguous byte-range segment of a file.

    Equality and hashing consider only offset and length: two descriptors
    are equal when they describe the same segment of the file, whatever
    replica assignment they carry. Ordering is by offset.
    """
    offset: int
    length: int
    replica_ids: Tuple[int, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if self.offset < 0:
            raise ValueError(f"Chunk offset must be non-negative, got {self.offset}")
        if self.length <= 0:
            raise ValueError(f"Chunk length must be positive, got {self.length}")

    def __lt__(self, other: 'ChunkDescriptor') -> bool:
        if not isinstance(other, ChunkDescriptor):
            return NotImplemented
        return self.offset < other.offset

    @property
    def end(self) -> int:
        """Exclusive end byte of the segment."""
        return self.offset + self.length


@dataclass(frozen=True)
class ReplicaSlot:
    """A replica paired with the logical replica slot (volume id) it fills."""
    replica_id: int
    node: ReplicaDescriptor


@dataclass(frozen=True)
class ChunkLocationRecord:
    """
    A chunk together with the storage nodes serving it.

    file_length is the size of the whole file, repeated on every record of
    a chunk map.
    """
    chunk: ChunkDescriptor
    slots: Tuple[ReplicaSlot, ...]
    file_length: int

    def __post_init__(self):
        slot_ids = tuple(slot.replica_id for slot in self.slots)
        if slot_ids != tuple(self.chunk.replica_ids):
            raise ValueError(
                f"Replica ids {list(self.chunk.replica_ids)} do not match "
                f"replica slots {list(slot_ids)} for chunk at offset {self.chunk.offset}"
            )

    @classmethod
    def from_slots(
        cls,
        offset: int,
        length: int,
        slots: Iterable[ReplicaSlot],
        file_length: int
    ) -> 'ChunkLocationRecord':
        """
        Build a record whose chunk descriptor carries the slot replica ids.

        Args:
            offset: Start byte of the chunk within the file
            length: Chunk size in bytes
            slots: Replica slots in server order
            file_length: Total size of the file

        Returns:
            ChunkLocationRecord instance
        """
        slots = tuple(slots)
        chunk = ChunkDescriptor(
            offset=offset,
            length=length,
            replica_ids=tuple(slot.replica_id for slot in slots)
        )
        return cls(chunk=chunk, slots=slots, file_length=file_length)

    @property
    def offset(self) -> int:
        return self.chunk.offset

    @property
    def length(self) -> int:
        return self.chunk.length

    @property
    def end(self) -> int:
        return self.chunk.end

    @property
    def replicas(self) -> Tuple[ReplicaDescriptor, ...]:
        return tuple(slot.node for slot in self.slots)

    @property
    def replica_ids(self) -> Tuple[int, ...]:
        return self.chunk.replica_ids

    def serviceable_hosts(self) -> List[str]:
        """Node names of replicas that are up and enabled, in server order."""
        return [slot.node.node_name for slot in self.slots if slot.node.is_serviceable]


@dataclass(frozen=True)
class BlockLocation:
    """
    One segment of a resolved byte range and the hosts able to serve it.
    """
    offset: int
    length: int
    hosts: Tuple[str, ...] = ()
