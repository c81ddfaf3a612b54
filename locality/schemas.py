"""Pydantic schemas for JSON output of chunk maps and block locations."""

from typing import List

from pydantic import BaseModel

from common.types import BlockLocation, ChunkLocationRecord


class ReplicaResponse(BaseModel):
    """One replica of a chunk."""
    replica_id: int
    node_name: str
    address: str
    enabled: bool
    up: bool


class ChunkLocationResponse(BaseModel):
    """A chunk and its replicas."""
    offset: int
    length: int
    file_length: int
    replicas: List[ReplicaResponse]

    @classmethod
    def from_record(cls, record: ChunkLocationRecord) -> 'ChunkLocationResponse':
        return cls(
            offset=record.offset,
            length=record.length,
            file_length=record.file_length,
            replicas=[
                ReplicaResponse(
                    replica_id=slot.replica_id,
                    node_name=slot.node.node_name,
                    address=slot.node.address,
                    enabled=slot.node.enabled,
                    up=slot.node.up,
                )
                for slot in record.slots
            ],
        )


class BlockLocationResponse(BaseModel):
    """A resolved range segment and its serving hosts."""
    offset: int
    length: int
    hosts: List[str]

    @classmethod
    def from_location(cls, location: BlockLocation) -> 'BlockLocationResponse':
        return cls(offset=location.offset, length=location.length, hosts=list(location.hosts))


class ChunkMapResponse(BaseModel):
    """Chunk map of one file."""
    path: str
    chunks: List[ChunkLocationResponse]


class BlockLocationsResponse(BaseModel):
    """Block locations for a byte range of one file."""
    path: str
    start: int
    length: int
    locations: List[BlockLocationResponse]
