"""Tests for the chunk map data model."""

import pytest

from common.types import (
    BlockLocation,
    ChunkDescriptor,
    ChunkLocationRecord,
    ReplicaDescriptor,
    ReplicaSlot,
)


def test_replica_equality_covers_all_fields():
    """Test that replicas differing in any field are not equal."""
    base = ReplicaDescriptor('sn1', '10.0.0.1', enabled=True, up=True)

    assert base == ReplicaDescriptor('sn1', '10.0.0.1', True, True)
    assert hash(base) == hash(ReplicaDescriptor('sn1', '10.0.0.1', True, True))
    assert base != ReplicaDescriptor('sn2', '10.0.0.1', True, True)
    assert base != ReplicaDescriptor('sn1', '10.0.0.2', True, True)
    assert base != ReplicaDescriptor('sn1', '10.0.0.1', False, True)
    assert base != ReplicaDescriptor('sn1', '10.0.0.1', True, False)


def test_replica_is_immutable():
    """Test that replica fields cannot be reassigned."""
    replica = ReplicaDescriptor('sn1', '10.0.0.1')

    with pytest.raises(AttributeError):
        replica.up = False


def test_replica_serviceable_requires_up_and_enabled():
    """Test serviceability combinations."""
    assert ReplicaDescriptor('a', '1', enabled=True, up=True).is_serviceable
    assert not ReplicaDescriptor('a', '1', enabled=False, up=True).is_serviceable
    assert not ReplicaDescriptor('a', '1', enabled=True, up=False).is_serviceable


def test_chunk_equality_ignores_replica_ids():
    """Test that chunks describing the same segment are equal."""
    first = ChunkDescriptor(0, 100, (1, 2))
    second = ChunkDescriptor(0, 100, (3,))

    assert first == second
    assert hash(first) == hash(second)
    assert first != ChunkDescriptor(0, 200, (1, 2))
    assert first != ChunkDescriptor(100, 100, (1, 2))


def test_chunks_sort_by_offset():
    """Test that chunk descriptors order by offset."""
    chunks = [ChunkDescriptor(200, 50), ChunkDescriptor(0, 100), ChunkDescriptor(100, 100)]

    assert [c.offset for c in sorted(chunks)] == [0, 100, 200]
    assert ChunkDescriptor(0, 100) < ChunkDescriptor(100, 100)
    assert ChunkDescriptor(100, 100) >= ChunkDescriptor(0, 100)


def test_chunk_rejects_invalid_geometry():
    """Test that negative offsets and empty chunks are rejected."""
    with pytest.raises(ValueError):
        ChunkDescriptor(-1, 100)
    with pytest.raises(ValueError):
        ChunkDescriptor(0, 0)


def test_record_from_slots_keeps_ids_and_replicas_aligned():
    """Test that from_slots derives replica ids from the slots."""
    slots = [
        ReplicaSlot(3, ReplicaDescriptor('sn1', '10.0.0.1')),
        ReplicaSlot(1, ReplicaDescriptor('sn2', '10.0.0.2')),
    ]

    record = ChunkLocationRecord.from_slots(100, 50, slots, 1000)

    assert record.chunk == ChunkDescriptor(100, 50)
    assert record.replica_ids == (3, 1)
    assert [r.node_name for r in record.replicas] == ['sn1', 'sn2']
    assert record.offset == 100
    assert record.length == 50
    assert record.end == 150
    assert record.file_length == 1000


def test_record_rejects_mismatched_replica_ids():
    """Test that a descriptor whose ids disagree with the slots is rejected."""
    slots = (ReplicaSlot(1, ReplicaDescriptor('sn1', '10.0.0.1')),)

    with pytest.raises(ValueError, match="do not match"):
        ChunkLocationRecord(ChunkDescriptor(0, 10, (1, 2)), slots, 10)


def test_record_serviceable_hosts_preserve_order():
    """Test that only up and enabled replicas are reported, in order."""
    slots = [
        ReplicaSlot(1, ReplicaDescriptor('sn1', '10.0.0.1', enabled=True, up=True)),
        ReplicaSlot(2, ReplicaDescriptor('sn2', '10.0.0.2', enabled=True, up=False)),
        ReplicaSlot(3, ReplicaDescriptor('sn3', '10.0.0.3', enabled=True, up=True)),
        ReplicaSlot(4, ReplicaDescriptor('sn4', '10.0.0.4', enabled=False, up=True)),
    ]

    record = ChunkLocationRecord.from_slots(0, 10, slots, 10)

    assert record.serviceable_hosts() == ['sn1', 'sn3']


def test_block_location_defaults_to_no_hosts():
    """Test BlockLocation default host tuple."""
    location = BlockLocation(0, 10)

    assert location.hosts == ()
