"""Shared pytest fixtures for all tests."""

import pytest

from common.types import ChunkLocationRecord, ReplicaDescriptor, ReplicaSlot
from locality.config import Config


def make_record(offset, length, hosts, file_length=300, start_vid=1):
    """
    Build a chunk location record with one live replica per host name.

    Args:
        offset: Chunk offset
        length: Chunk length
        hosts: Node names, in server order
        file_length: Total file size
        start_vid: Replica id of the first host

    Returns:
        ChunkLocationRecord instance
    """
    slots = [
        ReplicaSlot(replica_id=start_vid + i, node=ReplicaDescriptor(name, f"10.0.0.{i + 1}"))
        for i, name in enumerate(hosts)
    ]
    return ChunkLocationRecord.from_slots(offset, length, slots, file_length)


def numeric_address(address):
    """Address resolver that leaves addresses unchanged."""
    return address


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .chunk-locality directory
    """
    config_dir = tmp_path / '.chunk-locality'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance pointing at a test endpoint.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.set_endpoint('http://test/mproxy/map_obj')
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file standing in for a file on the storage mount.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample file
    """
    file_path = tmp_path / 'data.bin'
    file_path.write_bytes(b'x' * 300)
    return file_path


@pytest.fixture
def three_chunk_map():
    """Chunk map of a 300-byte file split into three 100-byte chunks."""
    return [
        make_record(0, 100, ['sn-a1', 'sn-a2']),
        make_record(100, 100, ['sn-b1', 'sn-b2']),
        make_record(200, 100, ['sn-c1', 'sn-c2']),
    ]


@pytest.fixture
def chunk_map_xml():
    """A well-formed chunk map document with three chunks."""
    return b"""<?xml version="1.0"?>
<chunk_list>
  <chunk offset="0" chunk_size="100">
    <map>
      <copy ip_addr="10.10.2.200" name="sn1" snid="1" vid="1" />
      <copy ip_addr="10.10.2.201" name="sn2" snid="2" vid="3" />
    </map>
  </chunk>
  <chunk offset="100" chunk_size="100">
    <map>
      <copy ip_addr="10.10.2.202" name="sn3" snid="3" vid="2" />
    </map>
  </chunk>
  <chunk offset="200" chunk_size="100">
    <map>
      <copy ip_addr="10.10.2.200" name="sn1" snid="1" vid="1" />
      <copy ip_addr="10.10.2.202" name="sn3" snid="3" vid="2" />
      <copy ip_addr="10.10.2.201" name="sn2" snid="2" vid="3" />
    </map>
  </chunk>
</chunk_list>
"""
