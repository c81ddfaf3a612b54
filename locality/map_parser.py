"""
Streaming parser for chunk map documents.

The metadata endpoint answers with a document of the form::

    <chunk_list>
      <chunk offset="0" chunk_size="67108864">
        <map>
          <copy ip_addr="10.10.2.200" name="sn1" vid="1" />
          <copy ip_addr="10.10.2.201" name="sn2" vid="3" />
        </map>
      </chunk>
    </chunk_list>

A chunk has no end marker the parser relies on: its copies are collected
until the next chunk starts or the document ends, then flushed as one
ChunkLocationRecord.
"""

import socket
from typing import Callable, Dict, Iterable, List, Optional
from xml.etree import ElementTree

from common.constants import (
    ATTR_CHUNK_SIZE,
    ATTR_IP_ADDR,
    ATTR_NAME,
    ATTR_OFFSET,
    ATTR_VID,
    CHUNK_TAG,
    COPY_TAG,
)
from common.exceptions import ProtocolError
from common.logging_config import get_logger
from common.types import ChunkLocationRecord, ReplicaDescriptor, ReplicaSlot

logger = get_logger(__name__)

AddressResolver = Callable[[str], str]


def _local_name(tag: str) -> str:
    """Strip a '{namespace}' prefix from an element tag."""
    return tag.rsplit('}', 1)[-1]


def _required(attrib: Dict[str, str], tag: str, name: str) -> str:
    value = attrib.get(name)
    if value is None or not value.strip():
        raise ProtocolError(f"missing attribute {name} on <{tag}>", tag=tag, attribute=name)
    return value


def _required_int(attrib: Dict[str, str], tag: str, name: str) -> int:
    value = _required(attrib, tag, name)
    try:
        return int(value.strip())
    except ValueError as e:
        raise ProtocolError(
            f"attribute {name} on <{tag}> is not an integer: {value!r}",
            tag=tag,
            attribute=name
        ) from e


class ChunkMapBuilder:
    """
    Groups flat chunk/copy start-tag events into chunk location records.

    Holds one pending chunk at a time. start_chunk() flushes the previous
    one; finish() flushes the last one.
    """

    def __init__(self, file_length: int, resolve_address: AddressResolver = socket.gethostbyname):
        """
        Args:
            file_length: Total file size, stored on every record
            resolve_address: Maps a host name or address to its numeric address
        """
        self.file_length = file_length
        self.resolve_address = resolve_address
        self._records: List[ChunkLocationRecord] = []
        self._offset: Optional[int] = None
        self._length: Optional[int] = None
        self._slots: List[ReplicaSlot] = []
        self._finished = False

    def start_chunk(self, attrib: Dict[str, str]) -> None:
        """Begin a new chunk, flushing the pending one."""
        self._flush()
        offset = _required_int(attrib, CHUNK_TAG, ATTR_OFFSET)
        length = _required_int(attrib, CHUNK_TAG, ATTR_CHUNK_SIZE)
        if offset < 0:
            raise ProtocolError(f"negative chunk offset {offset}", tag=CHUNK_TAG, attribute=ATTR_OFFSET)
        if length <= 0:
            raise ProtocolError(
                f"non-positive chunk size {length} at offset {offset}",
                tag=CHUNK_TAG,
                attribute=ATTR_CHUNK_SIZE
            )
        self._offset = offset
        self._length = length

    def add_copy(self, attrib: Dict[str, str]) -> None:
        """Append a replica to the pending chunk."""
        ip_addr = _required(attrib, COPY_TAG, ATTR_IP_ADDR)
        name = _required(attrib, COPY_TAG, ATTR_NAME)
        vid = _required_int(attrib, COPY_TAG, ATTR_VID)

        if self._offset is None:
            raise ProtocolError(f"<{COPY_TAG}> for {name} appears outside of a <{CHUNK_TAG}>", tag=COPY_TAG)

        try:
            address = self.resolve_address(ip_addr)
        except (OSError, UnicodeError) as e:
            raise ProtocolError(
                f"cannot resolve address {ip_addr!r} of {name}: {e}",
                tag=COPY_TAG,
                attribute=ATTR_IP_ADDR
            ) from e

        # This protocol version does not report node health.
        node = ReplicaDescriptor(node_name=name, address=address, enabled=True, up=True)
        self._slots.append(ReplicaSlot(replica_id=vid, node=node))

    def handle_start(self, tag: str, attrib: Dict[str, str]) -> None:
        name = _local_name(tag)
        if name == CHUNK_TAG:
            self.start_chunk(attrib)
        elif name == COPY_TAG:
            self.add_copy(attrib)

    def _flush(self) -> None:
        if self._offset is None:
            return
        if self._slots:
            self._records.append(
                ChunkLocationRecord.from_slots(self._offset, self._length, self._slots, self.file_length)
            )
        else:
            logger.debug(f"Dropping chunk at offset {self._offset} without copies")
        self._offset = None
        self._length = None
        self._slots = []

    def finish(self) -> List[ChunkLocationRecord]:
        """Flush the last chunk and return all records in document order."""
        if not self._finished:
            self._flush()
            self._finished = True
        return list(self._records)


def parse_chunk_map(
    data: Iterable[bytes],
    file_length: int,
    resolve_address: AddressResolver = socket.gethostbyname
) -> List[ChunkLocationRecord]:
    """
    Parse a chunk map document incrementally.

    Args:
        data: Document bytes, in pieces as they arrive from the stream
        file_length: Total file size, stored on every record
        resolve_address: Maps a host name or address to its numeric address

    Returns:
        Chunk location records in document order

    Raises:
        ProtocolError: If the document is malformed, truncated or misses a
            required attribute
    """
    builder = ChunkMapBuilder(file_length, resolve_address)
    parser = ElementTree.XMLPullParser(events=('start', 'end'))
    root = None

    def drain() -> None:
        nonlocal root
        for event, element in parser.read_events():
            if event == 'start':
                if root is None:
                    root = element
                builder.handle_start(element.tag, element.attrib)
            elif _local_name(element.tag) == CHUNK_TAG and root is not None:
                # Drop finished chunks so the tree does not grow with the document.
                root.clear()

    try:
        for piece in data:
            if piece:
                parser.feed(piece)
                drain()
        parser.close()
        drain()
    except ElementTree.ParseError as e:
        raise ProtocolError(f"malformed chunk map document: {e}") from e

    return builder.finish()
