"""
Filesystem-facing entry point for block location lookups.

Storage URIs have the form ``psdfs://<vfs>@<control-node>/<path>``. Each
virtual filesystem is mounted locally at ``<mount>/<control-node>/<vfs>``,
and relative paths live below the user's home directory ``/user/<name>``.

For example ``psdfs://storageVFS@10.200.1.2/input/test.txt`` maps to
``/net/10.200.1.2/storageVFS/input/test.txt``.
"""

import getpass
from pathlib import Path, PurePosixPath
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlsplit

from common.constants import DEFAULT_FILESYSTEM
from common.exceptions import ChunkStorageError
from common.logging_config import get_logger
from common.types import BlockLocation, ChunkLocationRecord
from locality.chunk_locator import ChunkLocator
from locality.config import Config
from locality.http_chunk_locator import HTTPChunkLocator
from locality.range_resolver import check_range, resolve_range

logger = get_logger(__name__)

LocatorFactory = Callable[[Config], ChunkLocator]


def parse_authority(uri: str) -> Tuple[str, str]:
    """
    Split the authority of a storage URI into virtual filesystem and host.

    Args:
        uri: URI such as "psdfs://vfs@host/path"

    Returns:
        Tuple of (vfs_name, control_node); vfs_name is the default
        filesystem when the authority carries no '@'
    """
    authority = urlsplit(uri).netloc
    vfs_name, separator, control_node = authority.partition('@')
    if not separator:
        return DEFAULT_FILESYSTEM, authority
    return vfs_name, control_node


class ChunkLocalityService:
    """Resolves storage paths to local files, chunk maps and block locations."""

    def __init__(
        self,
        config: Config,
        uri: str,
        user: Optional[str] = None,
        locator_factory: Optional[LocatorFactory] = None
    ):
        """
        Args:
            config: Configuration instance
            uri: Filesystem URI naming the default vfs and control node
            user: User whose home directory anchors relative paths
            locator_factory: Builds the chunk locator; defaults to HTTPChunkLocator
        """
        vfs_name, control_node = parse_authority(uri)
        if not control_node:
            raise ValueError(f"No control node host in filesystem URI: {uri}")
        self.config = config
        self.uri = uri
        self.vfs_name = vfs_name or DEFAULT_FILESYSTEM
        self.control_node = control_node
        self.user = user or getpass.getuser()
        self.locator_factory = locator_factory or HTTPChunkLocator
        logger.debug(f"Initialized locality service [vfs={self.vfs_name}, control_node={control_node}]")

    @property
    def home_directory(self) -> str:
        return f"/user/{self.user}"

    @property
    def mount_path(self) -> Path:
        return Path(self.config.get_mount_point()) / self.control_node / self.vfs_name

    def mount_point_exists(self) -> bool:
        return self.mount_path.exists()

    def vfs_for_path(self, path: str) -> str:
        if urlsplit(path).netloc:
            return parse_authority(path)[0]
        return self.vfs_name

    def path_to_file(self, path: str) -> Path:
        """
        Translate a storage path to its file on the local mount.

        Args:
            path: Absolute or relative path, optionally a full storage URI

        Returns:
            Local filesystem path
        """
        parsed = urlsplit(path)
        if parsed.netloc:
            vfs_name, control_node = parse_authority(path)
        else:
            vfs_name, control_node = self.vfs_name, self.control_node

        file_path = PurePosixPath(parsed.path or '.')
        if not file_path.is_absolute():
            file_path = PurePosixPath(self.home_directory) / file_path

        mount = Path(self.config.get_mount_point())
        return mount / control_node / vfs_name / file_path.relative_to('/')

    def get_blocksize(self, path: str) -> int:
        return self.config.get_blocksize(self.vfs_for_path(path))

    def get_replication(self, path: str) -> int:
        return self.config.get_replication(self.vfs_for_path(path))

    def new_chunk_locator(self) -> ChunkLocator:
        logger.debug(f"Creating chunk locator for endpoint {self.config.get_endpoint()}")
        return self.locator_factory(self.config)

    def get_chunk_map(self, path: str) -> List[ChunkLocationRecord]:
        """
        Fetch the chunk map of a storage path.

        Raises:
            ChunkStorageError: If the chunk map cannot be obtained
        """
        local_file = self.path_to_file(path)
        with self.new_chunk_locator() as locator:
            try:
                return locator.get_chunk_locations(local_file)
            except ChunkStorageError as e:
                logger.error(f"Cannot fetch chunk locations for {path} from {locator}: {e}")
                raise

    def get_file_block_locations(
        self,
        path: str,
        start: int,
        length: int,
        file_length: Optional[int] = None
    ) -> List[BlockLocation]:
        """
        Compute block locations for a byte range of a storage path.

        Args:
            path: Storage path or URI
            start: First byte of the range
            length: Number of bytes in the range
            file_length: Known file size; read from the local mount when None

        Returns:
            Block locations covering the range

        Raises:
            PreconditionError: If the range ends past the end of the file
            ChunkStorageError: If the chunk map cannot be obtained
        """
        local_file = self.path_to_file(path)
        with self.new_chunk_locator() as locator:
            if file_length is None:
                file_length = locator.get_file_size(local_file)
            check_range(start, length, file_length)
            try:
                chunk_map = locator.get_chunk_locations(local_file)
            except ChunkStorageError as e:
                logger.error(f"Cannot fetch chunk locations for {path} from {locator}: {e}")
                raise

        locations = resolve_range(chunk_map, start, length)
        logger.debug(f"Fetched {len(locations)} block location(s) for {path}")
        return locations
