"""Base class for chunk map sources."""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Union

from common.exceptions import IdentityResolutionError
from common.logging_config import get_logger
from common.types import ChunkLocationRecord

logger = get_logger(__name__)


class ChunkLocator(ABC):
    """
    Determines the chunks of a file and the storage nodes holding them.

    Subclasses decide how the chunk map is fetched; callers only rely on
    resolve_chunk_map() and the lifecycle methods.
    """

    @abstractmethod
    def resolve_chunk_map(self, file_identity: int, file_length: int) -> List[ChunkLocationRecord]:
        """
        Fetch the full chunk map of a file.

        Args:
            file_identity: Numeric identity (inode) of the file
            file_length: Total file size in bytes, copied onto every record

        Returns:
            Chunk location records in the order the source produced them

        Raises:
            ChunkStorageError: If the chunk map cannot be obtained
        """

    @abstractmethod
    def release(self) -> None:
        """Release resources held by the locator."""

    def close(self) -> None:
        """Release the locator, logging instead of raising on failure."""
        try:
            self.release()
        except Exception as e:
            logger.debug(f"Ignoring error while closing {self}: {e}")

    def __enter__(self) -> 'ChunkLocator':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def get_inode(self, path: Union[str, Path]) -> int:
        """
        Return the inode number of a local file.

        Raises:
            IdentityResolutionError: If the file cannot be inspected
        """
        try:
            return os.stat(path).st_ino
        except OSError as e:
            raise IdentityResolutionError(f"Inode determination failed for {path}: {e}") from e

    def get_file_size(self, path: Union[str, Path]) -> int:
        """
        Return the size in bytes of a local file.

        Raises:
            IdentityResolutionError: If the file cannot be inspected
        """
        try:
            return os.path.getsize(path)
        except OSError as e:
            raise IdentityResolutionError(f"File size determination failed for {path}: {e}") from e

    def get_chunk_locations(self, path: Union[str, Path]) -> List[ChunkLocationRecord]:
        """
        Fetch the chunk map of a local file from its inode and size.

        Args:
            path: Local path of the file on the storage mount

        Returns:
            Chunk location records for the file
        """
        inode = self.get_inode(path)
        file_length = self.get_file_size(path)
        logger.debug(f"Resolving chunk map for {path} [inode={inode}, length={file_length}]")
        return self.resolve_chunk_map(inode, file_length)
