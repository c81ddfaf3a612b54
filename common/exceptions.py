"""Custom exception classes for chunk location lookups."""

from typing import Optional


class ChunkStorageError(Exception):
    """
    Base exception class for all chunk location errors.

    Every failure raised while fetching a chunk map is one of its subclasses,
    with the underlying cause chained.
    """
    pass


class TransportError(ChunkStorageError):
    """
    Raised when the metadata endpoint cannot be reached, times out, or answers
    with a status other than 200.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(ChunkStorageError):
    """
    Raised when the chunk map document is malformed or incomplete.
    """

    def __init__(self, message: str, tag: Optional[str] = None, attribute: Optional[str] = None):
        super().__init__(message)
        self.tag = tag
        self.attribute = attribute


class IdentityResolutionError(ChunkStorageError):
    """
    Raised when the numeric identity (inode) or size of a file cannot be determined.
    """
    pass


class PreconditionError(ValueError):
    """
    Raised when a requested byte range is invalid or extends past the end of the file.
    """
    pass
