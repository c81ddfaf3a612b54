"""HTTP client fetching chunk maps from the metadata REST endpoint."""

import socket
import threading
import uuid
from typing import Dict, List, Optional, Tuple

import httpx

from common.constants import INODE_QUERY_PARAM, STREAM_CHUNK_BYTES
from common.exceptions import ProtocolError, TransportError
from common.logging_config import get_logger
from common.types import ChunkLocationRecord
from locality.chunk_locator import ChunkLocator
from locality.config import Config
from locality.map_parser import AddressResolver, parse_chunk_map

logger = get_logger(__name__)

_shared_clients: Dict[Tuple[float, float, int], httpx.Client] = {}
_shared_clients_lock = threading.Lock()


def build_client(config: Config) -> httpx.Client:
    """
    Create a pooled HTTP client tuned for chunk map lookups.

    Args:
        config: Configuration instance

    Returns:
        httpx.Client with bounded pool, connect timeout and TCP_NODELAY
    """
    timeouts = config.get_timeouts()
    transport = httpx.HTTPTransport(
        limits=httpx.Limits(max_connections=config.get_max_connections()),
        socket_options=[(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)],
    )
    return httpx.Client(
        transport=transport,
        timeout=httpx.Timeout(timeouts['read'], connect=timeouts['connect']),
        follow_redirects=True,
    )


def _client_key(config: Config) -> Tuple[float, float, int]:
    timeouts = config.get_timeouts()
    return (timeouts['connect'], timeouts['read'], config.get_max_connections())


def get_shared_client(config: Config) -> httpx.Client:
    """
    Return the process-wide pooled client for the config's tuning, creating it on first use.

    Clients are shared between configs with equal timeouts and pool size.
    """
    key = _client_key(config)
    with _shared_clients_lock:
        client = _shared_clients.get(key)
        if client is None or client.is_closed:
            client = build_client(config)
            _shared_clients[key] = client
            logger.debug(f"Created shared chunk map HTTP client connect={key[0]} read={key[1]} max_connections={key[2]}")
        return client


class HTTPChunkLocator(ChunkLocator):
    """Chunk locator backed by the map_obj REST interface."""

    def __init__(
        self,
        config: Config,
        session: Optional[httpx.Client] = None,
        resolve_address: AddressResolver = socket.gethostbyname
    ):
        """
        Initialize the locator.

        Args:
            config: Configuration instance providing the endpoint
            session: HTTP client to use; defaults to the shared pooled client
            resolve_address: Maps copy addresses to their numeric form
        """
        self.config = config
        self.endpoint = config.get_endpoint()
        self.session = session if session is not None else get_shared_client(config)
        self.resolve_address = resolve_address

    def resolve_chunk_map(self, file_identity: int, file_length: int) -> List[ChunkLocationRecord]:
        """
        Fetch and parse the chunk map for a file identity.

        Args:
            file_identity: Inode number of the file
            file_length: Total file size in bytes

        Returns:
            Chunk location records in the order the server sent them

        Raises:
            TransportError: On connection failure, timeout or non-200 status
            ProtocolError: If the response is not a valid chunk map
        """
        request_id = str(uuid.uuid4())
        params = {INODE_QUERY_PARAM: str(file_identity)}
        logger.debug(f"Fetching chunk map: GET {self.endpoint} inum={file_identity} [request_id={request_id}]")

        try:
            with self.session.stream('GET', self.endpoint, params=params) as response:
                if response.status_code != 200:
                    logger.warning(
                        f"Chunk map request rejected: GET {self.endpoint} status={response.status_code} [request_id={request_id}]"
                    )
                    # Leaving the block closes the stream without reading the body.
                    raise TransportError(
                        f"HTTP Status Code {response.status_code} for URL {response.url}",
                        status_code=response.status_code
                    )
                records = parse_chunk_map(
                    response.iter_bytes(chunk_size=STREAM_CHUNK_BYTES),
                    file_length,
                    self.resolve_address
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Chunk map request failed: {self.endpoint} error={e} [request_id={request_id}]")
            raise TransportError(f"Chunk map request to {self.endpoint} failed: {e}") from e
        except ProtocolError as e:
            logger.error(f"Invalid chunk map for inum={file_identity}: {e} [request_id={request_id}]")
            raise

        logger.debug(f"Fetched {len(records)} chunk location(s) for inum={file_identity} [request_id={request_id}]")
        return records

    def release(self) -> None:
        """Nothing to release per locator; the pooled client outlives it."""

    def __str__(self) -> str:
        return f"HTTPChunkLocator [endpoint={self.endpoint}]"
