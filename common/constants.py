"""Project-wide constants (wire names, default endpoint, block sizes)."""

MAP_OBJ_PATH: str = "mproxy/map_obj"
DEFAULT_ENDPOINT: str = f"http://localhost:14149/{MAP_OBJ_PATH}"
INODE_QUERY_PARAM: str = "inum"

CHUNK_TAG: str = "chunk"
COPY_TAG: str = "copy"
ATTR_OFFSET: str = "offset"
ATTR_CHUNK_SIZE: str = "chunk_size"
ATTR_IP_ADDR: str = "ip_addr"
ATTR_NAME: str = "name"
ATTR_VID: str = "vid"

CONNECT_TIMEOUT_SECONDS: float = 10.0
READ_TIMEOUT_SECONDS: float = 30.0
MAX_CONNECTIONS: int = 10
STREAM_CHUNK_BYTES: int = 8192

DEFAULT_FILESYSTEM: str = "filesystem"
DEFAULT_MOUNT_POINT: str = "/net"
DEFAULT_BLOCKSIZE_MB: int = 64  # 64 MiB, the storage default chunk size
DEFAULT_REPLICATION: int = 2
