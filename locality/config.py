"""Configuration management for the chunk locality service."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_BLOCKSIZE_MB,
    DEFAULT_ENDPOINT,
    DEFAULT_MOUNT_POINT,
    DEFAULT_REPLICATION,
    MAX_CONNECTIONS,
    READ_TIMEOUT_SECONDS,
)
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.chunk-locality' / 'config.json'


class Config:
    """Manages locality configuration stored in a JSON file."""

    DEFAULT_CONFIG = {
        "endpoint": os.environ.get("CHUNK_LOCATOR_ENDPOINT", DEFAULT_ENDPOINT),
        "mount_point": os.environ.get("CHUNK_LOCATOR_MOUNT_POINT", DEFAULT_MOUNT_POINT),
        "connect_timeout": CONNECT_TIMEOUT_SECONDS,
        "read_timeout": READ_TIMEOUT_SECONDS,
        "max_connections": MAX_CONNECTIONS,
        "default_blocksize_mb": DEFAULT_BLOCKSIZE_MB,
        "default_replication": DEFAULT_REPLICATION,
        "filesystems": {},
    }

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.chunk-locality/config.json)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.data = self._load()

    def _defaults(self) -> dict:
        config = self.DEFAULT_CONFIG.copy()
        config['filesystems'] = {}
        return config

    def _load(self) -> dict:
        """
        Load configuration from file, falling back to defaults.

        A file that cannot be decoded is copied to a .json.bak backup and
        the defaults are used instead.

        Returns:
            Configuration dictionary
        """
        config = self._defaults()
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Invalid config file {self.config_path}: {e}; backing up to {backup_path}")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config file: {copy_error}")
            return config

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_path}: top level is not an object")
            return config

        config.update(data)
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.data, f, indent=2)

    def get_endpoint(self) -> str:
        """
        Get the chunk map REST endpoint.

        Returns:
            Endpoint URL (e.g., "http://localhost:14149/mproxy/map_obj")
        """
        return self.data.get('endpoint', DEFAULT_ENDPOINT)

    def set_endpoint(self, endpoint: str) -> None:
        self.data['endpoint'] = endpoint

    def get_timeouts(self) -> dict:
        """
        Get transport timeouts in seconds.

        Returns:
            Dictionary with 'connect' and 'read'
        """
        return {
            'connect': self.data.get('connect_timeout', CONNECT_TIMEOUT_SECONDS),
            'read': self.data.get('read_timeout', READ_TIMEOUT_SECONDS),
        }

    def get_max_connections(self) -> int:
        return self.data.get('max_connections', MAX_CONNECTIONS)

    def get_mount_point(self) -> str:
        """
        Get the local mount point of the storage filesystems.

        Returns:
            Mount point path (defaults to /net)
        """
        return self.data.get('mount_point', DEFAULT_MOUNT_POINT)

    def _filesystem_setting(self, vfs_name: Optional[str], key: str):
        if not vfs_name:
            return None
        return self.data.get('filesystems', {}).get(vfs_name, {}).get(key)

    def get_blocksize(self, vfs_name: Optional[str] = None) -> int:
        """
        Get the block size in bytes for a virtual filesystem.

        Args:
            vfs_name: Virtual filesystem name, or None for the default

        Returns:
            Block size in bytes
        """
        blocksize_mb = self._filesystem_setting(vfs_name, 'blocksize_mb')
        if blocksize_mb is None:
            blocksize_mb = self.data.get('default_blocksize_mb', DEFAULT_BLOCKSIZE_MB)
        return int(blocksize_mb) * 1024 * 1024

    def get_replication(self, vfs_name: Optional[str] = None) -> int:
        """
        Get the replication factor for a virtual filesystem.

        Args:
            vfs_name: Virtual filesystem name, or None for the default

        Returns:
            Replication factor
        """
        replication = self._filesystem_setting(vfs_name, 'replication')
        if replication is None:
            replication = self.data.get('default_replication', DEFAULT_REPLICATION)
        return int(replication)
