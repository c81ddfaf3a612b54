"""CLI entry point: print the chunk map or block locations of a file."""

import argparse
import os
import sys
import uuid
from pathlib import Path
from typing import List, Optional

from common.exceptions import ChunkStorageError
from common.logging_config import setup_logging
from common.types import BlockLocation, ChunkLocationRecord
from locality.config import Config
from locality.filesystem import ChunkLocalityService
from locality.http_chunk_locator import HTTPChunkLocator
from locality.range_resolver import check_range, resolve_range
from locality.schemas import (
    BlockLocationResponse,
    BlockLocationsResponse,
    ChunkLocationResponse,
    ChunkMapResponse,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunk-locality",
        description="List the chunks of a file and the storage nodes holding them."
    )
    parser.add_argument("path", help="Local file on the storage mount, or a storage path when --fs is given")
    parser.add_argument("--fs", default=None, help="Filesystem URI (psdfs://<vfs>@<control-node>) to translate PATH")
    parser.add_argument("--start", type=int, default=None, help="First byte of the range to resolve")
    parser.add_argument("--length", type=int, default=None, help="Number of bytes to resolve (default: to end of file)")
    parser.add_argument("--endpoint", default=None, help="Chunk map REST endpoint URL")
    parser.add_argument("--config", type=Path, default=None, help="Path to JSON config file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def format_chunk_map(records: List[ChunkLocationRecord]) -> str:
    lines = []
    for i, record in enumerate(records):
        ids = ' '.join(str(replica_id) for replica_id in record.replica_ids)
        line = f"[{i}] offset: {record.offset} length: {record.length} ids: {ids} : filelength {record.file_length}"
        for j, node in enumerate(record.replicas):
            line += (
                f" <{j}> node: {node.node_name} address: {node.address}"
                f" enabled: {str(node.enabled).lower()} up: {str(node.up).lower()}"
            )
        lines.append(line)
    return '\n'.join(lines) if lines else "No chunks found."


def format_block_locations(locations: List[BlockLocation]) -> str:
    lines = []
    for location in locations:
        hosts = ', '.join(location.hosts) if location.hosts else '-'
        lines.append(f"offset: {location.offset} length: {location.length} hosts: {hosts}")
    return '\n'.join(lines) if lines else "No block locations."


def run(args: argparse.Namespace) -> str:
    """Execute one lookup and return the text to print."""
    config = Config(args.config)
    if args.endpoint:
        config.set_endpoint(args.endpoint)

    if args.fs:
        service = ChunkLocalityService(config, args.fs)
        local_file = service.path_to_file(args.path)
    else:
        local_file = Path(args.path)

    with HTTPChunkLocator(config) as locator:
        if args.start is None and args.length is None:
            records = locator.get_chunk_locations(local_file)
            if args.json:
                return ChunkMapResponse(
                    path=str(local_file),
                    chunks=[ChunkLocationResponse.from_record(record) for record in records]
                ).model_dump_json(indent=2)
            return format_chunk_map(records)

        file_length = locator.get_file_size(local_file)
        start = args.start or 0
        length = args.length if args.length is not None else file_length - start
        check_range(start, length, file_length)
        records = locator.get_chunk_locations(local_file)

    locations = resolve_range(records, start, length)
    if args.json:
        return BlockLocationsResponse(
            path=str(local_file),
            start=start,
            length=length,
            locations=[BlockLocationResponse.from_location(location) for location in locations]
        ).model_dump_json(indent=2)
    return format_block_locations(locations)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for CLI."""
    args = build_parser().parse_args(argv)
    log_level = 'DEBUG' if args.debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('locality', log_level=log_level, correlation_id=uuid.uuid4().hex[:8])

    try:
        output = run(args)
    except (ChunkStorageError, ValueError) as e:
        logger.error(f"Lookup failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
