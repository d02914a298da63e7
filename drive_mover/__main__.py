"""
drive-mover - Main Entry Point

CLI for inspecting a drive's folder tree and moving files between folders.
"""

import argparse
import logging
import sys
from pathlib import Path

from .cache import HtmlCache, next_modified
from .config import load_config
from .errors import MoveValidationError
from .folder_tree import get_folders, iter_folders
from .gdrive_client import DriveClient
from .logger import setup_logging
from .metadata_index import MetadataIndex
from .move import MoveOrchestrator

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="drive-mover - Move Google Drive files and keep the page cache in step",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  drive-mover folders --config config.ini
  drive-mover move 1AbCfile 1XyZfolder --kind team --config config.ini
  drive-mover move 1AbCfile 1XyZfolder --html page.html --drive-id 0ABCdrive
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_common(sub):
        sub.add_argument("--config", help="Path to configuration file")
        sub.add_argument("--drive-id", help="Drive ID (team drive or shared root folder)")
        sub.add_argument("--credentials", help="Path to service account key JSON")
        sub.add_argument("--verbose", action="store_true", help="Enable debug logging")

    folders_parser = subparsers.add_parser("folders", help="Print the drive's folder tree")
    add_common(folders_parser)

    move_parser = subparsers.add_parser("move", help="Move a file to another folder")
    move_parser.add_argument("file_id", help="ID of the file to move")
    move_parser.add_argument("destination_id", help="ID of the destination folder")
    move_parser.add_argument(
        "--kind",
        choices=["team", "shared"],
        default=None,
        help="Drive addressing mode (default: from config)",
    )
    move_parser.add_argument("--html", help="Rendered page to seed the cache with before moving")
    add_common(move_parser)

    return parser.parse_args(argv)


def _load(args):
    config = load_config(
        config_path=args.config,
        drive_id=args.drive_id,
        drive_kind=getattr(args, "kind", None),
        credentials_file=args.credentials,
        debug=args.verbose,
    )
    setup_logging(config.logging)

    client = DriveClient(config.drive, config.connection)
    client.connect()

    index = MetadataIndex(config.drive.drive_id, config.drive.pretty_name)
    index.rebuild(client.list_files())
    return config, client, index


def cmd_folders(args):
    """Print the folder tree, one folder per line."""
    _, client, index = _load(args)
    try:
        for depth, node in iter_folders(get_folders(index)[0]):
            print(f"{'  ' * depth}{node.pretty_name}  [{node.id}]  {node.path}")
        return 0
    finally:
        client.disconnect()


def cmd_move(args):
    """Move one file and print where it now lives."""
    config, client, index = _load(args)
    cache = HtmlCache(config.cache.ttl_seconds, config.cache.max_entries)
    mover = MoveOrchestrator(
        client,
        cache,
        index,
        config.drive.drive_id,
        remote_timeout=config.connection.timeout_seconds,
    )

    try:
        record = index.get_meta(args.file_id)
        if args.html and record is not None:
            html = Path(args.html).read_text(encoding="utf-8")
            cache.add(record.id, next_modified(), record.path, html)

        result = mover.move_file(args.file_id, args.destination_id, config.drive.drive_kind)
        if isinstance(result, MoveValidationError):
            print(f"[ERROR] {result}")
            return 1

        print(f"[OK] {result}")
        return 0
    finally:
        mover.close()
        client.disconnect()


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    commands = {"folders": cmd_folders, "move": cmd_move}
    handler = commands.get(args.command)
    if handler is None:
        print("Usage: drive-mover <command> [options]")
        print()
        print("Commands:")
        print("  folders  Print the drive's folder tree")
        print("  move     Move a file to another folder")
        return 1

    try:
        return handler(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"[ERROR] {e}")
        return 1
    except ConnectionError as e:
        print(f"[ERROR] Could not connect to Google Drive: {e}")
        return 1
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        print(f"[ERROR] Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
