"""
Shared pytest fixtures for drive-mover tests.
"""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from drive_mover.cache import HtmlCache
from drive_mover.config import CacheConfig, ConnectionConfig, DriveConfig, LogConfig
from drive_mover.metadata_index import FOLDER_MIME, MetadataIndex
from drive_mover.move import MoveOrchestrator
from drive_mover.remote_client import RemoteDrive

DRIVE_ID = "0AdriveRootXXXXXXXXXXXXX"
FILE_ID = "xxxxxhz2Km1y-dFv3AVeUD4fkIdh6syCL8NDV2NxxxxxiTe74"
DESTINATION_ID = "xxxxxz3-SzaA2bosRlItwcP8GEP5xxxxx3nSxT"
TRASH_ID = "trash_folder_id"
DOC_MIME = "application/vnd.google-apps.document"

SAMPLE_HTML = "<html><h1>Test file </h1></html>"
OLD_PATH = "/article-21-2/article-afia"
NEW_PATH = "/article-10-1/team-folder-1/article-afia"


def make_meta(file_id, name, mime_type=DOC_MIME, parents=None, modified="2024-06-15T10:30:00.000Z"):
    """Helper to create a Drive API file resource."""
    meta = {
        "id": file_id,
        "name": name,
        "mimeType": mime_type,
        "modifiedTime": modified,
    }
    if parents is not None:
        meta["parents"] = parents
    return meta


@pytest.fixture
def drive_listing() -> list[dict]:
    """A small drive: two article folders, a nested team folder and a trash folder."""
    return [
        make_meta("folder_21_2", "Article 21 2", FOLDER_MIME, [DRIVE_ID]),
        make_meta(FILE_ID, "Article Afia", DOC_MIME, ["folder_21_2"]),
        make_meta("folder_10_1", "Article 10 1", FOLDER_MIME, [DRIVE_ID]),
        make_meta(DESTINATION_ID, "Team Folder 1", FOLDER_MIME, ["folder_10_1"]),
        make_meta("readme_id", "Readme", DOC_MIME, ["folder_10_1"]),
        make_meta("nested_id", "Nested", FOLDER_MIME, [DESTINATION_ID]),
        make_meta("nested_doc", "Nested Doc", DOC_MIME, [DESTINATION_ID]),
        make_meta(TRASH_ID, "Trash", FOLDER_MIME, [DRIVE_ID]),
        make_meta("loose_id", "Loose Page", DOC_MIME, [DRIVE_ID]),
        make_meta("orphan_id", "Orphan", DOC_MIME),
    ]


@pytest.fixture
def index(drive_listing) -> MetadataIndex:
    """MetadataIndex built from the sample listing."""
    idx = MetadataIndex(DRIVE_ID, pretty_name="Team Library")
    idx.rebuild(drive_listing)
    return idx


@pytest.fixture
def html_cache() -> HtmlCache:
    return HtmlCache(ttl_seconds=60, max_entries=100)


@pytest.fixture
def mock_drive() -> MagicMock:
    """Remote drive whose update call succeeds."""
    drive = MagicMock(spec=RemoteDrive)
    drive.update.return_value = {"id": FILE_ID, "parents": [DESTINATION_ID]}
    return drive


@pytest.fixture
def mover(mock_drive, html_cache, index) -> Generator[MoveOrchestrator, None, None]:
    orchestrator = MoveOrchestrator(mock_drive, html_cache, index, DRIVE_ID, remote_timeout=5)
    yield orchestrator
    orchestrator.close()


@pytest.fixture
def drive_config() -> DriveConfig:
    return DriveConfig(drive_id=DRIVE_ID, pretty_name="Team Library", drive_kind="team")


@pytest.fixture
def conn_config() -> ConnectionConfig:
    """Connection config with no retry delay for tests."""
    return ConnectionConfig(timeout_seconds=30, retry_attempts=3, retry_delay_seconds=0)


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(ttl_seconds=60, max_entries=100)


@pytest.fixture
def log_config(tmp_path: Path) -> LogConfig:
    return LogConfig(level="DEBUG", file=str(tmp_path / "test.log"), console=False)


@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Creates a temporary INI configuration file for config tests.
    """
    config_content = """[drive]
drive_id = 0AconfigDriveXXXXXXXXXX
pretty_name = Newsroom Library
drive_kind = team
credentials_file = /path/to/key.json

[cache]
ttl_seconds = 120
max_entries = 50

[connection]
timeout_seconds = 45
retry_attempts = 5
retry_delay_seconds = 2

[logging]
level = DEBUG
file = test.log
console = false
"""
    config_path = tmp_path / "test_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path


@pytest.fixture
def minimal_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Creates a minimal INI configuration file with only required fields.
    """
    config_content = """[drive]
drive_id = 0AminimalXXXXXXXXXXXXXX
"""
    config_path = tmp_path / "minimal_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path
