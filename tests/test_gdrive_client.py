"""
Unit tests for drive_mover.gdrive_client module.

Tests cover:
- Connect and disconnect
- list_files for team drives (single paginated query) and shared folders (walk)
- get_file
- update kwargs for team and shared addressing
- Retry logic with rate limiting (HTTP 429)
- Error translation (404 -> FileNotFoundError, 403 -> PermissionError)
"""

from unittest.mock import MagicMock, patch

import pytest
from conftest import DRIVE_ID, make_meta

from drive_mover.config import DriveConfig
from drive_mover.gdrive_client import DriveClient
from drive_mover.metadata_index import FOLDER_MIME
from drive_mover.remote_client import RemoteDrive


@pytest.fixture
def mock_drive_service():
    """Creates a mocked Google Drive API service."""
    return MagicMock()


@pytest.fixture
def client(drive_config, conn_config, mock_drive_service):
    """Team drive client with a mocked service."""
    return DriveClient(drive_config, conn_config, service=mock_drive_service)


@pytest.fixture
def shared_client(conn_config, mock_drive_service):
    """Shared folder client with a mocked service."""
    cfg = DriveConfig(drive_id="shared_root", drive_kind="shared")
    return DriveClient(cfg, conn_config, service=mock_drive_service)


def _make_http_error(status_code, reason="error"):
    """Helper to create a mock HttpError."""
    from googleapiclient.errors import HttpError

    resp = MagicMock()
    resp.status = status_code
    resp.reason = reason
    return HttpError(resp, b"error body")


class TestConnect:
    """Tests for connect/disconnect."""

    @patch("drive_mover.gdrive_client.build")
    @patch("drive_mover.gdrive_client.AuthorizedHttp")
    @patch("drive_mover.gdrive_client.httplib2.Http")
    @patch("drive_mover.gdrive_client.load_credentials")
    def test_connect_builds_service(
        self, mock_load, mock_http, mock_authed, mock_build, drive_config, conn_config
    ):
        mock_creds = MagicMock()
        mock_load.return_value = mock_creds

        c = DriveClient(drive_config, conn_config)
        c.connect()

        mock_load.assert_called_once_with(None)
        mock_build.assert_called_once_with(
            "drive", "v3", http=mock_authed.return_value, cache_discovery=False
        )
        assert c._connected is True

    @patch("drive_mover.gdrive_client.build")
    @patch("drive_mover.gdrive_client.AuthorizedHttp")
    @patch("drive_mover.gdrive_client.httplib2.Http")
    @patch("drive_mover.gdrive_client.load_credentials")
    def test_connect_sets_request_timeout(
        self, mock_load, mock_http, mock_authed, mock_build, drive_config, conn_config
    ):
        """Every request carries the configured timeout so a hung call is aborted."""
        c = DriveClient(drive_config, conn_config)
        c.connect()

        mock_http.assert_called_once_with(timeout=conn_config.timeout_seconds)
        mock_authed.assert_called_once_with(
            mock_load.return_value, http=mock_http.return_value
        )

    @patch("drive_mover.gdrive_client.load_credentials")
    def test_connect_raises_on_auth_failure(self, mock_load, drive_config, conn_config):
        mock_load.side_effect = Exception("auth failed")

        c = DriveClient(drive_config, conn_config)
        with pytest.raises(ConnectionError, match="Google Drive connection failed"):
            c.connect()

    @patch("drive_mover.gdrive_client.load_credentials")
    def test_connect_missing_key_file_propagates(self, mock_load, drive_config, conn_config):
        mock_load.side_effect = FileNotFoundError("Credentials file not found")

        c = DriveClient(drive_config, conn_config)
        with pytest.raises(FileNotFoundError):
            c.connect()

    def test_disconnect_clears_state(self, client):
        client.disconnect()

        assert client._service is None
        assert client._connected is False

    def test_satisfies_remote_drive(self, client):
        assert isinstance(client, RemoteDrive)


class TestListFiles:
    """Tests for drive listing."""

    def test_team_drive_single_query(self, client, mock_drive_service):
        mock_drive_service.files().list().execute.return_value = {
            "files": [make_meta("f1", "Doc", parents=[DRIVE_ID])],
        }

        files = client.list_files()

        assert [f["id"] for f in files] == ["f1"]
        call_kwargs = mock_drive_service.files().list.call_args[1]
        assert call_kwargs["q"] == "trashed=false"
        assert call_kwargs["corpora"] == "drive"
        assert call_kwargs["driveId"] == DRIVE_ID
        assert call_kwargs["includeItemsFromAllDrives"] is True
        assert call_kwargs["supportsAllDrives"] is True

    def test_pagination_followed(self, client, mock_drive_service):
        mock_list = MagicMock()
        mock_list.execute.side_effect = [
            {"files": [make_meta("f1", "One")], "nextPageToken": "page2"},
            {"files": [make_meta("f2", "Two")]},
        ]
        mock_drive_service.files().list.return_value = mock_list

        files = client.list_files()

        assert [f["id"] for f in files] == ["f1", "f2"]
        assert mock_drive_service.files().list.call_args[1]["pageToken"] == "page2"

    def test_shared_folder_walk(self, shared_client, mock_drive_service):
        """Shared folders are listed one folder at a time."""
        responses = {
            "'shared_root' in parents and trashed=false": {
                "files": [
                    make_meta("sub", "Sub", FOLDER_MIME, ["shared_root"]),
                    make_meta("doc", "Doc", parents=["shared_root"]),
                ]
            },
            "'sub' in parents and trashed=false": {
                "files": [make_meta("deep", "Deep", parents=["sub"])]
            },
        }

        def fake_list(**kwargs):
            request = MagicMock()
            request.execute.return_value = responses[kwargs["q"]]
            return request

        mock_drive_service.files().list.side_effect = fake_list

        files = shared_client.list_files()

        assert sorted(f["id"] for f in files) == ["deep", "doc", "sub"]
        for call in mock_drive_service.files().list.call_args_list:
            assert "driveId" not in call[1]


class TestGetFile:
    def test_get_file(self, client, mock_drive_service):
        mock_drive_service.files().get().execute.return_value = make_meta("f1", "Doc")

        meta = client.get_file("f1")

        assert meta["name"] == "Doc"
        call_kwargs = mock_drive_service.files().get.call_args[1]
        assert call_kwargs["fileId"] == "f1"
        assert call_kwargs["supportsAllDrives"] is True

    def test_get_file_not_found(self, client, mock_drive_service):
        mock_drive_service.files().get().execute.side_effect = _make_http_error(404)

        with pytest.raises(FileNotFoundError):
            client.get_file("missing")


class TestUpdate:
    """Tests for the parent update."""

    def test_team_options_map_to_all_drives(self, client, mock_drive_service):
        client.update(
            {
                "fileId": "f1",
                "addParents": "dest",
                "removeParents": "src",
                "corpora": "teamDrive",
                "teamDriveId": DRIVE_ID,
            }
        )

        call_kwargs = mock_drive_service.files().update.call_args[1]
        assert call_kwargs["fileId"] == "f1"
        assert call_kwargs["addParents"] == "dest"
        assert call_kwargs["removeParents"] == "src"
        assert call_kwargs["supportsAllDrives"] is True
        assert "corpora" not in call_kwargs
        assert "teamDriveId" not in call_kwargs

    def test_shared_options(self, shared_client, mock_drive_service):
        shared_client.update({"fileId": "f1", "addParents": "dest", "removeParents": "src"})

        call_kwargs = mock_drive_service.files().update.call_args[1]
        assert call_kwargs["addParents"] == "dest"
        assert "supportsAllDrives" not in call_kwargs

    def test_update_returns_resource(self, client, mock_drive_service):
        mock_drive_service.files().update().execute.return_value = {"id": "f1", "parents": ["dest"]}

        result = client.update({"fileId": "f1", "addParents": "dest"})

        assert result["parents"] == ["dest"]


class TestRetryLogic:
    """Tests for retry and error handling."""

    def test_http_403_raises_permission_error(self, client, mock_drive_service):
        mock_drive_service.files().update().execute.side_effect = _make_http_error(403)

        with pytest.raises(PermissionError):
            client.update({"fileId": "f1", "addParents": "dest"})

    def test_http_429_retries(self, client, mock_drive_service):
        mock_get = mock_drive_service.files().get()
        mock_get.execute.side_effect = [_make_http_error(429), make_meta("f1", "Doc")]

        assert client.get_file("f1")["id"] == "f1"

    def test_http_500_retries_then_fails(self, client, mock_drive_service):
        mock_drive_service.files().update().execute.side_effect = _make_http_error(500)

        with pytest.raises(OSError, match="failed"):
            client.update({"fileId": "f1", "addParents": "dest"})

        assert mock_drive_service.files().update().execute.call_count == 3

    def test_generic_error_retried(self, client, mock_drive_service):
        mock_get = mock_drive_service.files().get()
        mock_get.execute.side_effect = [TimeoutError("slow"), make_meta("f1", "Doc")]

        assert client.get_file("f1")["id"] == "f1"
