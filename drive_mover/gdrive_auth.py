"""
Google Drive credentials loading.

Uses a service account key file when one is configured, otherwise
Application Default Credentials. Token refresh is left to google-auth.
"""

import logging
from pathlib import Path

import google.auth
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Full drive access is needed to change parents
SCOPES = ["https://www.googleapis.com/auth/drive"]


def load_credentials(credentials_file: str | None = None):
    """
    Load credentials for the Drive API.

    Args:
        credentials_file: Path to a service account JSON key. When omitted,
            Application Default Credentials are used.

    Returns:
        google.auth credentials scoped for Drive.

    Raises:
        FileNotFoundError: If credentials_file is given but does not exist.
        ValueError: If the key file is invalid.
    """
    if credentials_file:
        key_path = Path(credentials_file)
        if not key_path.exists():
            raise FileNotFoundError(f"Credentials file not found: {credentials_file}")

        creds = service_account.Credentials.from_service_account_file(
            str(key_path), scopes=SCOPES
        )
        logger.debug("Loaded service account credentials from %s", key_path)
        return creds

    creds, project = google.auth.default(scopes=SCOPES)
    logger.debug("Using application default credentials (project=%s)", project)
    return creds
