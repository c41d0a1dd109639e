"""Shared pytest fixtures."""

import json
from pathlib import Path

import pytest

from src.config import Settings


@pytest.fixture
def credential_file(tmp_path: Path) -> Path:
    """A Google installed-app credential file."""
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({
        "installed": {
            "client_id": "client-123.apps.googleusercontent.com",
            "client_secret": "s3cret",
            "redirect_uris": ["urn:ietf:wg:oauth:2.0:oob", "http://localhost"],
        }
    }))
    return path


@pytest.fixture
def token_file(tmp_path: Path) -> Path:
    """Path where the OAuth token is (or will be) stored; not created here."""
    return tmp_path / "token.json"


@pytest.fixture
def settings(credential_file: Path, token_file: Path) -> Settings:
    return Settings(
        credential_file=credential_file,
        token_file=token_file,
        incontact_app="MyApp",
        incontact_vendor="MyVendor",
        incontact_key="app-key",
        incontact_poc="poc-0001",
    )
