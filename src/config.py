"""Runtime configuration read from the environment (and .env via python-dotenv)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from src.incontact.auth import INCONTACT_TOKEN_URL
from src.incontact.client import DEFAULT_API_VERSION

logger = logging.getLogger(__name__)


def _parse_concurrency(raw: str) -> int | None:
    """Parse FORWARD_MAX_CONCURRENCY. Blank, zero or invalid means no cap."""
    if not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid FORWARD_MAX_CONCURRENCY %r; running without a cap", raw)
        return None
    return value if value > 0 else None


@dataclass
class Settings:
    """File locations and InContact identifiers for one forwarding run."""

    credential_file: Path = field(default_factory=lambda: Path("credentials.json"))
    token_file: Path = field(default_factory=lambda: Path("token.json"))
    incontact_app: str = ""
    incontact_vendor: str = ""
    incontact_key: str = ""
    incontact_poc: str = ""
    incontact_api_version: str = DEFAULT_API_VERSION
    incontact_token_url: str = INCONTACT_TOKEN_URL
    max_concurrency: int | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from environment variables."""
        return cls(
            credential_file=Path(os.environ.get("GMAIL_CREDENTIAL_FILE", "credentials.json")),
            token_file=Path(os.environ.get("GMAIL_TOKEN_FILE", "token.json")),
            incontact_app=os.environ.get("INCONTACT_APP", ""),
            incontact_vendor=os.environ.get("INCONTACT_VENDOR", ""),
            incontact_key=os.environ.get("INCONTACT_KEY", ""),
            incontact_poc=os.environ.get("INCONTACT_POC", ""),
            incontact_api_version=os.environ.get("INCONTACT_API_VERSION", DEFAULT_API_VERSION),
            incontact_token_url=os.environ.get("INCONTACT_TOKEN_URL", INCONTACT_TOKEN_URL),
            max_concurrency=_parse_concurrency(os.environ.get("FORWARD_MAX_CONCURRENCY", "")),
        )

    def require_incontact(self) -> None:
        """Raise ValueError naming every InContact setting that is still empty."""
        missing = [
            name
            for name, value in (
                ("INCONTACT_APP", self.incontact_app),
                ("INCONTACT_VENDOR", self.incontact_vendor),
                ("INCONTACT_KEY", self.incontact_key),
                ("INCONTACT_POC", self.incontact_poc),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing InContact settings: {', '.join(missing)}")
