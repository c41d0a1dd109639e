"""Persisted OAuth token document on local disk."""

import json
import logging
from pathlib import Path

from src.errors import NotFoundError, ParseError
from src.gmail.types import Token

logger = logging.getLogger(__name__)


class TokenStore:
    """Reads and writes a single token.json file.

    Usage::

        store = TokenStore(Path("token.json"))
        token = store.load()   # NotFoundError if the file is absent
        store.save(token)
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Token:
        """Return the persisted token.

        Raises:
            NotFoundError: the token file does not exist.
            ParseError: the file is not JSON or has no ``access_token``.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"Token file not found: {self._path}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("load() - malformed token file %s: %s", self._path, exc)
            raise ParseError(f"Malformed token file {self._path}: {exc}") from exc

        if not isinstance(data, dict) or not data.get("access_token"):
            logger.error("load() - token file %s has no access_token", self._path)
            raise ParseError(f"Token file {self._path} has no access_token")

        try:
            return Token.from_dict(data)
        except (ValueError, TypeError) as exc:
            logger.error("load() - bad field in token file %s: %s", self._path, exc)
            raise ParseError(f"Malformed token file {self._path}: {exc}") from exc

    def save(self, token: Token) -> None:
        """Overwrite the token file. OSError propagates on write failure."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(token.to_dict()), encoding="utf-8")
        except OSError as exc:
            logger.error("save() - could not write %s: %s", self._path, exc)
            raise
        logger.info("Token stored to %s", self._path)
