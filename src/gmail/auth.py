"""Gmail OAuth2 authorization: installed-app credential, token handshake and refresh."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import click
import httpx
from rich.console import Console

from src.errors import ApiError, NotFoundError, ParseError, ProtocolError
from src.gmail.token_store import TokenStore
from src.gmail.types import Credential, Token

logger = logging.getLogger(__name__)

SCOPES: list[str] = ["https://www.googleapis.com/auth/gmail.readonly"]

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

#: Receives the authorization URL, returns the code the operator pasted back.
CodePrompt = Callable[[str], Awaitable[str]]

console = Console()


def load_credential(path: Path) -> Credential:
    """Read the ``installed`` block of a Google OAuth client credential file.

    Raises:
        NotFoundError: the file does not exist.
        ParseError: the file is not JSON or lacks an installed-app client.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        logger.error("load_credential() - credential file not found: %s", path)
        raise NotFoundError(f"Credential file not found: {path}") from exc

    try:
        installed = json.loads(text)["installed"]
        redirect_uris = installed["redirect_uris"]
        return Credential(
            client_id=str(installed["client_id"]),
            client_secret=str(installed["client_secret"]),
            redirect_uri=str(redirect_uris[0]),
        )
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        logger.error("load_credential() - malformed credential file %s: %s", path, exc)
        raise ParseError(f"Malformed credential file {path}: {exc!r}") from exc


async def prompt_for_code(auth_url: str) -> str:
    """Show the authorization URL and block (off the event loop) for the code."""
    console.print(f"Authorize this app by visiting this url: {auth_url}", markup=False, soft_wrap=True)
    code: str = await asyncio.to_thread(click.prompt, "Enter the code from that page here")
    return code.strip()


class GmailAuthClient:
    """Produces an authorized Gmail token, running the OAuth handshake if needed.

    States: unauthenticated until ``authorize()`` returns, then authenticated
    for the rest of the run.  A missing token file is the only failure that
    is recovered from (by asking the operator for a fresh authorization code);
    everything else is logged and re-raised.

    Usage::

        auth = GmailAuthClient(http, Path("credentials.json"), TokenStore(Path("token.json")))
        token = await auth.authorize()
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        credential_file: Path,
        token_store: TokenStore,
        prompt: CodePrompt = prompt_for_code,
        token_url: str = GOOGLE_TOKEN_URL,
    ) -> None:
        self._http = http
        self._credential_file = Path(credential_file)
        self._store = token_store
        self._prompt = prompt
        self._token_url = token_url
        self._credential: Credential | None = None
        self._token: Token | None = None

    @property
    def is_authorized(self) -> bool:
        return self._token is not None

    @property
    def token(self) -> Token:
        """The token applied by ``authorize()``."""
        if self._token is None:
            raise RuntimeError("authorize() has not completed")
        return self._token

    async def authorize(self) -> Token:
        """Load the credential and apply a persisted or freshly obtained token."""
        logger.info("authorize()")
        self._credential = load_credential(self._credential_file)
        try:
            token = self._store.load()
        except NotFoundError:
            logger.info("No token at %s — starting OAuth handshake", self._store.path)
            self._token = await self._get_new_token(self._credential)
            return self._token
        except Exception as exc:
            logger.error("authorize() - %s", exc)
            raise

        if token.is_expired() and token.refresh_token:
            token = await self._refresh(self._credential, token)
        self._token = token
        return token

    def generate_auth_url(self, credential: Credential) -> str:
        """Consent-screen URL requesting offline, read-only Gmail access."""
        query = urlencode({
            "access_type": "offline",
            "scope": " ".join(SCOPES),
            "response_type": "code",
            "client_id": credential.client_id,
            "redirect_uri": credential.redirect_uri,
        })
        return f"{GOOGLE_AUTH_URL}?{query}"

    # ── Internal helpers ───────────────────────────────────────────────────────

    async def _get_new_token(self, credential: Credential) -> Token:
        """Interactive handshake: prompt for a code, exchange it, persist the token."""
        try:
            code = await self._prompt(self.generate_auth_url(credential))
            data = await self._post_token_request({
                "code": code,
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
                "redirect_uri": credential.redirect_uri,
                "grant_type": "authorization_code",
            })
            token = Token.from_response(data)
            self._store.save(token)
        except Exception as exc:
            logger.error("_get_new_token() - %s", exc)
            raise
        return token

    async def _refresh(self, credential: Credential, token: Token) -> Token:
        """Trade the refresh token for a new access token and persist it."""
        logger.info("Access token expired — refreshing")
        try:
            data = await self._post_token_request({
                "refresh_token": str(token.refresh_token),
                "client_id": credential.client_id,
                "client_secret": credential.client_secret,
                "grant_type": "refresh_token",
            })
            refreshed = Token.from_response(data, refresh_token=token.refresh_token)
            self._store.save(refreshed)
        except Exception as exc:
            logger.error("_refresh() - %s", exc)
            raise
        return refreshed

    async def _post_token_request(self, form: dict[str, str]) -> dict[str, Any]:
        response = await self._http.post(self._token_url, data=form)
        if not response.is_success:
            raise ApiError.from_response(response)
        data = response.json()
        if not isinstance(data, dict) or not data.get("access_token"):
            raise ProtocolError("Token endpoint response has no access_token")
        for field in ("expires_in", "expiry_date"):
            value = data.get(field)
            if value is not None and (isinstance(value, bool) or not str(value).strip().isdigit()):
                raise ProtocolError(f"Token endpoint response has non-numeric {field}: {value!r}")
        return data
