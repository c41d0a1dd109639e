"""Gmail REST client — lists inbox messages and reduces them to MailMessage."""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Sequence
from typing import Any

import httpx

from src.errors import ApiError, NotFoundError, ParseError
from src.gmail.types import MailMessage, Token

logger = logging.getLogger(__name__)

GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"

# Gmail system label for the inbox (used directly, no label lookup needed)
INBOX = "INBOX"

# First address-shaped token in a From header, e.g. '"A B" <a@b.com>' → a@b.com.
# Deliberately loose: this is not an RFC 5322 parser.
_ADDRESS_RE = re.compile(r"([a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9._-]+)", re.IGNORECASE)


def extract_address(header_value: str | None) -> str:
    """Return the first email address found in a header value, or "" if none."""
    if not header_value:
        return ""
    match = _ADDRESS_RE.search(header_value)
    return match.group(1) if match else ""


def decode_body(data: str | None) -> str:
    """Decode Gmail's base64url body data; missing or empty data decodes to "".

    Raises:
        ParseError: the data is present but is not valid base64url.
    """
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        logger.error("decode_body() - could not decode message body: %s", exc)
        raise ParseError(f"Undecodable message body: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


class GmailClient:
    """Thin async wrapper around the Gmail v1 REST endpoints the forwarder needs.

    Shares the caller's ``httpx.AsyncClient``; every request carries the
    bearer token produced by GmailAuthClient.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: Token,
        base_url: str = GMAIL_API_BASE,
    ) -> None:
        self._http = http
        self._token = token
        self._base_url = base_url.rstrip("/")

    # ── Public API ─────────────────────────────────────────────────────────────

    async def list_message_ids(
        self,
        label_ids: Sequence[str] = (INBOX,),
        max_results: int | None = None,
    ) -> list[str]:
        """Return the IDs of messages carrying all of ``label_ids`` (the inbox by default)."""
        logger.info("list_message_ids() - labels: %s", ",".join(label_ids))
        params: list[tuple[str, str | int]] = [("labelIds", label) for label in label_ids]
        if max_results is not None:
            params.append(("maxResults", max_results))
        try:
            data = await self._get("/messages", params=params)
        except Exception as exc:
            logger.error("list_message_ids() - %s", exc)
            raise
        return [str(m["id"]) for m in data.get("messages", []) if m.get("id")]

    async def get_message(self, message_id: str) -> MailMessage:
        """Fetch one message and reduce it to (id, sender address, decoded body)."""
        logger.info("get_message() - id: %s", message_id)
        try:
            data = await self._get(f"/messages/{message_id}")
        except Exception as exc:
            logger.error("get_message() - %s", exc)
            raise
        return self._parse_message(data)

    async def get_label_id(self, name: str) -> str:
        """Return the ID of the label whose name matches exactly.

        Raises:
            NotFoundError: no label with that name exists.
        """
        logger.info("get_label_id() - name: %s", name)
        try:
            data = await self._get("/labels")
            for label in data.get("labels", []):
                if label.get("name") == name:
                    return str(label["id"])
            raise NotFoundError(f"label not found: {name!r}")
        except Exception as exc:
            logger.error("get_label_id() - %s", exc)
            raise

    # ── Internal helpers ───────────────────────────────────────────────────────

    async def _get(self, path: str, params: Any = None) -> dict[str, Any]:
        """GET a Gmail endpoint and return the decoded JSON body.

        Raises ApiError on any non-2xx response.
        """
        response = await self._http.get(
            f"{self._base_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {self._token.access_token}"},
        )
        if not response.is_success:
            raise ApiError.from_response(response)
        data: dict[str, Any] = response.json()
        return data

    @staticmethod
    def _parse_message(data: dict[str, Any]) -> MailMessage:
        """Map a Gmail ``users.messages.get`` resource to a MailMessage.

        Only inline ``payload.body.data`` is decoded; multipart messages keep
        their content in ``payload.parts`` and therefore yield an empty payload.
        """
        payload = data.get("payload") or {}
        from_header = next(
            (h.get("value") for h in payload.get("headers", []) if h.get("name") == "From"),
            None,
        )
        body = payload.get("body") or {}
        return MailMessage(
            id=str(data.get("id", "")),
            sender=extract_address(from_header),
            payload=decode_body(body.get("data")),
        )
