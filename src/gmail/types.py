"""Data types shared across the Gmail modules."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Credential:
    """OAuth client identity from a Google "installed app" credential file."""

    client_id: str
    client_secret: str
    redirect_uri: str


@dataclass(frozen=True)
class Token:
    """An OAuth token in the shape of Google's token endpoint response.

    ``expiry_date`` is epoch milliseconds, matching what Google's own client
    libraries write to ``token.json``.
    """

    access_token: str
    refresh_token: str | None = None
    expiry_date: int | None = None
    token_type: str | None = None
    scope: str | None = None

    @classmethod
    def from_response(cls, data: dict[str, Any], refresh_token: str | None = None) -> Token:
        """Build a Token from a token-endpoint response.

        Google omits ``refresh_token`` on refresh grants, so the caller may
        pass the previous one through.
        """
        expiry_date = data.get("expiry_date")
        if expiry_date is None and data.get("expires_in") is not None:
            expiry_date = int(time.time() * 1000) + int(data["expires_in"]) * 1000
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token") or refresh_token,
            expiry_date=int(expiry_date) if expiry_date is not None else None,
            token_type=data.get("token_type"),
            scope=data.get("scope"),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        """Build a Token from a persisted token document."""
        expiry_date = data.get("expiry_date")
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token"),
            expiry_date=int(expiry_date) if expiry_date is not None else None,
            token_type=data.get("token_type"),
            scope=data.get("scope"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON document persisted by TokenStore (None fields omitted)."""
        data: dict[str, Any] = {"access_token": self.access_token}
        if self.refresh_token is not None:
            data["refresh_token"] = self.refresh_token
        if self.scope is not None:
            data["scope"] = self.scope
        if self.token_type is not None:
            data["token_type"] = self.token_type
        if self.expiry_date is not None:
            data["expiry_date"] = self.expiry_date
        return data

    def is_expired(self, now_ms: int | None = None) -> bool:
        """True when the token carries an expiry that has already passed."""
        if self.expiry_date is None:
            return False
        now = now_ms if now_ms is not None else int(time.time() * 1000)
        return self.expiry_date <= now


@dataclass(frozen=True)
class MailMessage:
    """A Gmail message reduced to what a work item needs.

    ``sender`` is the bare address pulled from the From header ("" if none
    matched); ``payload`` is the decoded inline body ("" for multipart-only
    messages).
    """

    id: str
    sender: str
    payload: str
