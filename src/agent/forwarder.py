"""Inbox forwarder — pushes every inbox message to InContact as a work item."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from src.config import Settings
from src.gmail.auth import CodePrompt, GmailAuthClient, prompt_for_code
from src.gmail.client import GmailClient
from src.gmail.token_store import TokenStore
from src.incontact.auth import InContactAuthClient
from src.incontact.client import WorkItemClient

logger = logging.getLogger(__name__)

#: Builds a GmailClient once the session token is known.
GmailClientFactory = Callable[[GmailAuthClient], GmailClient]


@dataclass(frozen=True)
class ForwardResult:
    """Correlates a Gmail message with the InContact contact it created."""

    msg_id: str
    contact_id: Any


class InboxForwarder:
    """Authorizes Gmail once, then fetches and posts every inbox message concurrently.

    All per-message tasks are launched together and joined; the first failure
    fails the whole batch (no partial results, and work items already created
    by other tasks are not rolled back).  ``max_concurrency`` bounds how many
    messages are in flight at once without otherwise changing behaviour.

    Usage::

        async with httpx.AsyncClient() as http:
            forwarder = InboxForwarder.from_settings(http, Settings.from_env())
            results = await forwarder.run()
    """

    def __init__(
        self,
        gmail_auth: GmailAuthClient,
        incontact_auth: InContactAuthClient,
        work_items: WorkItemClient,
        gmail_factory: GmailClientFactory,
        max_concurrency: int | None = None,
    ) -> None:
        self._gmail_auth = gmail_auth
        self._incontact_auth = incontact_auth
        self._work_items = work_items
        self._gmail_factory = gmail_factory
        self._max_concurrency = max_concurrency

    @classmethod
    def from_settings(
        cls,
        http: httpx.AsyncClient,
        settings: Settings,
        prompt: CodePrompt = prompt_for_code,
    ) -> InboxForwarder:
        """Wire every client onto one shared HTTP connection pool."""
        settings.require_incontact()
        gmail_auth = GmailAuthClient(
            http, settings.credential_file, TokenStore(settings.token_file), prompt=prompt
        )
        return cls(
            gmail_auth=gmail_auth,
            incontact_auth=InContactAuthClient(
                http,
                settings.incontact_app,
                settings.incontact_vendor,
                settings.incontact_key,
                token_url=settings.incontact_token_url,
            ),
            work_items=WorkItemClient(
                http, settings.incontact_poc, api_version=settings.incontact_api_version
            ),
            gmail_factory=lambda auth: GmailClient(http, auth.token),
            max_concurrency=settings.max_concurrency,
        )

    async def run(self) -> list[ForwardResult]:
        """Forward the whole inbox and return one ForwardResult per message."""
        await self._gmail_auth.authorize()
        gmail = self._gmail_factory(self._gmail_auth)
        message_ids = await gmail.list_message_ids()
        logger.info("Forwarding %d inbox message(s)", len(message_ids))

        semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

        async def _bounded(msg_id: str) -> ForwardResult:
            if semaphore is None:
                return await self._process_message(gmail, msg_id)
            async with semaphore:
                return await self._process_message(gmail, msg_id)

        # No return_exceptions: the first failure propagates while sibling tasks run on.
        results = await asyncio.gather(*(_bounded(msg_id) for msg_id in message_ids))
        return list(results)

    async def _process_message(self, gmail: GmailClient, msg_id: str) -> ForwardResult:
        """Fetch one message and post it as an email work item."""
        message = await gmail.get_message(msg_id)
        contact_id = await self._work_items.send_email(
            self._incontact_auth, message.id, message.sender, message.payload
        )
        logger.info("Forwarded message %s → contact %s", msg_id, contact_id)
        return ForwardResult(msg_id=msg_id, contact_id=contact_id)


async def forward_inbox(
    settings: Settings,
    prompt: CodePrompt = prompt_for_code,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ForwardResult]:
    """Run one forwarding pass with a dedicated HTTP client."""
    async with httpx.AsyncClient(transport=transport) as http:
        forwarder = InboxForwarder.from_settings(http, settings, prompt=prompt)
        return await forwarder.run()


async def authorize_only(
    settings: Settings,
    prompt: CodePrompt = prompt_for_code,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GmailAuthClient:
    """Run just the Gmail authorization (handshake or refresh) and return the client."""
    async with httpx.AsyncClient(transport=transport) as http:
        auth = GmailAuthClient(
            http, settings.credential_file, TokenStore(settings.token_file), prompt=prompt
        )
        await auth.authorize()
        return auth


async def lookup_label(
    settings: Settings,
    name: str,
    prompt: CodePrompt = prompt_for_code,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Authorize and resolve a Gmail label name to its ID."""
    async with httpx.AsyncClient(transport=transport) as http:
        auth = GmailAuthClient(
            http, settings.credential_file, TokenStore(settings.token_file), prompt=prompt
        )
        await auth.authorize()
        return await GmailClient(http, auth.token).get_label_id(name)
