"""Tests for WorkItemClient — work-item endpoint faked with httpx.MockTransport."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.errors import ApiError
from src.incontact.client import WorkItemClient, work_items_url
from src.incontact.types import TicketToken, WorkItemRequest


def make_client(
    status: int = 202,
    body: object = None,
    seen: list[httpx.Request] | None = None,
) -> WorkItemClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=body if body is not None else {"contactId": 4815162342})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WorkItemClient(http, "poc-0001")


class TestWorkItemsUrl:
    def test_trailing_slash_is_not_doubled(self) -> None:
        assert (
            work_items_url("https://api-c7.incontact.com/inContactAPI/", "v13.0")
            == "https://api-c7.incontact.com/inContactAPI/services/v13.0/interactions/work-items"
        )

    def test_base_without_slash(self) -> None:
        assert work_items_url("https://x", "v20.0") == "https://x/services/v20.0/interactions/work-items"


class TestWorkItemRequest:
    def test_serialises_camel_case_keys(self) -> None:
        request = WorkItemRequest(
            point_of_contact="poc", work_item_id="m1", work_item_payload="body", sender="a@b.com"
        )
        assert request.to_json() == {
            "pointOfContact": "poc",
            "workItemId": "m1",
            "workItemPayload": "body",
            "workItemType": "email",
            "from": "a@b.com",
        }


class TestPostWorkItem:
    async def test_returns_contact_id(self) -> None:
        client = make_client()
        contact_id = await client.post_work_item("https://x/", "tok", "m1", "a@b.com", "hello")
        assert contact_id == 4815162342

    async def test_posts_bearer_json_body(self) -> None:
        seen: list[httpx.Request] = []
        client = make_client(seen=seen)
        await client.post_work_item("https://x/", "tok", "m1", "a@b.com", "hello", "email")

        request = seen[0]
        assert str(request.url) == "https://x/services/v13.0/interactions/work-items"
        assert request.headers["Authorization"] == "bearer tok"
        assert json.loads(request.content) == {
            "pointOfContact": "poc-0001",
            "workItemId": "m1",
            "workItemPayload": "hello",
            "workItemType": "email",
            "from": "a@b.com",
        }

    async def test_non_2xx_raises_api_error_with_status(self) -> None:
        client = make_client(status=400, body={"error": "InvalidPointOfContact"})
        with pytest.raises(ApiError) as exc_info:
            await client.post_work_item("https://x/", "tok", "m1", "a@b.com", "hello")
        assert exc_info.value.status == 400

    async def test_missing_contact_id_yields_none(self) -> None:
        client = make_client(body={"status": "queued"})
        assert await client.post_work_item("https://x/", "tok", "m1", "a@b.com", "hello") is None


class TestSendEmail:
    async def test_fetches_fresh_token_then_posts(self) -> None:
        seen: list[httpx.Request] = []
        client = make_client(seen=seen)
        auth = MagicMock()
        auth.get_token = AsyncMock(return_value=TicketToken("fresh", "https://tenant/api/"))

        contact_id = await client.send_email(auth, "m1", "a@b.com", "hello")

        assert contact_id == 4815162342
        auth.get_token.assert_awaited_once()
        assert str(seen[0].url) == "https://tenant/api/services/v13.0/interactions/work-items"
        assert seen[0].headers["Authorization"] == "bearer fresh"

    async def test_token_failure_skips_post(self) -> None:
        seen: list[httpx.Request] = []
        client = make_client(seen=seen)
        auth = MagicMock()
        auth.get_token = AsyncMock(side_effect=ApiError(500, "down"))

        with pytest.raises(ApiError):
            await client.send_email(auth, "m1", "a@b.com", "hello")
        assert seen == []
