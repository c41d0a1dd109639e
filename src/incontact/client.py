"""InContact work-item client — turns one email into one routed contact."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.errors import ApiError
from src.incontact.auth import InContactAuthClient
from src.incontact.types import EMAIL_WORK_ITEM, WorkItemRequest

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "v13.0"


def work_items_url(base_url: str, api_version: str) -> str:
    """``{base}/services/{version}/interactions/work-items``, tolerant of a trailing slash."""
    return f"{base_url.rstrip('/')}/services/{api_version}/interactions/work-items"


class WorkItemClient:
    """Posts work items to a single point of contact."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        point_of_contact: str,
        api_version: str = DEFAULT_API_VERSION,
    ) -> None:
        self._http = http
        self._poc = point_of_contact
        self._api_version = api_version

    async def post_work_item(
        self,
        base_url: str,
        token: str,
        work_item_id: str,
        sender: str,
        payload: str,
        work_item_type: str = EMAIL_WORK_ITEM,
    ) -> Any:
        """POST a work item and return the response's ``contactId``.

        The contact ID is returned as-is; a response without one yields None.

        Raises:
            ApiError: non-2xx response from the work-item endpoint.
        """
        url = work_items_url(base_url, self._api_version)
        logger.info("post_work_item() - url: %s from: %s", url, sender)
        request = WorkItemRequest(
            point_of_contact=self._poc,
            work_item_id=work_item_id,
            work_item_payload=payload,
            sender=sender,
            work_item_type=work_item_type,
        )
        try:
            response = await self._http.post(
                url,
                json=request.to_json(),
                headers={"Authorization": f"bearer {token}"},
            )
            if not response.is_success:
                raise ApiError.from_response(response)
            data = response.json()
        except Exception as exc:
            logger.error("post_work_item() - %s", exc)
            raise
        return data.get("contactId") if isinstance(data, dict) else None

    async def send_email(
        self,
        auth: InContactAuthClient,
        work_item_id: str,
        sender: str,
        payload: str,
    ) -> Any:
        """Fetch a fresh token, then post the email as a work item."""
        logger.info("send_email() - id: %s from: %s", work_item_id, sender)
        ticket_token = await auth.get_token()
        return await self.post_work_item(
            ticket_token.resource_base_uri,
            ticket_token.access_token,
            work_item_id,
            sender,
            payload,
            EMAIL_WORK_ITEM,
        )
