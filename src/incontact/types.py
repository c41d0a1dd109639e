"""Data types for the InContact work-item API."""

from dataclasses import dataclass
from typing import Any

#: workItemType used for every forwarded Gmail message.
EMAIL_WORK_ITEM = "email"


@dataclass(frozen=True)
class TicketToken:
    """Short-lived bearer token plus the tenant's API base URL."""

    access_token: str
    resource_base_uri: str


@dataclass(frozen=True)
class WorkItemRequest:
    """Body of ``POST .../interactions/work-items``."""

    point_of_contact: str
    work_item_id: str
    work_item_payload: str
    sender: str
    work_item_type: str = EMAIL_WORK_ITEM

    def to_json(self) -> dict[str, Any]:
        return {
            "pointOfContact": self.point_of_contact,
            "workItemId": self.work_item_id,
            "workItemPayload": self.work_item_payload,
            "workItemType": self.work_item_type,
            "from": self.sender,
        }
