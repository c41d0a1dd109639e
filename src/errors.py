"""Error types shared by the Gmail and InContact clients."""

from __future__ import annotations

import httpx


class ForwarderError(Exception):
    """Base class for every error raised by the forwarder."""


class NotFoundError(ForwarderError):
    """Raised when a required file or Gmail label does not exist."""


class ParseError(ForwarderError):
    """Raised when a local JSON document is malformed or incomplete."""


class ProtocolError(ForwarderError):
    """Raised when a successful API response lacks an expected field."""


class ApiError(ForwarderError):
    """Raised on a non-2xx HTTP response; carries the provider's status and message."""

    def __init__(self, status: int, message: str = "") -> None:
        self.status = status
        self.message = message
        detail = f" ({message})" if message else ""
        super().__init__(f"response status: {status}{detail}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> ApiError:
        """Build an ApiError from a failed response, pulling out the provider message.

        Google APIs nest it as ``{"error": {"message": ...}}``; OAuth token
        endpoints (Google and InContact) use ``error`` / ``error_description``.
        """
        message = ""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict):
                message = str(error.get("message", ""))
            elif error:
                description = data.get("error_description")
                message = f"{error}: {description}" if description else str(error)
        if not message:
            message = response.reason_phrase
        return cls(response.status_code, message)
