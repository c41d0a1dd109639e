"""InContact API token: client-credentials grant against the authorization server."""

import base64
import logging

import httpx

from src.errors import ApiError, ProtocolError
from src.incontact.types import TicketToken

logger = logging.getLogger(__name__)

INCONTACT_TOKEN_URL = "https://api.incontact.com/InContactAuthorizationServer/Token"


def encode_api_key(app: str, vendor: str, secret: str) -> str:
    """Base64 of ``{app}@{vendor}:{secret}``, the InContact basic-auth credential."""
    return base64.b64encode(f"{app}@{vendor}:{secret}".encode()).decode("ascii")


class InContactAuthClient:
    """Exchanges the static application key for a bearer token.

    Tokens are not cached: callers ask for a fresh one before every post.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        app: str,
        vendor: str,
        secret: str,
        token_url: str = INCONTACT_TOKEN_URL,
    ) -> None:
        self._http = http
        self._key = encode_api_key(app, vendor, secret)
        self._token_url = token_url

    async def get_token(self) -> TicketToken:
        """Fetch a token and the resource base URI.

        Raises:
            ApiError: non-2xx response from the authorization server.
            ProtocolError: the response lacks the token or the base URI.
        """
        logger.info("get_token()")
        try:
            response = await self._http.post(
                self._token_url,
                json={"grant_type": "client_credentials"},
                headers={"Authorization": f"basic {self._key}"},
            )
            if not response.is_success:
                raise ApiError.from_response(response)
            data = response.json()
            if (
                not isinstance(data, dict)
                or not data.get("access_token")
                or not data.get("resource_server_base_uri")
            ):
                raise ProtocolError("missing token and/or uri")
        except Exception as exc:
            logger.error("get_token() - %s", exc)
            raise
        return TicketToken(
            access_token=str(data["access_token"]),
            resource_base_uri=str(data["resource_server_base_uri"]),
        )
