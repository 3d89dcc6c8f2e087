"""OAuth portal client — authorization-code exchange and user info lookup."""

import base64
import binascii
import logging

import httpx

from michels_travel.config import settings
from michels_travel.errors import ExternalAPIError, ValidationError

logger = logging.getLogger(__name__)

EXCHANGE_TOKEN_PATH = "/webdev.v1.WebDevAuthPublicService/ExchangeToken"
GET_USER_INFO_PATH = "/webdev.v1.WebDevAuthPublicService/GetUserInfo"

# Portal registration platforms, in order of preference when deriving the login method
PLATFORM_LOGIN_METHODS = [
    ("REGISTERED_PLATFORM_EMAIL", "email"),
    ("REGISTERED_PLATFORM_GOOGLE", "google"),
    ("REGISTERED_PLATFORM_APPLE", "apple"),
    ("REGISTERED_PLATFORM_MICROSOFT", "microsoft"),
    ("REGISTERED_PLATFORM_AZURE", "microsoft"),
    ("REGISTERED_PLATFORM_GITHUB", "github"),
]


def decode_state(state: str) -> str:
    """The OAuth `state` carries the base64-encoded redirect URI."""
    try:
        return base64.b64decode(state, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise ValidationError("Invalid OAuth state")


def derive_login_method(platform: str | None, platforms: list | None) -> str | None:
    if platform:
        return platform
    if not platforms:
        return None
    registered = {p for p in platforms if isinstance(p, str)}
    for key, method in PLATFORM_LOGIN_METHODS:
        if key in registered:
            return method
    first = next((p for p in platforms if isinstance(p, str)), None)
    return first.lower() if first else None


class OAuthClient:
    """Talks to the OAuth portal configured by `oauth_server_url`."""

    async def _post(self, path: str, payload: dict) -> dict:
        if not settings.oauth_server_url:
            raise ExternalAPIError("OAuth", "OAuth server is not configured")
        try:
            async with httpx.AsyncClient(base_url=settings.oauth_server_url, timeout=15.0) as client:
                resp = await client.post(path, json=payload)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"OAuth {path} returned {e.response.status_code}: {e.response.text[:200]}")
            raise ExternalAPIError("OAuth", f"Portal request failed ({e.response.status_code})")
        except httpx.HTTPError as e:
            logger.error(f"OAuth {path} failed: {e}")
            raise ExternalAPIError("OAuth", "Portal unreachable")

    async def exchange_code(self, code: str, state: str) -> str:
        """Exchange an authorization code for an access token."""
        data = await self._post(EXCHANGE_TOKEN_PATH, {
            "clientId": settings.oauth_app_id,
            "grantType": "authorization_code",
            "code": code,
            "redirectUri": decode_state(state),
        })
        token = data.get("accessToken")
        if not token:
            raise ExternalAPIError("OAuth", "No access token in exchange response")
        return token

    async def get_user_info(self, access_token: str) -> dict:
        """Return {open_id, name, email, login_method} for the token holder."""
        data = await self._post(GET_USER_INFO_PATH, {"accessToken": access_token})
        open_id = data.get("openId")
        if not open_id:
            raise ExternalAPIError("OAuth", "User info is missing openId")
        return {
            "open_id": open_id,
            "name": data.get("name"),
            "email": data.get("email"),
            "login_method": derive_login_method(data.get("platform") or data.get("loginMethod"), data.get("platforms")),
        }


oauth_client = OAuthClient()
