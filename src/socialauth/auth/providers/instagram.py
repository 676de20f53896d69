"""Instagram ProviderAdapter built on the Instagram Graph API."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

from ..collection import Collection
from ..contracts import (
    GrantResult,
    OAuth2Client,
    ProviderAdapter,
    UnexpectedApiResponseError,
    UserProfile,
)
from ..models import (
    INSTAGRAM_API_BASE_URL,
    INSTAGRAM_AUTH_URL,
    INSTAGRAM_DEFAULT_SCOPE,
    INSTAGRAM_TOKEN_URL,
    InstagramAuthConfigModel,
)
from ..oauth2 import HttpOAuth2Client

logger = logging.getLogger(__name__)

INSTAGRAM_API_DOCUMENTATION = "https://www.instagram.com/developer/authentication/"
INSTAGRAM_PROFILE_URL = "https://instagram.com/{username}"

PROFILE_FIELDS = ("id", "username", "account_type", "media_count")
DEFAULT_MEDIA_FIELDS = (
    "id",
    "caption",
    "media_type",
    "media_url",
    "thumbnail_url",
    "permalink",
    "timestamp",
    "username",
)


def _fields_param(fields: Sequence[str] | None) -> str:
    return ",".join(fields or DEFAULT_MEDIA_FIELDS)


class InstagramProviderAdapter(ProviderAdapter):
    """Instagram provider adapter.

    Composed with an `OAuth2Client` that owns the authorization flow and the
    stored tokens. The adapter adds the Instagram endpoints and maps Graph
    API responses. `initialize()` puts the stored access token on every call.

    Usage:
        adapter = InstagramProviderAdapter.from_config(
            InstagramAuthConfigModel(client_id="...", client_secret="...")
        )
        url = adapter.build_authorize_url(redirect_uri=callback, state=state)
        ...
        await adapter.authenticate(code=code, redirect_uri=callback)
        profile = await adapter.get_user_profile()
    """

    provider_name = "instagram"
    scope = INSTAGRAM_DEFAULT_SCOPE
    api_base_url = INSTAGRAM_API_BASE_URL
    authorize_url = INSTAGRAM_AUTH_URL
    access_token_url = INSTAGRAM_TOKEN_URL
    api_documentation = INSTAGRAM_API_DOCUMENTATION

    def __init__(self, client: OAuth2Client, *, callback_path: str | None = None):
        self.client = client
        self._callback_path = callback_path
        self.initialize()

    @classmethod
    def from_config(
        cls,
        config: InstagramAuthConfigModel,
        *,
        stored_data: MutableMapping[str, Any] | None = None,
    ) -> InstagramProviderAdapter:
        """Build the adapter and its `HttpOAuth2Client` from configuration."""
        client = HttpOAuth2Client(
            client_id=config.client_id,
            client_secret=config.client_secret,
            auth_url=config.auth_url,
            token_url=config.token_url,
            api_base_url=config.api_base_url,
            scope=config.scope,
            scope_separator=",",
            provider_name=cls.provider_name,
            stored_data=stored_data,
        )
        return cls(client, callback_path=config.callback_path)

    def initialize(self) -> None:
        # The Instagram API requires the access token on every call.
        token_name = self.client.access_token_name
        self.client.api_request_parameters[token_name] = self.client.get_stored_data(token_name)

    @property
    def callback_path(self) -> str | None:
        return self._callback_path

    # ── authorization flow ───────────────────────────────────────────────────
    def build_authorize_url(
        self,
        *,
        redirect_uri: str,
        state: str,
        scopes: Sequence[str] | None = None,
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> str:
        return self.client.build_authorize_url(
            redirect_uri=redirect_uri,
            state=state,
            scopes=list(scopes) if scopes else None,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
            extra_params=extra_params,
        )

    async def authenticate(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        """Exchange the callback code and start using the new access token."""
        grant = await self.client.exchange_code(
            code=code, redirect_uri=redirect_uri, code_verifier=code_verifier
        )
        self.initialize()
        logger.info("Instagram user authenticated", extra={"provider": self.provider_name})
        return grant

    def is_connected(self) -> bool:
        return self.client.is_connected()

    def disconnect(self) -> None:
        self.client.disconnect()
        self.client.api_request_parameters.pop(self.client.access_token_name, None)

    # ── Graph API reads ──────────────────────────────────────────────────────
    async def get_user_profile(self) -> UserProfile:
        token_name = self.client.access_token_name
        parameters = {
            "fields": ",".join(PROFILE_FIELDS),
            token_name: self.client.get_stored_data(token_name),
        }

        response = await self.client.api_request("me", "GET", parameters)

        data = Collection(response)
        if not data.exists("id") or data.get("id") is None:
            logger.warning(
                "Instagram profile response missing id",
                extra={"provider": self.provider_name, "endpoint": "me"},
            )
            raise UnexpectedApiResponseError()

        username = data.get("username")
        if username is not None:
            username = str(username)
        return UserProfile(
            provider=self.provider_name,
            identifier=str(data["id"]),
            display_name=username,
            profile_url=INSTAGRAM_PROFILE_URL.format(username=username or ""),
            data={
                "account_type": data.get("account_type"),
                "media_count": data.get("media_count"),
            },
        )

    async def get_user_media(
        self,
        limit: int = 12,
        page_id: str | None = None,
        fields: Sequence[str] | None = None,
    ) -> Collection:
        """Fetch one page of the user's media.

        Args:
            limit: Number of elements per page.
            page_id: Cursor of the page to fetch (``paging.cursors.after`` of
                the previous page).
            fields: Fields to fetch per media; defaults to `DEFAULT_MEDIA_FIELDS`.

        Raises:
            UnexpectedApiResponseError: If the response has no ``data`` key.

        Returns:
            The whole response wrapped in a `Collection`.
        """
        params: dict[str, Any] = {
            "fields": _fields_param(fields),
            "limit": limit,
        }
        if page_id is not None:
            params["after"] = page_id

        response = await self.client.api_request("me/media", "GET", params)

        data = Collection(response)
        if not data.exists("data"):
            logger.warning(
                "Instagram media response missing data",
                extra={"provider": self.provider_name, "endpoint": "me/media"},
            )
            raise UnexpectedApiResponseError()

        return data

    async def get_media(self, media_id: str, fields: Sequence[str] | None = None) -> Any:
        """Fetch a single media object. The raw response is returned unvalidated."""
        return await self.client.api_request(media_id, "GET", {"fields": _fields_param(fields)})
