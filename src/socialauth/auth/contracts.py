"""Contracts and shared types for the socialauth authentication stack."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from pydantic import Field

from socialauth.models import SdkBaseModel


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class UnexpectedApiResponseError(ProviderError):
    """A provider API answered successfully but without a required key."""

    def __init__(
        self,
        description: str = "Provider API returned an unexpected response.",
        status_code: int = 502,
    ):
        super().__init__("unexpected_api_response", description, status_code=status_code)


class ConfigurationError(Exception):
    """Raised when provider configuration is missing or invalid."""

    def __init__(self, message: str, missing_config: Sequence[str] | None = None):
        super().__init__(message)
        self.missing_config = list(missing_config or [])


class GrantResult(SdkBaseModel):
    """Result of exchanging a grant with an IdP."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None
    provider_scopes_granted: list[str] | None = None
    raw_profile: dict[str, Any] | None = None
    token_type: str = "Bearer"


class UserProfile(SdkBaseModel):
    """Normalized user profile returned by provider adapters."""

    provider: str
    identifier: str
    display_name: str | None = None
    profile_url: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class OAuth2Client(Protocol):
    """Shared OAuth2 capability that provider adapters are composed with.

    Implementations own the authorization-code exchange and the stored data
    for the current user. API requests go through `api_request`.
    """

    access_token_name: str
    api_request_parameters: dict[str, Any]

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
        """Construct the provider authorize URL."""

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        """Exchange an authorization code for provider tokens and store them."""

    def get_stored_data(self, key: str) -> Any | None:
        """Return a previously stored value, or None."""

    def store_data(self, key: str, value: Any) -> None:
        """Persist a value for the current user."""

    def clear_stored_data(self) -> None:
        """Forget everything stored for the current user."""

    def is_connected(self) -> bool:
        """Whether a usable access token is stored."""

    def disconnect(self) -> None:
        """Drop the stored tokens for the current user."""

    async def api_request(
        self,
        endpoint: str,
        method: str = "GET",
        parameters: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Execute an API request and return the parsed JSON body."""


@runtime_checkable
class ProviderAdapter(Protocol):
    """Interface all provider adapters must implement."""

    provider_name: str

    def initialize(self) -> None:
        """Hook run once the OAuth2 client is ready."""

    async def get_user_profile(self) -> UserProfile:
        """Fetch and normalize the authenticated user's profile."""


__all__ = [
    "ConfigurationError",
    "GrantResult",
    "OAuth2Client",
    "ProviderAdapter",
    "ProviderError",
    "UnexpectedApiResponseError",
    "UserProfile",
]
