"""OAuth2 client capability shared by provider adapters.

`HttpOAuth2Client` performs the authorization-code exchange and keeps the
issued tokens in a mutable mapping. API requests go out with a set of
default parameters and headers. Provider adapters are composed with it and
only add provider-specific endpoints and response mapping.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any
from urllib.parse import urlencode, urljoin, urlsplit

from pydantic import ConfigDict, ValidationError

from socialauth.models import SdkBaseModel

from .contracts import GrantResult, OAuth2Client, ProviderError
from .http import create_http_client

logger = logging.getLogger(__name__)

# Methods whose parameters travel in the query string; the rest use a form body.
_QUERY_METHODS = frozenset({"GET", "DELETE", "HEAD"})


class _TokenResponse(SdkBaseModel):
    """Token endpoint response (successful or error)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: float | None = None
    scope: str | None = None
    token_type: str | None = None
    user_id: int | str | None = None

    error: str | None = None
    error_description: str | None = None
    # Instagram reports token errors with these instead of `error`.
    error_type: str | None = None
    error_message: str | None = None

    @property
    def resolved_error(self) -> str | None:
        return self.error or self.error_type


class HttpOAuth2Client(OAuth2Client):
    """OAuth2 authorization-code client backed by httpx."""

    access_token_name = "access_token"

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        auth_url: str,
        token_url: str,
        api_base_url: str,
        scope: str | None = None,
        scope_separator: str = " ",
        provider_name: str = "oauth2",
        stored_data: MutableMapping[str, Any] | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_url = auth_url
        self.token_url = token_url
        self.api_base_url = api_base_url if api_base_url.endswith("/") else f"{api_base_url}/"
        self.scope = scope
        self.scope_separator = scope_separator
        self.provider_name = provider_name
        self._stored_data: MutableMapping[str, Any] = stored_data if stored_data is not None else {}

        self.api_request_parameters: dict[str, Any] = {}
        self.api_request_headers: dict[str, str] = {"Accept": "application/json"}

    # ── stored data ──────────────────────────────────────────────────────────
    def get_stored_data(self, key: str) -> Any | None:
        return self._stored_data.get(key)

    def store_data(self, key: str, value: Any) -> None:
        self._stored_data[key] = value

    def clear_stored_data(self) -> None:
        self._stored_data.clear()

    def is_connected(self) -> bool:
        """True when an access token is stored and its known expiry is in the future."""
        if not self.get_stored_data(self.access_token_name):
            return False
        expires_at = self.get_stored_data("expires_at")
        return expires_at is None or float(expires_at) > time.time()

    def disconnect(self) -> None:
        self.clear_stored_data()

    # ── authorization-code flow ──────────────────────────────────────────────
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
        scope_str = self.scope_separator.join(scopes) if scopes else (self.scope or "")
        params: list[tuple[str, str]] = [
            ("client_id", self.client_id),
            ("redirect_uri", redirect_uri),
            ("response_type", "code"),
            ("scope", scope_str),
            ("state", state),
        ]
        if code_challenge:
            params.append(("code_challenge", code_challenge))
        if code_challenge_method:
            params.append(("code_challenge_method", code_challenge_method))
        if extra_params:
            params.extend(extra_params.items())
        return f"{self.auth_url}?{urlencode(params, doseq=True)}"

    async def exchange_code(
        self,
        *,
        code: str,
        redirect_uri: str,
        code_verifier: str | None = None,
    ) -> GrantResult:
        payload: dict[str, str] = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if code_verifier:
            payload["code_verifier"] = code_verifier

        async with create_http_client() as client:
            resp = await client.post(
                self.token_url,
                data=payload,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
        token = self._parse_token_response(resp)

        if not token.access_token:
            raise ProviderError("invalid_grant", "No access_token in response", status_code=400)

        expires_at = time.time() + token.expires_in if token.expires_in is not None else None
        if token.scope:
            granted_scopes = [s for s in token.scope.split(self.scope_separator) if s]
        else:
            granted_scopes = [s for s in (self.scope or "").split(self.scope_separator) if s]

        self.store_data(self.access_token_name, token.access_token)
        if token.refresh_token is not None:
            self.store_data("refresh_token", token.refresh_token)
        if expires_at is not None:
            self.store_data("expires_at", expires_at)
        if token.user_id is not None:
            self.store_data("user_id", str(token.user_id))

        return GrantResult(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=expires_at,
            provider_scopes_granted=granted_scopes,
            raw_profile={"user_id": str(token.user_id)} if token.user_id is not None else None,
            token_type=token.token_type or "Bearer",
        )

    # ── API requests ─────────────────────────────────────────────────────────
    async def api_request(
        self,
        endpoint: str,
        method: str = "GET",
        parameters: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Call the provider API and return the parsed JSON body.

        `endpoint` is resolved against `api_base_url` unless it is absolute.
        Default parameters are merged under the call-site ones, and parameters
        whose value is None are not sent.

        Raises:
            ProviderError: On a non-2xx status or a body that is not JSON.
        """
        url = self._resolve_url(endpoint)
        method = method.upper()
        merged = {**self.api_request_parameters, **(parameters or {})}
        params = {key: value for key, value in merged.items() if value is not None}
        request_headers = {**self.api_request_headers, **(headers or {})}

        logger.debug(
            "Provider API request",
            extra={"provider": self.provider_name, "endpoint": endpoint, "method": method},
        )

        async with create_http_client() as client:
            if method in _QUERY_METHODS:
                resp = await client.request(method, url, params=params, headers=request_headers)
            else:
                resp = await client.request(method, url, data=params, headers=request_headers)

        if not 200 <= resp.status_code < 300:
            error_code = self._try_extract_api_error_code(resp)
            logger.warning(
                "Provider API returned non-2xx",
                extra={
                    "provider": self.provider_name,
                    "endpoint": endpoint,
                    "status_code": resp.status_code,
                    "provider_error": error_code,
                },
            )
            raise ProviderError(
                error_code or "api_error",
                f"{self.provider_name} API request failed",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as exc:
            logger.warning(
                "Provider API returned invalid JSON",
                extra={
                    "provider": self.provider_name,
                    "endpoint": endpoint,
                    "status_code": resp.status_code,
                },
            )
            raise ProviderError(
                "invalid_response",
                f"{self.provider_name} API response was invalid",
                status_code=resp.status_code,
            ) from exc

    # ── helpers ──────────────────────────────────────────────────────────────
    def _resolve_url(self, endpoint: str) -> str:
        if urlsplit(endpoint).scheme:
            return endpoint
        return urljoin(self.api_base_url, endpoint.lstrip("/"))

    def _parse_token_response(self, resp: Any) -> _TokenResponse:
        if resp.status_code != 200:
            error_code = self._try_extract_api_error_code(resp)
            logger.warning(
                "Token endpoint returned non-200",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                    "provider_error": error_code,
                },
            )
            raise ProviderError(
                error_code or "invalid_grant",
                f"{self.provider_name} token request failed",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning(
                "Token endpoint returned invalid JSON",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                },
            )
            raise ProviderError(
                "invalid_grant",
                "Invalid token response payload",
                status_code=resp.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise ProviderError(
                "invalid_grant",
                "Invalid token response payload",
                status_code=resp.status_code,
            )

        try:
            token = _TokenResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_grant",
                "Invalid token response payload",
                status_code=resp.status_code,
            ) from exc

        if token.resolved_error is not None:
            logger.warning(
                "Token endpoint returned OAuth error",
                extra={
                    "provider": self.provider_name,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                    "provider_error": token.resolved_error,
                },
            )
            raise ProviderError(
                token.resolved_error,
                token.error_description or token.error_message or "Token request failed",
                status_code=resp.status_code,
            )

        return token

    def _try_extract_api_error_code(self, resp: Any) -> str | None:
        """Best-effort extraction of an error code from an error body.

        Understands `{"error": "..."}`, Graph API `{"error": {"type": "..."}}`
        and Instagram's `{"error_type": "..."}`.
        """
        try:
            payload = resp.json()
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict):
            error = error.get("type")
        if not error:
            error = payload.get("error_type")
        return error if isinstance(error, str) and error else None
