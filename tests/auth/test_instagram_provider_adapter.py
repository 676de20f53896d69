from urllib.parse import parse_qs, urlsplit

import pytest
from pytest import MonkeyPatch

from socialauth.auth.collection import Collection
from socialauth.auth.contracts import (
    OAuth2Client,
    ProviderAdapter,
    ProviderError,
    UnexpectedApiResponseError,
)
from socialauth.auth.models import InstagramAuthConfigModel
from socialauth.auth.providers.instagram import DEFAULT_MEDIA_FIELDS, InstagramProviderAdapter
from tests.auth.testkit import (
    FakeAsyncHttpClient,
    FakeOAuth2Client,
    FakeResponse,
    patch_http_client,
)

DEFAULT_FIELDS_PARAM = (
    "id,caption,media_type,media_url,thumbnail_url,permalink,timestamp,username"
)


@pytest.fixture
def fake_client() -> FakeOAuth2Client:
    return FakeOAuth2Client(stored={"access_token": "IGQVJ-token"})


@pytest.fixture
def adapter(fake_client: FakeOAuth2Client) -> InstagramProviderAdapter:
    return InstagramProviderAdapter(fake_client)


def test_adapter_and_fake_satisfy_protocols(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    assert isinstance(adapter, ProviderAdapter)
    assert isinstance(fake_client, OAuth2Client)


def test_provider_configuration_constants() -> None:
    assert InstagramProviderAdapter.provider_name == "instagram"
    assert InstagramProviderAdapter.scope == "user_profile,user_media"
    assert InstagramProviderAdapter.api_base_url == "https://graph.instagram.com/"
    assert InstagramProviderAdapter.authorize_url == "https://api.instagram.com/oauth/authorize/"
    assert (
        InstagramProviderAdapter.access_token_url
        == "https://api.instagram.com/oauth/access_token/"
    )
    assert len(DEFAULT_MEDIA_FIELDS) == 8


def test_initialize_injects_stored_access_token(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    assert fake_client.api_request_parameters["access_token"] == "IGQVJ-token"


def test_initialize_without_stored_token_injects_none() -> None:
    fake_client = FakeOAuth2Client()
    InstagramProviderAdapter(fake_client)
    assert "access_token" in fake_client.api_request_parameters
    assert fake_client.api_request_parameters["access_token"] is None


@pytest.mark.asyncio
async def test_get_user_profile_happy_path(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {
        "id": "17841405793187218",
        "username": "jayposiris",
        "account_type": "BUSINESS",
        "media_count": 42,
    }

    profile = await adapter.get_user_profile()

    assert profile.provider == "instagram"
    assert profile.identifier == "17841405793187218"
    assert profile.display_name == "jayposiris"
    assert profile.profile_url == "https://instagram.com/jayposiris"
    assert profile.data == {"account_type": "BUSINESS", "media_count": 42}

    request = fake_client.last_request
    assert request.endpoint == "me"
    assert request.method == "GET"
    assert request.parameters == {
        "fields": "id,username,account_type,media_count",
        "access_token": "IGQVJ-token",
    }


@pytest.mark.asyncio
async def test_get_user_profile_keeps_missing_optional_fields_as_none(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {"id": "1", "username": "someone"}

    profile = await adapter.get_user_profile()

    assert profile.data == {"account_type": None, "media_count": None}


@pytest.mark.asyncio
async def test_get_user_profile_requires_id(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {"username": "someone"}

    with pytest.raises(UnexpectedApiResponseError) as exc:
        await adapter.get_user_profile()
    assert exc.value.error == "unexpected_api_response"
    assert isinstance(exc.value, ProviderError)


@pytest.mark.asyncio
async def test_get_user_profile_non_object_response_is_unexpected(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = ["not", "an", "object"]

    with pytest.raises(UnexpectedApiResponseError):
        await adapter.get_user_profile()


@pytest.mark.asyncio
async def test_get_user_media_defaults(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me/media"] = {"data": []}

    await adapter.get_user_media()

    request = fake_client.last_request
    assert request.endpoint == "me/media"
    assert request.parameters == {"fields": DEFAULT_FIELDS_PARAM, "limit": 12}
    assert "after" not in request.parameters


@pytest.mark.asyncio
async def test_get_user_media_empty_fields_fall_back_to_defaults(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me/media"] = {"data": []}

    await adapter.get_user_media(fields=[])

    assert fake_client.last_request.parameters["fields"] == DEFAULT_FIELDS_PARAM


@pytest.mark.asyncio
async def test_get_user_media_explicit_fields_cursor_and_limit(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me/media"] = {"data": []}

    await adapter.get_user_media(limit=50, page_id="QVFIUkp", fields=["permalink", "id"])

    assert fake_client.last_request.parameters == {
        "fields": "permalink,id",
        "limit": 50,
        "after": "QVFIUkp",
    }


@pytest.mark.asyncio
async def test_get_user_media_returns_wrapped_response(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    payload = {
        "data": [{"id": "17895695668004550", "media_type": "IMAGE"}],
        "paging": {"cursors": {"before": "QVFIa", "after": "QVFIz"}},
    }
    fake_client.responses["me/media"] = payload

    page = await adapter.get_user_media()

    assert isinstance(page, Collection)
    assert page.get("data") == payload["data"]
    assert page.filter("paging").filter("cursors").get("after") == "QVFIz"


@pytest.mark.asyncio
async def test_get_user_media_requires_data(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me/media"] = {"paging": {}}

    with pytest.raises(UnexpectedApiResponseError):
        await adapter.get_user_media()


@pytest.mark.asyncio
async def test_get_media_defaults_and_raw_passthrough(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    payload = {"unexpected": True}
    fake_client.responses["17895695668004550"] = payload

    result = await adapter.get_media("17895695668004550")

    assert result is payload
    request = fake_client.last_request
    assert request.endpoint == "17895695668004550"
    assert request.method == "GET"
    assert request.parameters == {"fields": DEFAULT_FIELDS_PARAM}


@pytest.mark.asyncio
async def test_get_media_explicit_fields(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    await adapter.get_media("17895695668004550", fields=["id", "caption"])

    assert fake_client.last_request.parameters == {"fields": "id,caption"}


@pytest.mark.asyncio
async def test_authenticate_reinjects_new_token() -> None:
    fake_client = FakeOAuth2Client()
    adapter = InstagramProviderAdapter(fake_client)
    assert not adapter.is_connected()

    grant = await adapter.authenticate(code="code", redirect_uri="https://app/callback")

    assert grant.access_token == "NEW_TOKEN"
    assert fake_client.api_request_parameters["access_token"] == "NEW_TOKEN"
    assert adapter.is_connected()


def test_disconnect_clears_token(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    adapter.disconnect()

    assert not adapter.is_connected()
    assert "access_token" not in fake_client.api_request_parameters


def test_build_authorize_url_defaults_to_provider_scope(
    instagram_config: InstagramAuthConfigModel,
) -> None:
    adapter = InstagramProviderAdapter.from_config(instagram_config)
    url = adapter.build_authorize_url(redirect_uri="https://app/instagram/callback", state="abc")

    parts = urlsplit(url)
    query = parse_qs(parts.query)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://api.instagram.com/oauth/authorize/"
    assert query["client_id"] == ["cid"]
    assert query["state"] == ["abc"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["user_profile,user_media"]


def test_from_config_reads_stored_token_and_callback_path(
    instagram_config: InstagramAuthConfigModel,
) -> None:
    adapter = InstagramProviderAdapter.from_config(
        instagram_config, stored_data={"access_token": "persisted"}
    )

    assert adapter.callback_path == "/instagram/callback"
    assert adapter.client.api_request_parameters["access_token"] == "persisted"
    assert adapter.is_connected()


@pytest.mark.asyncio
async def test_wire_requests_through_http_client(
    monkeypatch: MonkeyPatch, instagram_config: InstagramAuthConfigModel
) -> None:
    http = FakeAsyncHttpClient(
        request_response=FakeResponse(200, {"id": "1", "username": "someone"})
    )
    patch_http_client(monkeypatch, http)
    adapter = InstagramProviderAdapter.from_config(
        instagram_config, stored_data={"access_token": "tok"}
    )

    await adapter.get_user_profile()
    profile_call = http.last_call
    assert profile_call.method == "GET"
    assert profile_call.url == "https://graph.instagram.com/me"
    assert profile_call.params == {
        "access_token": "tok",
        "fields": "id,username,account_type,media_count",
    }

    await adapter.get_media("17895695668004550")
    media_call = http.last_call
    assert media_call.url == "https://graph.instagram.com/17895695668004550"
    assert media_call.params == {"access_token": "tok", "fields": DEFAULT_FIELDS_PARAM}


@pytest.mark.asyncio
async def test_http_errors_propagate_unchanged(
    monkeypatch: MonkeyPatch, instagram_config: InstagramAuthConfigModel
) -> None:
    http = FakeAsyncHttpClient(
        request_response=FakeResponse(
            400,
            {"error": {"message": "Invalid OAuth access token", "type": "OAuthException"}},
        )
    )
    patch_http_client(monkeypatch, http)
    adapter = InstagramProviderAdapter.from_config(instagram_config)

    with pytest.raises(ProviderError) as exc:
        await adapter.get_user_media()
    assert not isinstance(exc.value, UnexpectedApiResponseError)
    assert exc.value.status_code == 400
    assert exc.value.error == "OAuthException"
    assert "access_token" not in http.last_call.params


def test_build_authorize_url_uses_configured_scope() -> None:
    config = InstagramAuthConfigModel(client_id="cid", client_secret="secret", scope="user_profile")
    adapter = InstagramProviderAdapter.from_config(config)

    url = adapter.build_authorize_url(redirect_uri="https://app/instagram/callback", state="abc")

    assert parse_qs(urlsplit(url).query)["scope"] == ["user_profile"]


def test_build_authorize_url_explicit_scopes_win(
    instagram_config: InstagramAuthConfigModel,
) -> None:
    adapter = InstagramProviderAdapter.from_config(instagram_config)

    url = adapter.build_authorize_url(
        redirect_uri="https://app/instagram/callback", state="abc", scopes=["user_media"]
    )

    assert parse_qs(urlsplit(url).query)["scope"] == ["user_media"]


@pytest.mark.asyncio
async def test_get_user_profile_rejects_null_id(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {"id": None, "username": "someone"}

    with pytest.raises(UnexpectedApiResponseError):
        await adapter.get_user_profile()


@pytest.mark.asyncio
async def test_get_user_profile_coerces_numeric_values_to_strings(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {"id": 17841405793187218, "username": 1234}

    profile = await adapter.get_user_profile()

    assert profile.identifier == "17841405793187218"
    assert profile.display_name == "1234"
    assert profile.profile_url == "https://instagram.com/1234"


@pytest.mark.asyncio
async def test_get_user_profile_without_username(
    adapter: InstagramProviderAdapter, fake_client: FakeOAuth2Client
) -> None:
    fake_client.responses["me"] = {"id": "1"}

    profile = await adapter.get_user_profile()

    assert profile.display_name is None
    assert profile.profile_url == "https://instagram.com/"


def test_disconnect_through_http_client_clears_stored_data(
    instagram_config: InstagramAuthConfigModel,
) -> None:
    backing: dict[str, object] = {"access_token": "tok", "user_id": "42"}
    adapter = InstagramProviderAdapter.from_config(instagram_config, stored_data=backing)

    adapter.disconnect()

    assert backing == {}
    assert not adapter.is_connected()
    assert "access_token" not in adapter.client.api_request_parameters
