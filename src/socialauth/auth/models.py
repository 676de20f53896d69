"""Pydantic configuration models for provider adapters.

## Security-relevant configuration fields

- Provider **scope** strings: affect what permissions are requested from the upstream IdP.
- Provider **callback_path**: controls which HTTP route receives IdP callbacks.
- Provider **token_url** / **api_base_url**: receive client secrets and access tokens.

Treat changes to these fields as security-sensitive.
"""

from socialauth.models import SdkBaseModel

INSTAGRAM_AUTH_URL = "https://api.instagram.com/oauth/authorize/"
INSTAGRAM_TOKEN_URL = "https://api.instagram.com/oauth/access_token/"
INSTAGRAM_API_BASE_URL = "https://graph.instagram.com/"
INSTAGRAM_DEFAULT_SCOPE = "user_profile,user_media"


class InstagramAuthConfigModel(SdkBaseModel):
    """Instagram OAuth provider configuration.

    Endpoint fields default to the Instagram Basic Display endpoints; override
    them only to point at a proxy or a test double.
    """

    client_id: str
    client_secret: str
    # Instagram expects a comma-separated scope list.
    scope: str = INSTAGRAM_DEFAULT_SCOPE
    callback_path: str = "/instagram/callback"
    auth_url: str = INSTAGRAM_AUTH_URL
    token_url: str = INSTAGRAM_TOKEN_URL
    api_base_url: str = INSTAGRAM_API_BASE_URL
