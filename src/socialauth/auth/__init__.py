"""socialauth authentication - OAuth2 client and provider adapters.

## Key Components

### OAuth2 client
- `HttpOAuth2Client`: authorization-code exchange, stored tokens and API requests
- `OAuth2Client`: protocol provider adapters are composed with

### Provider adapters
- `InstagramProviderAdapter`: Instagram Graph API profile and media reads

### Data
- `UserProfile`: normalized profile returned by adapters
- `Collection`: key-lookup wrapper over raw API responses

## Quick Example

```python
from socialauth.auth import InstagramProviderAdapter, load_instagram_config

adapter = InstagramProviderAdapter.from_config(load_instagram_config())
authorize_url = adapter.build_authorize_url(
    redirect_uri="https://app.example.com/instagram/callback",
    state=state,
)

# in the callback handler
await adapter.authenticate(code=code, redirect_uri=redirect_uri)
profile = await adapter.get_user_profile()
page = await adapter.get_user_media(limit=25)
next_cursor = page.filter("paging").filter("cursors").get("after")
```
"""

from .collection import Collection
from .config import load_instagram_config
from .contracts import (
    ConfigurationError,
    GrantResult,
    OAuth2Client,
    ProviderAdapter,
    ProviderError,
    UnexpectedApiResponseError,
    UserProfile,
)
from .models import InstagramAuthConfigModel
from .oauth2 import HttpOAuth2Client
from .providers import InstagramProviderAdapter

__all__ = [
    # Config
    "InstagramAuthConfigModel",
    "load_instagram_config",
    # Core classes
    "Collection",
    "HttpOAuth2Client",
    "InstagramProviderAdapter",
    # Contracts
    "GrantResult",
    "OAuth2Client",
    "ProviderAdapter",
    "UserProfile",
    # Errors
    "ConfigurationError",
    "ProviderError",
    "UnexpectedApiResponseError",
]
