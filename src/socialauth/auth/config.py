"""Environment-based provider configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import ValidationError

from .contracts import ConfigurationError
from .models import InstagramAuthConfigModel

logger = logging.getLogger(__name__)

# Environment suffix -> config field, for the optional settings.
_OPTIONAL_SETTINGS = {
    "SCOPE": "scope",
    "CALLBACK_PATH": "callback_path",
    "AUTH_URL": "auth_url",
    "TOKEN_URL": "token_url",
    "API_BASE_URL": "api_base_url",
}


def load_instagram_config(
    environ: Mapping[str, str] | None = None, prefix: str = "INSTAGRAM_"
) -> InstagramAuthConfigModel:
    """Build an `InstagramAuthConfigModel` from environment variables.

    Expected environment variables:
    - INSTAGRAM_CLIENT_ID
    - INSTAGRAM_CLIENT_SECRET

    Optional: INSTAGRAM_SCOPE, INSTAGRAM_CALLBACK_PATH, INSTAGRAM_AUTH_URL,
    INSTAGRAM_TOKEN_URL, INSTAGRAM_API_BASE_URL. Empty values count as unset.

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ

    client_id = env.get(f"{prefix}CLIENT_ID")
    client_secret = env.get(f"{prefix}CLIENT_SECRET")
    missing = [
        name
        for name, value in (
            (f"{prefix}CLIENT_ID", client_id),
            (f"{prefix}CLIENT_SECRET", client_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Missing Instagram OAuth configuration: {', '.join(missing)} required",
            missing_config=missing,
        )

    settings: dict[str, str] = {}
    for suffix, field_name in _OPTIONAL_SETTINGS.items():
        value = env.get(f"{prefix}{suffix}")
        if value:
            settings[field_name] = value

    try:
        config = InstagramAuthConfigModel(
            client_id=client_id,
            client_secret=client_secret,
            **settings,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid Instagram OAuth configuration: {exc}") from exc

    logger.debug(
        "Loaded Instagram OAuth configuration",
        extra={"provider": "instagram", "overrides": sorted(settings)},
    )
    return config
