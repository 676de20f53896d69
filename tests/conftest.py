"""
Global pytest configuration and fixtures.
"""

import pytest

from socialauth.auth.models import InstagramAuthConfigModel


@pytest.fixture
def instagram_config() -> InstagramAuthConfigModel:
    return InstagramAuthConfigModel(
        client_id="cid",
        client_secret="secret",
        callback_path="/instagram/callback",
    )
