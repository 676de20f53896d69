"""socialauth - third-party authentication provider adapters.

See `socialauth.auth` for the OAuth2 client and provider adapters.
"""

__version__ = "0.1.0"
