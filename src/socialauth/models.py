"""Base Pydantic model for socialauth.

Every model in the package inherits from `SdkBaseModel` so configuration and
normalized auth data share one behavior:

- Unknown fields are rejected
- Instances are immutable once built

Example:
    >>> from socialauth.models import SdkBaseModel
    >>>
    >>> class Endpoint(SdkBaseModel):
    ...     url: str
    >>>
    >>> Endpoint(url="https://graph.instagram.com/").model_dump()
    {'url': 'https://graph.instagram.com/'}
"""

from pydantic import BaseModel, ConfigDict


class SdkBaseModel(BaseModel):
    """Base model for all socialauth Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable

    Response-parsing models that must tolerate unknown keys override
    `model_config` with `extra="ignore"`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
