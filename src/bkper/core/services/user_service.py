"""User endpoints."""

from __future__ import annotations

from bkper.adapters.http_api_request import HttpApiV5Request
from bkper.core.config import BkperConfig
from bkper.core.domain.models import User


async def get_user(config: BkperConfig) -> User:
    """Return the user the current credential belongs to."""

    data = await HttpApiV5Request("user", config).set_method("GET").fetch()
    return User.model_validate(data or {})
