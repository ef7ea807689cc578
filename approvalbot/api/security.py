import secrets

from fastapi import Depends, Header, HTTPException

from approvalbot.api.core.container import get_settings
from approvalbot.config import Settings


def verify_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests whose X-API-Key does not match the configured key."""
    expected = settings.api_key
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid API key")
