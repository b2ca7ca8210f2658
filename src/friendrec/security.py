"""API-key authentication shared by every router except health.

``API_KEY`` holds the current key; ``API_KEYS`` may list extra
comma-separated keys that are still accepted while clients rotate.
"""

import hmac
import os
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

API_KEY_HEADER_NAME = "X-API-Key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER_NAME, auto_error=False)


def get_api_keys() -> list[str]:
    keys = [os.environ.get("API_KEY", "")]
    keys.extend(os.environ.get("API_KEYS", "").split(","))
    return [k.strip() for k in keys if k.strip()]


def is_valid_api_key(api_key: str | None, accepted: list[str]) -> bool:
    if not api_key:
        return False
    # compare against every key so timing does not reveal which one matched
    matches = [hmac.compare_digest(api_key, key) for key in accepted]
    return any(matches)


async def verify_api_key(
    api_key: Annotated[str | None, Depends(api_key_header)],
) -> str:
    if not is_valid_api_key(api_key, get_api_keys()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return api_key
