"""Runtime configuration for the recommendation engine.

Limits are plain values on :class:`RecommendConfig` and are passed into the
traversal and backfill functions explicitly, so tests can shrink them.
Defaults can be overridden from the environment (``.env`` is loaded by the
package on import).
"""

import os

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

RECOMMEND_LIMIT = 10
FIRST_DEGREE_SCAN_LIMIT = 200
INTERACTION_SCAN_LIMIT = 1000
MAX_PAGE_SIZE = 50


class RecommendConfig(BaseModel):
    recommend_limit: int = Field(
        RECOMMEND_LIMIT, ge=1, description="Target size of the recommendation list"
    )
    first_degree_scan_limit: int = Field(
        FIRST_DEGREE_SCAN_LIMIT, ge=1, description="Cap on friends fetched for the requester"
    )
    interaction_scan_limit: int = Field(
        INTERACTION_SCAN_LIMIT, ge=1, description="Cap on interaction scores fetched per member"
    )
    max_page_size: int = Field(MAX_PAGE_SIZE, ge=1, description="Largest page the API serves")


_ENV_OVERRIDES = {
    "recommend_limit": "RECOMMEND_LIMIT",
    "first_degree_scan_limit": "FIRST_DEGREE_SCAN_LIMIT",
    "interaction_scan_limit": "INTERACTION_SCAN_LIMIT",
    "max_page_size": "RECOMMEND_MAX_PAGE_SIZE",
}


def load_config(environ=None) -> RecommendConfig:
    """Build a :class:`RecommendConfig` from environment variables.

    Raises ``ValueError`` when a variable is set but is not a positive int.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, int] = {}
    for field, var in _ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[field] = int(raw)
        except ValueError as exc:
            raise ValueError(f"{var} must be an integer, got {raw!r}") from exc
    # pydantic's ValidationError is a ValueError subclass
    return RecommendConfig(**values)


def index_name(kind: str, environ=None) -> str:
    """Return the Elasticsearch index used for *kind* (e.g. ``members``).

    ``FRIENDS_INDEX``, ``MEMBERS_INDEX`` and friends override the default,
    which is *kind* itself.
    """
    environ = os.environ if environ is None else environ
    return environ.get(f"{kind.upper()}_INDEX") or kind
