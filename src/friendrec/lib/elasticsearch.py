"""Shared Elasticsearch utilities.

Helpers for working with Elasticsearch responses that are used by the
store implementations.
"""

import logging

from elastic_transport import ObjectApiResponse

from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def unwrap_es_response(resp, store: str = "elasticsearch") -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``StoreUnavailableError`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise StoreUnavailableError(store, f"{store} returned an invalid response")


def iter_hit_sources(data: dict):
    """Yield the ``_source`` of every search hit (empty dict when absent)."""
    for hit in data.get("hits", {}).get("hits", []):
        yield hit.get("_source") or {}


def iter_found_docs(data: dict):
    """Yield ``(_id, _source)`` for every found document of an ``mget``."""
    for doc in data.get("docs", []):
        if doc.get("found"):
            yield doc.get("_id"), doc.get("_source") or {}


def coerce_member_id(value) -> int | None:
    """Return *value* as a member id, or ``None`` when it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


async def es_call(store: str, method, **kwargs) -> dict:
    """Await ``method(**kwargs)`` and return the unwrapped body.

    Any client error is logged and re-raised as ``StoreUnavailableError``;
    there is no retry here.
    """
    try:
        resp = await method(**kwargs)
    except Exception as exc:
        logger.exception(
            "Elasticsearch request failed",
            extra={"store": store, "index": kwargs.get("index")},
        )
        raise StoreUnavailableError(store) from exc
    return unwrap_es_response(resp, store)
