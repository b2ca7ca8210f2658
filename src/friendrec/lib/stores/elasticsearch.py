"""Elasticsearch-backed store implementations.

Document layout
---------------

``friends``
    One document per member, ``_id`` = member id::

        {"member_id": 1, "friend_ids": [2, 3, 4]}

    ``friend_ids`` is kept in friendship-creation order.

``interactions``
    One document per *directed* pair, ``_id`` = ``"{member_id}:{target_id}"``::

        {"member_id": 1, "target_id": 2, "score": 3.5}

``interaction_events``
    One document per processed interaction event, ``_id`` = idempotency key.

``members`` / ``blacklists``
    ``{"member_id", "name", "created_at"}`` and
    ``{"request_member_id", "black_member_id"}``.

Every lookup is a single request (``mget`` or one ``search``) regardless of
how many ids are involved.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from elasticsearch import ConflictError

from ..elasticsearch import (
    coerce_member_id,
    es_call,
    iter_found_docs,
    iter_hit_sources,
)
from ..errors import StoreUnavailableError
from .base import FriendGraphStore, InteractionScoreStore, MemberDirectory, MemberDisplayInfo

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

# Each recorded interaction adds this much to both directed scores.
INTERACTION_INCREMENT = 0.5
# Scores above this are no longer incremented, so the stored value stays <= 10.
INTERACTION_MAX_BEFORE_INCREMENT = 9.5
# Daily decay multiplier and the score at or below which a pair is dropped.
INTERACTION_DECAY_RATE = 0.95
INTERACTION_DECAY_THRESHOLD = 0.2

# Upper bound on blacklist rows read for one member.
BLACKLIST_SCAN_LIMIT = 1000


def _clean_ids(values) -> list[int]:
    """Coerce a list of raw ids, dropping malformed ones (order kept)."""
    ids: list[int] = []
    for raw in values or []:
        member_id = coerce_member_id(raw)
        if member_id is None:
            logger.warning("Skipping malformed member id %r", raw)
            continue
        ids.append(member_id)
    return ids


def _friend_ids(member_id, src) -> list[int]:
    """Return the cleaned ``friend_ids`` of a friends document.

    A ``friend_ids`` value that is not a list is a malformed record and
    yields no friends.
    """
    raw = src.get("friend_ids")
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        logger.warning("Ignoring malformed friend_ids %r of member %s", raw, member_id)
        return []
    return _clean_ids(raw)


def interaction_doc_id(member_id: int, target_id: int) -> str:
    return f"{member_id}:{target_id}"


# ---------------------------------------------------------------------------
# Friend graph
# ---------------------------------------------------------------------------

class EsFriendGraphStore(FriendGraphStore):
    store_name = "friend graph"

    def __init__(self, es, index: str = "friends"):
        self.es = es
        self.index = index

    async def get_friends(self, member_id: int, limit: int) -> set[int]:
        data = await es_call(
            self.store_name, self.es.mget, index=self.index, ids=[str(member_id)]
        )
        for _, src in iter_found_docs(data):
            return set(_friend_ids(member_id, src)[:limit])
        return set()

    async def get_friends_batch(self, member_ids: Iterable[int]) -> dict[int, list[int]]:
        ids = [str(m) for m in member_ids]
        if not ids:
            return {}

        data = await es_call(self.store_name, self.es.mget, index=self.index, ids=ids)

        friends: dict[int, list[int]] = {}
        for doc_id, src in iter_found_docs(data):
            member_id = coerce_member_id(doc_id)
            if member_id is None:
                logger.warning("Skipping friends document with malformed id %r", doc_id)
                continue
            friends[member_id] = _friend_ids(member_id, src)
        return friends


# ---------------------------------------------------------------------------
# Interaction scores
# ---------------------------------------------------------------------------

class EsInteractionScoreStore(InteractionScoreStore):
    store_name = "interaction score"

    def __init__(
        self,
        es,
        index: str = "interactions",
        events_index: str = "interaction_events",
        scan_limit: int = 1000,
    ):
        self.es = es
        self.index = index
        self.events_index = events_index
        self.scan_limit = scan_limit

    async def get_score(self, member_id: int, other_id: int) -> float:
        data = await es_call(
            self.store_name,
            self.es.mget,
            index=self.index,
            ids=[interaction_doc_id(member_id, other_id)],
        )
        for _, src in iter_found_docs(data):
            try:
                return float(src.get("score") or 0.0)
            except (TypeError, ValueError):
                logger.warning(
                    "Ignoring malformed score %r for pair %s:%s", src.get("score"), member_id, other_id
                )
        return 0.0

    async def get_scores_batch(
        self, member_id: int, candidate_ids: Iterable[int]
    ) -> dict[int, float]:
        ids = [interaction_doc_id(member_id, c) for c in candidate_ids]
        if not ids:
            return {}

        data = await es_call(self.store_name, self.es.mget, index=self.index, ids=ids)
        return self._scores_from(src for _, src in iter_found_docs(data))

    async def get_all_scores(self, member_id: int) -> dict[int, float]:
        data = await es_call(
            self.store_name,
            self.es.search,
            index=self.index,
            query={"bool": {"filter": [{"term": {"member_id": member_id}}]}},
            size=self.scan_limit,
            sort=[{"score": "desc"}, {"target_id": "asc"}],
            _source=["target_id", "score"],
        )
        return self._scores_from(iter_hit_sources(data))

    @staticmethod
    def _scores_from(sources) -> dict[int, float]:
        scores: dict[int, float] = {}
        for src in sources:
            target_id = coerce_member_id(src.get("target_id"))
            if target_id is None:
                logger.warning("Skipping interaction with malformed target %r", src.get("target_id"))
                continue
            try:
                scores[target_id] = float(src.get("score") or 0.0)
            except (TypeError, ValueError):
                logger.warning("Skipping interaction with malformed score %r", src.get("score"))
        return scores

    # -- write side ---------------------------------------------------------

    async def add_interaction(
        self, member_id: int, target_id: int, idempotency_key: str
    ) -> bool:
        """Record one interaction between two members.

        Returns ``False`` when *idempotency_key* was already processed.  Both
        directed scores grow by ``INTERACTION_INCREMENT`` unless they are
        already above ``INTERACTION_MAX_BEFORE_INCREMENT``.
        """
        try:
            await self.es.create(
                index=self.events_index,
                id=idempotency_key,
                document={
                    "member_id": member_id,
                    "target_id": target_id,
                    "created_at": datetime.now(timezone.utc).isoformat(),
                },
            )
        except ConflictError:
            logger.info("Interaction event %s already processed", idempotency_key)
            return False
        except Exception as exc:
            logger.exception("Recording interaction event %s failed", idempotency_key)
            raise StoreUnavailableError(self.store_name) from exc

        script = {
            "source": (
                "if (ctx._source.score <= params.max_score) "
                "{ ctx._source.score += params.increment }"
            ),
            "params": {
                "max_score": INTERACTION_MAX_BEFORE_INCREMENT,
                "increment": INTERACTION_INCREMENT,
            },
        }
        operations: list[dict] = []
        for a, b in ((member_id, target_id), (target_id, member_id)):
            operations.append({"update": {"_index": self.index, "_id": interaction_doc_id(a, b)}})
            operations.append({
                "script": script,
                "upsert": {"member_id": a, "target_id": b, "score": INTERACTION_INCREMENT},
            })

        try:
            data = await es_call(self.store_name, self.es.bulk, operations=operations)
            if data.get("errors"):
                logger.error("Bulk interaction update reported errors: %s", data.get("items"))
                raise StoreUnavailableError(self.store_name, "interaction score update failed")
        except StoreUnavailableError:
            # the event must stay unprocessed so a retry can apply it
            await self._forget_event(idempotency_key)
            raise
        return True

    async def _forget_event(self, idempotency_key: str) -> None:
        try:
            await self.es.delete(index=self.events_index, id=idempotency_key)
        except Exception:
            logger.exception(
                "Could not roll back interaction event %s; retries will be ignored",
                idempotency_key,
            )

    async def apply_decay(
        self,
        rate: float = INTERACTION_DECAY_RATE,
        threshold: float = INTERACTION_DECAY_THRESHOLD,
    ) -> int:
        """Multiply every score by *rate*, then drop pairs at or below *threshold*."""
        data = await es_call(
            self.store_name,
            self.es.update_by_query,
            index=self.index,
            query={"match_all": {}},
            script={"source": "ctx._source.score *= params.rate", "params": {"rate": rate}},
            conflicts="proceed",
            refresh=True,
        )
        await es_call(
            self.store_name,
            self.es.delete_by_query,
            index=self.index,
            query={"range": {"score": {"lte": threshold}}},
            conflicts="proceed",
        )
        return int(data.get("updated", 0))

    async def remove_member(self, member_id: int) -> int:
        """Delete every pair involving *member_id* (used on withdrawal)."""
        data = await es_call(
            self.store_name,
            self.es.delete_by_query,
            index=self.index,
            query={
                "bool": {
                    "should": [
                        {"term": {"member_id": member_id}},
                        {"term": {"target_id": member_id}},
                    ],
                    "minimum_should_match": 1,
                }
            },
            conflicts="proceed",
        )
        return int(data.get("deleted", 0))


# ---------------------------------------------------------------------------
# Member directory
# ---------------------------------------------------------------------------

class EsMemberDirectory(MemberDirectory):
    store_name = "member directory"

    def __init__(self, es, members_index: str = "members", blacklists_index: str = "blacklists"):
        self.es = es
        self.members_index = members_index
        self.blacklists_index = blacklists_index

    async def find_blacklist_ids(self, member_id: int) -> set[int]:
        data = await es_call(
            self.store_name,
            self.es.search,
            index=self.blacklists_index,
            query={
                "bool": {
                    "should": [
                        {"term": {"request_member_id": member_id}},
                        {"term": {"black_member_id": member_id}},
                    ],
                    "minimum_should_match": 1,
                }
            },
            size=BLACKLIST_SCAN_LIMIT,
            _source=["request_member_id", "black_member_id"],
        )

        blocked: set[int] = set()
        for src in iter_hit_sources(data):
            requester = coerce_member_id(src.get("request_member_id"))
            target = coerce_member_id(src.get("black_member_id"))
            other = target if requester == member_id else requester
            if other is None or other == member_id:
                continue
            blocked.add(other)
        return blocked

    async def find_recent_member_ids(self, exclude_ids: set[int], limit: int) -> list[int]:
        if limit <= 0:
            return []

        if exclude_ids:
            query = {"bool": {"must_not": [{"terms": {"member_id": sorted(exclude_ids)}}]}}
        else:
            query = {"match_all": {}}

        data = await es_call(
            self.store_name,
            self.es.search,
            index=self.members_index,
            query=query,
            size=limit,
            sort=[{"created_at": "desc"}],
            _source=["member_id"],
        )
        return _clean_ids(src.get("member_id") for src in iter_hit_sources(data))

    async def find_display_info(self, member_ids: list[int]) -> list[MemberDisplayInfo]:
        if not member_ids:
            return []

        data = await es_call(
            self.store_name,
            self.es.search,
            index=self.members_index,
            query={"terms": {"member_id": list(member_ids)}},
            size=len(member_ids),
            _source=["member_id", "name"],
        )

        infos: list[MemberDisplayInfo] = []
        for src in iter_hit_sources(data):
            member_id = coerce_member_id(src.get("member_id"))
            name = src.get("name")
            if member_id is None or not name:
                logger.warning("Skipping member document without id or name: %r", src)
                continue
            infos.append(MemberDisplayInfo(member_id=member_id, name=name))
        return infos
