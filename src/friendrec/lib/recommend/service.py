"""Friend recommendation orchestrator.

Pipeline for one request::

    first-degree friends ─► graph traversal ─► interaction scores ─► score & rank
            │ (no friends / no depth-2 candidates)                        │
            └──────────► interaction-score fallback ─────────────────────┘
                                                                          ▼
                         blacklist ─► backfill (interactions, new members) ─► names

A :class:`FriendRecommender` holds only the stores and the configuration;
all traversal state lives in locals of :meth:`FriendRecommender.recommend`,
so one instance can serve concurrent requests.  Store failures propagate as
``StoreUnavailableError``.
"""

import logging

from ...models import RecommendationPage, RecommendedFriend
from ..config import RecommendConfig
from ..stores.base import FriendGraphStore, InteractionScoreStore, MemberDirectory
from .assembler import assemble_recommendations
from .backfill import (
    build_exclude_ids,
    exclude_blacklisted,
    fill_from_interaction_scores,
    fill_from_recent_members,
)
from .fallback import interaction_candidates
from .scoring import RecommendCandidate, rank_candidates
from .traversal import find_friend_relation

logger = logging.getLogger(__name__)


class FriendRecommender:
    def __init__(
        self,
        graph: FriendGraphStore,
        scores: InteractionScoreStore,
        directory: MemberDirectory,
        config: RecommendConfig | None = None,
    ):
        self.graph = graph
        self.scores = scores
        self.directory = directory
        self.config = config or RecommendConfig()

    async def rank(self, member_id: int) -> list[RecommendCandidate]:
        """Return the final, limited candidate list for *member_id*."""
        limit = self.config.recommend_limit

        friends = await self.graph.get_friends(member_id, self.config.first_degree_scan_limit)
        first_degree = set(friends) - {member_id}

        # fetched at most once; shared by the fallback and the backfill
        all_scores: dict[int, float] | None = None

        relation = await find_friend_relation(self.graph, member_id, first_degree, limit)
        if relation is None or not relation.second_degree:
            logger.debug("Member %s has no graph candidates, using interaction scores", member_id)
            all_scores = await self.scores.get_all_scores(member_id)
            candidates = interaction_candidates(member_id, all_scores, exclude_ids=first_degree)
        else:
            batch_scores = await self.scores.get_scores_batch(member_id, relation.candidate_ids)
            candidates = relation.with_interaction_scores(batch_scores).to_candidates()

        selected = rank_candidates(candidates)[:limit]

        blacklist = await self.directory.find_blacklist_ids(member_id)
        selected = exclude_blacklisted(selected, blacklist)

        if len(selected) < limit:
            if all_scores is None:
                all_scores = await self.scores.get_all_scores(member_id)
            exclude_ids = build_exclude_ids(member_id, first_degree, selected, blacklist)
            selected = fill_from_interaction_scores(selected, all_scores, exclude_ids, limit)

        if len(selected) < limit:
            exclude_ids = build_exclude_ids(member_id, first_degree, selected, blacklist)
            selected = await fill_from_recent_members(self.directory, selected, exclude_ids, limit)

        return selected

    async def recommend(self, member_id: int) -> list[RecommendedFriend]:
        logger.info("Friend recommendation started: member_id=%s", member_id)
        candidates = await self.rank(member_id)
        friends = await assemble_recommendations(self.directory, candidates)
        logger.info(
            "Friend recommendation finished: member_id=%s, count=%d", member_id, len(friends)
        )
        return friends

    async def get_recommendations(
        self, member_id: int, page: int = 0, page_size: int = 10
    ) -> RecommendationPage:
        """Return one page of the ranked list; pages past the end are empty."""
        if page < 0:
            raise ValueError("page must be >= 0")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        friends = await self.recommend(member_id)
        start = page * page_size
        return RecommendationPage(
            member_id=member_id,
            page=page,
            size=page_size,
            total=len(friends),
            items=friends[start:start + page_size],
        )
