"""End-to-end tests for the FriendRecommender over in-memory stores."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from ..config import RecommendConfig
from ..errors import StoreUnavailableError
from ..recommend.scoring import calculate_total_score
from ..recommend.service import FriendRecommender
from ..stores.memory import (
    InMemoryFriendGraphStore,
    InMemoryInteractionScoreStore,
    InMemoryMemberDirectory,
)

R, A, B, C, D = 1, 2, 3, 4, 5
BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def make_directory(member_ids, newest_first=()) -> InMemoryMemberDirectory:
    """Register members; ids in *newest_first* get the latest signup times."""
    directory = InMemoryMemberDirectory()
    for member_id in member_ids:
        directory.add_member(member_id, f"member-{member_id}", created_at=BASE_TIME)
    for rank, member_id in enumerate(newest_first):
        directory.add_member(
            member_id, f"member-{member_id}", created_at=BASE_TIME + timedelta(days=100 - rank)
        )
    return directory


@pytest.fixture
def recent_ids():
    return list(range(109, 99, -1))  # 109 is the newest signup


@pytest.fixture
def world(recent_ids):
    graph = InMemoryFriendGraphStore({R: [A, B], A: [C], B: [C, D]})
    scores = InMemoryInteractionScoreStore()
    directory = make_directory([R, A, B, C, D], newest_first=recent_ids)
    return graph, scores, directory


def recommender_for(world, **config) -> FriendRecommender:
    graph, scores, directory = world
    return FriendRecommender(graph, scores, directory, RecommendConfig(**config))


def ids(friends):
    return [f.member_id for f in friends]


# ---------------------------------------------------------------------------
# Scenario
# ---------------------------------------------------------------------------

class TestScenario:
    @pytest.mark.asyncio
    async def test_friends_of_friends_then_backfill(self, world, recent_ids):
        friends = await recommender_for(world).recommend(R)

        assert len(friends) == 10
        assert ids(friends)[:2] == [C, D]
        assert ids(friends)[2:] == recent_ids[:8]

        c, d = friends[0], friends[1]
        assert c.depth == 2 and c.many_acquaintance is True
        assert c.acquaintance_id in {A, B}
        assert c.acquaintance_name == f"member-{c.acquaintance_id}"
        assert d.depth == 2 and d.many_acquaintance is False
        assert d.acquaintance_id == B
        assert all(f.depth == 0 for f in friends[2:])

    @pytest.mark.asyncio
    async def test_scores_behind_the_ranking(self, world):
        candidates = await recommender_for(world).rank(R)

        assert calculate_total_score(candidates[0]) == 54.0
        assert calculate_total_score(candidates[1]) == 52.0


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

class TestExclusions:
    @pytest.mark.asyncio
    async def test_never_recommends_self_or_friends(self, world):
        graph, scores, directory = world
        for other_id, score in {A: 10.0, B: 9.0, R: 8.0, C: 1.0}.items():
            scores.set_score(R, other_id, score)

        friends = await recommender_for(world).recommend(R)

        assert R not in ids(friends)
        assert A not in ids(friends)
        assert B not in ids(friends)

    @pytest.mark.asyncio
    async def test_blacklist_is_bidirectional(self, world, recent_ids):
        graph, scores, directory = world
        directory.block(R, C)          # R blocked C
        directory.block(D, R)          # D blocked R
        directory.block(R, recent_ids[0])

        friends = await recommender_for(world).recommend(R)

        assert C not in ids(friends)
        assert D not in ids(friends)
        assert recent_ids[0] not in ids(friends)
        # 15 members minus R, two friends and three blocked ones
        assert len(friends) == 9

    @pytest.mark.asyncio
    async def test_blocked_member_does_not_see_blocker(self, world):
        graph, scores, directory = world
        directory.block(R, C)

        # R is a friend-of-friend of C through both A and B
        friends = await recommender_for(world).recommend(C)

        assert R not in ids(friends)
        assert D in ids(friends)


class TestInteractionScores:
    @pytest.mark.asyncio
    async def test_injected_scores_reorder_within_depth(self, world):
        graph, scores, directory = world
        scores.set_score(R, D, 5.0)

        friends = await recommender_for(world).recommend(R)

        # D: 50 + 2 + 5 = 57 beats C: 54
        assert ids(friends)[:2] == [D, C]

    @pytest.mark.asyncio
    async def test_interaction_backfill_before_recent_members(self, world, recent_ids):
        graph, scores, directory = world
        directory.add_member(200, "member-200", created_at=BASE_TIME)
        directory.add_member(201, "member-201", created_at=BASE_TIME)
        scores.set_score(R, 201, 4.0)
        scores.set_score(R, 200, 1.0)

        friends = await recommender_for(world).recommend(R)

        assert ids(friends)[:4] == [C, D, 201, 200]
        assert ids(friends)[4:] == recent_ids[:6]


class TestFallback:
    @pytest.mark.asyncio
    async def test_no_friends_uses_interaction_scores(self):
        graph = InMemoryFriendGraphStore()
        scores = InMemoryInteractionScoreStore({50: {60: 3.0, 61: 12.0, 62: 7.0, 50: 1.0}})
        directory = make_directory([50, 60, 61, 62])
        recommender = FriendRecommender(graph, scores, directory, RecommendConfig(recommend_limit=3))

        friends = await recommender.recommend(50)

        assert ids(friends) == [61, 62, 60]
        assert all(f.depth == 0 for f in friends)
        assert graph.batch_calls == []

    @pytest.mark.asyncio
    async def test_no_second_degree_uses_interaction_scores(self):
        # 50's only friend has no other friends
        graph = InMemoryFriendGraphStore({50: [51]})
        scores = InMemoryInteractionScoreStore({50: {51: 9.0, 60: 2.0, 61: 4.0}})
        directory = make_directory([50, 51, 60, 61])
        recommender = FriendRecommender(graph, scores, directory, RecommendConfig(recommend_limit=2))

        friends = await recommender.recommend(50)

        assert ids(friends) == [61, 60]


class TestBackfillCompleteness:
    @pytest.mark.asyncio
    async def test_result_size_is_bounded_by_eligible_members(self):
        graph = InMemoryFriendGraphStore({R: [A], A: [C]})
        scores = InMemoryInteractionScoreStore()
        directory = make_directory([R, A, C, 40, 41])

        friends = await FriendRecommender(graph, scores, directory).recommend(R)

        # eligible: C (graph), 40 and 41 (recent); R and A are excluded
        assert sorted(ids(friends)) == [C, 40, 41]
        assert ids(friends)[0] == C

    @pytest.mark.asyncio
    async def test_small_limit(self, world):
        friends = await recommender_for(world, recommend_limit=1).recommend(R)
        assert ids(friends) == [C]


class TestPagination:
    @pytest.mark.asyncio
    async def test_pages_slice_ranked_list(self, world, recent_ids):
        recommender = recommender_for(world)

        first = await recommender.get_recommendations(R, page=0, page_size=4)
        second = await recommender.get_recommendations(R, page=1, page_size=4)

        assert first.total == 10
        assert ids(first.items) == [C, D, *recent_ids[:2]]
        assert ids(second.items) == recent_ids[2:6]

    @pytest.mark.asyncio
    async def test_page_beyond_limit_is_empty(self, world):
        page = await recommender_for(world).get_recommendations(R, page=5, page_size=10)
        assert page.items == []
        assert page.total == 10

    @pytest.mark.asyncio
    async def test_invalid_paging_arguments(self, world):
        recommender = recommender_for(world)
        with pytest.raises(ValueError):
            await recommender.get_recommendations(R, page=-1)
        with pytest.raises(ValueError):
            await recommender.get_recommendations(R, page_size=0)


class TestFailures:
    @pytest.mark.asyncio
    async def test_store_errors_propagate(self, world):
        class BrokenGraph(InMemoryFriendGraphStore):
            async def get_friends_batch(self, member_ids):
                raise StoreUnavailableError("friend graph")

        _, scores, directory = world
        graph = BrokenGraph({R: [A]})
        recommender = FriendRecommender(graph, scores, directory)

        with pytest.raises(StoreUnavailableError):
            await recommender.recommend(R)


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_requests_are_independent(self, world):
        recommender = recommender_for(world)

        for_r, for_c = await asyncio.gather(recommender.recommend(R), recommender.recommend(C))

        assert ids(for_r)[:2] == [C, D]
        assert C not in ids(for_c)
        assert A not in ids(for_c) and B not in ids(for_c)
        assert ids(for_c)[0] == R
