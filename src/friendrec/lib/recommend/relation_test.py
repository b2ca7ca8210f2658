"""Tests for FriendRelation score injection and candidate extraction."""

import pytest

from ..recommend.relation import CandidateInfo, FriendRelation
from ..recommend.scoring import calculate_total_score

R, A, B, C, D, E, F = 1, 2, 3, 4, 5, 6, 7


@pytest.fixture
def relation():
    return FriendRelation(
        member_id=R,
        first_degree_ids=frozenset({A, B}),
        second_degree={
            C: CandidateInfo(candidate_id=C, connection_ids=(A, B)),
            D: CandidateInfo(candidate_id=D, connection_ids=(B,)),
        },
        third_degree={
            E: CandidateInfo(candidate_id=E, connection_ids=(C,)),
            F: CandidateInfo(candidate_id=F, connection_ids=(C, D)),
        },
    )


class TestWithInteractionScores:
    def test_returns_new_relation(self, relation):
        scored = relation.with_interaction_scores({C: 3.0, F: 1.0})

        assert scored is not relation
        assert scored.second_degree[C].interaction_score == 3.0
        assert scored.third_degree[F].interaction_score == 1.0
        assert scored.second_degree[D].interaction_score == 0.0
        # original untouched
        assert relation.second_degree[C].interaction_score == 0.0

    def test_relation_is_frozen(self, relation):
        with pytest.raises(Exception):
            relation.member_id = 5

    def test_second_degree_ids_match_candidates(self, relation):
        assert relation.second_degree_ids == {
            info.candidate_id for info in relation.second_degree_candidates
        }


class TestToCandidates:
    def test_second_degree_candidates(self, relation):
        candidates = {c.member_id: c for c in relation.to_candidates()}

        c = candidates[C]
        assert c.depth == 2
        assert c.common_friends == {A, B}
        assert c.acquaintance_id == A
        assert c.many_acquaintance is True
        assert calculate_total_score(c) == 54.0

        d = candidates[D]
        assert d.common_friends == {B}
        assert d.many_acquaintance is False
        assert calculate_total_score(d) == 52.0

    def test_third_degree_inherits_bridge_common_counts(self, relation):
        candidates = {c.member_id: c for c in relation.to_candidates()}

        # E is bridged by C, who has two common friends with R
        e = candidates[E]
        assert e.depth == 3
        assert len(e.common_friends) == 2
        assert e.virtual_score == pytest.approx(1.0)
        assert e.acquaintance_id is None
        assert calculate_total_score(e) == pytest.approx(21.0)

        # F is bridged by C (2) and D (1)
        f = candidates[F]
        assert len(f.common_friends) == 3
        assert calculate_total_score(f) == pytest.approx(21.5)

    def test_interaction_scores_flow_into_candidates(self, relation):
        candidates = {
            c.member_id: c
            for c in relation.with_interaction_scores({D: 25.0}).to_candidates()
        }
        assert candidates[D].interaction_score == 25.0
        assert calculate_total_score(candidates[D]) == 62.0

    def test_depth_two_first(self, relation):
        assert [c.depth for c in relation.to_candidates()] == [2, 2, 3, 3]
