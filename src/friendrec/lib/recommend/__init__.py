"""Friend recommendation engine.

Explores the requester's friendship graph (friends-of-friends, then one hop
further when that is not enough), scores candidates by depth, common
friends and interaction score, and backfills short lists.
"""

from .relation import CandidateInfo, FriendRelation
from .scoring import RecommendCandidate, calculate_total_score, rank_candidates
from .service import FriendRecommender
from .traversal import find_friend_relation

__all__ = [
    "CandidateInfo",
    "FriendRelation",
    "FriendRecommender",
    "RecommendCandidate",
    "calculate_total_score",
    "find_friend_relation",
    "rank_candidates",
]
