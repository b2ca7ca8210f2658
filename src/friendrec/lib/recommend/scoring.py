"""Scoring model for recommendation candidates.

A candidate's total score is::

    base(depth) + common_score + min(interaction_score, 10)

* ``base`` is 50 for friends-of-friends (depth 2), 20 for depth 3 and 0 for
  candidates with no graph relation (depth 0).
* ``common_score`` is ``2`` per common friend, saturating at 10 friends, for
  depth 2; for depth 3 it is the inherited ``virtual_score`` capped at 5.
* The interaction term is capped at 10 so behaviour can reorder candidates
  within a depth but never lift one above a closer depth.
"""

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

DEPTH_NONE = 0
DEPTH_SECOND = 2
DEPTH_THIRD = 3

BASE_SCORES = {DEPTH_SECOND: 50.0, DEPTH_THIRD: 20.0}

COMMON_FRIEND_CAP = 10
COMMON_FRIEND_WEIGHT = 2.0

# Depth-3 candidates inherit half a point per common friend of their bridge.
VIRTUAL_SCORE_WEIGHT = 0.5
VIRTUAL_SCORE_CAP = 5.0

INTERACTION_SCORE_CAP = 10.0


class RecommendCandidate(BaseModel):
    """One scorable recommendation candidate and its accumulated signals."""

    member_id: int = Field(..., description="Recommended member")
    depth: int = Field(DEPTH_NONE, description="2 or 3 for graph candidates, 0 otherwise")
    common_friends: set[int] = Field(default_factory=set)
    virtual_score: float = Field(0.0, description="Common-friend credit inherited at depth 3")
    interaction_score: float = Field(0.0, description="Raw behavioural affinity")
    acquaintance_id: int | None = Field(
        None, description="First bridge friend, shown as 'how you might know them'"
    )
    many_acquaintance: bool = Field(False, description="True once two or more bridges exist")

    def add_common_friend(self, bridge_id: int) -> None:
        if bridge_id in self.common_friends:
            return
        self.common_friends.add(bridge_id)
        if self.acquaintance_id is None:
            self.acquaintance_id = bridge_id
        if len(self.common_friends) >= 2:
            self.many_acquaintance = True

    def add_virtual_score(self, bridge_common_count: int) -> None:
        self.virtual_score += bridge_common_count * VIRTUAL_SCORE_WEIGHT


def common_score(candidate: RecommendCandidate) -> float:
    if candidate.depth == DEPTH_SECOND:
        return min(len(candidate.common_friends), COMMON_FRIEND_CAP) * COMMON_FRIEND_WEIGHT
    if candidate.depth == DEPTH_THIRD:
        return min(candidate.virtual_score, VIRTUAL_SCORE_CAP)
    return 0.0


def calculate_total_score(candidate: RecommendCandidate) -> float:
    """Return the comparable score of *candidate*; has no side effects."""
    base = BASE_SCORES.get(candidate.depth, 0.0)
    interaction = min(candidate.interaction_score, INTERACTION_SCORE_CAP)
    return base + common_score(candidate) + interaction


def rank_candidates(candidates: list[RecommendCandidate]) -> list[RecommendCandidate]:
    """Sort by total score, highest first; ties keep their incoming order."""
    return sorted(candidates, key=calculate_total_score, reverse=True)
