"""Interaction-score-only candidates for requesters with no usable graph."""

from collections.abc import Iterable, Mapping

from .scoring import DEPTH_NONE, RecommendCandidate


def interaction_candidates(
    member_id: int,
    scores: Mapping[int, float],
    exclude_ids: Iterable[int] = (),
) -> list[RecommendCandidate]:
    """One depth-0 candidate per member *member_id* has a score with.

    The requester and *exclude_ids* (normally the first-degree friends) are
    left out.  Order follows *scores*.
    """
    excluded = {member_id, *exclude_ids}
    return [
        RecommendCandidate(member_id=other_id, depth=DEPTH_NONE, interaction_score=score)
        for other_id, score in scores.items()
        if other_id not in excluded
    ]
