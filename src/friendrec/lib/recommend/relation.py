"""Traversal result for one recommendation request.

A :class:`FriendRelation` is built once per request by
:mod:`.traversal`, enriched with interaction scores and then flattened into
scored :class:`~.scoring.RecommendCandidate` objects.  It is frozen: every
stage returns a new value instead of mutating the previous one.
"""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from .scoring import DEPTH_SECOND, DEPTH_THIRD, RecommendCandidate


class CandidateInfo(BaseModel):
    """A member reached by the traversal and the bridges that reached it.

    ``connection_ids`` holds first-degree friends for a depth-2 candidate and
    depth-2 candidates for a depth-3 one, in discovery order.  It never
    contains the requester or the candidate itself.
    """

    model_config = ConfigDict(frozen=True)

    candidate_id: int
    connection_ids: tuple[int, ...] = ()
    interaction_score: float = 0.0


class FriendRelation(BaseModel):
    model_config = ConfigDict(frozen=True)

    member_id: int = Field(..., description="Requesting member")
    first_degree_ids: frozenset[int] = Field(default_factory=frozenset)
    second_degree: dict[int, CandidateInfo] = Field(
        default_factory=dict, description="Depth-2 candidates keyed by id, discovery order"
    )
    third_degree: dict[int, CandidateInfo] = Field(
        default_factory=dict, description="Depth-3 candidates keyed by id, discovery order"
    )

    @property
    def second_degree_ids(self) -> frozenset[int]:
        return frozenset(self.second_degree)

    @property
    def second_degree_candidates(self) -> list[CandidateInfo]:
        return list(self.second_degree.values())

    @property
    def third_degree_candidates(self) -> list[CandidateInfo]:
        return list(self.third_degree.values())

    @property
    def candidate_ids(self) -> list[int]:
        return [*self.second_degree, *self.third_degree]

    def with_interaction_scores(self, scores: Mapping[int, float]) -> "FriendRelation":
        """Return a copy whose candidates carry the matching interaction score."""

        def inject(infos: dict[int, CandidateInfo]) -> dict[int, CandidateInfo]:
            return {
                cid: info.model_copy(update={"interaction_score": scores[cid]})
                if cid in scores
                else info
                for cid, info in infos.items()
            }

        return self.model_copy(
            update={
                "second_degree": inject(self.second_degree),
                "third_degree": inject(self.third_degree),
            }
        )

    def to_candidates(self) -> list[RecommendCandidate]:
        """Flatten into scorable candidates, depth 2 first, discovery order kept."""
        candidates: list[RecommendCandidate] = []

        for info in self.second_degree.values():
            candidate = RecommendCandidate(
                member_id=info.candidate_id,
                depth=DEPTH_SECOND,
                interaction_score=info.interaction_score,
            )
            for bridge_id in info.connection_ids:
                candidate.add_common_friend(bridge_id)
            candidates.append(candidate)

        for info in self.third_degree.values():
            # Credit is the bridges' own common-friend counts, not the
            # candidate's real common friends at depth 3.
            virtual_common_count = sum(
                len(self.second_degree[bridge_id].connection_ids)
                for bridge_id in info.connection_ids
                if bridge_id in self.second_degree
            )
            candidate = RecommendCandidate(
                member_id=info.candidate_id,
                depth=DEPTH_THIRD,
                # placeholder ids; only the size is meaningful
                common_friends=set(range(virtual_common_count)),
                interaction_score=info.interaction_score,
            )
            candidate.add_virtual_score(virtual_common_count)
            candidates.append(candidate)

        return candidates
