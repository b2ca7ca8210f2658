"""Bounded breadth-first traversal over the friendship graph.

Starting from the requester's first-degree friends:

1. One batched lookup fetches every friend's friends.  Anyone who is not the
   requester or already a friend becomes a depth-2 candidate, bridged by the
   friend(s) that reached them.
2. Only when fewer than ``recommend_limit`` depth-2 candidates were found, a
   second batched lookup fetches the depth-2 candidates' friends.  New
   members found there become depth-3 candidates bridged by the depth-2
   candidate(s) that reached them.

Depth 3 can only start after depth 2 completes, so the hops run in sequence.
"""

import logging
from collections.abc import Iterable, Mapping

from ..elasticsearch import coerce_member_id
from ..stores.base import FriendGraphStore
from .relation import CandidateInfo, FriendRelation

logger = logging.getLogger(__name__)


def collect_candidates(
    results: Mapping[int, Iterable[int]],
    bridge_ids: Iterable[int],
    excluded_ids: set[int],
) -> dict[int, CandidateInfo]:
    """Turn one hop of batched friend lists into candidates.

    *results* maps a bridge id to that bridge's friends.  Targets in
    *excluded_ids* are skipped, as is any bridge that was not asked for.
    Bridges are recorded in discovery order; malformed ids are skipped
    without aborting the hop.
    """
    requested = set(bridge_ids)
    bridges_by_target: dict[int, dict[int, None]] = {}

    for raw_bridge, targets in results.items():
        bridge_id = coerce_member_id(raw_bridge)
        if bridge_id is None or bridge_id not in requested:
            logger.warning("Skipping friend list for unexpected bridge %r", raw_bridge)
            continue

        if targets is None:
            continue
        if not isinstance(targets, (list, tuple)):
            logger.warning("Ignoring malformed friend list %r of bridge %s", targets, bridge_id)
            continue

        for raw_target in targets:
            target_id = coerce_member_id(raw_target)
            if target_id is None:
                logger.warning("Skipping malformed friend id %r of bridge %s", raw_target, bridge_id)
                continue
            if target_id in excluded_ids or target_id == bridge_id:
                continue
            bridges_by_target.setdefault(target_id, {})[bridge_id] = None

    return {
        target_id: CandidateInfo(candidate_id=target_id, connection_ids=tuple(bridges))
        for target_id, bridges in bridges_by_target.items()
    }


async def find_friend_relation(
    graph: FriendGraphStore,
    member_id: int,
    first_degree_ids: Iterable[int],
    recommend_limit: int,
) -> FriendRelation | None:
    """Explore the graph around *member_id*.

    Returns ``None`` when the requester has no friends, which tells the
    caller to fall back to interaction scores.
    """
    first_degree = frozenset(first_degree_ids) - {member_id}
    if not first_degree:
        return None

    second_results = await graph.get_friends_batch(first_degree)
    second_degree = collect_candidates(
        second_results,
        first_degree,
        excluded_ids={member_id, *first_degree},
    )
    logger.debug(
        "Member %s: %d first-degree friends, %d second-degree candidates",
        member_id,
        len(first_degree),
        len(second_degree),
    )

    third_degree: dict[int, CandidateInfo] = {}
    if second_degree and len(second_degree) < recommend_limit:
        third_results = await graph.get_friends_batch(second_degree.keys())
        third_degree = collect_candidates(
            third_results,
            second_degree.keys(),
            excluded_ids={member_id, *first_degree, *second_degree},
        )
        logger.debug("Member %s: %d third-degree candidates", member_id, len(third_degree))

    return FriendRelation(
        member_id=member_id,
        first_degree_ids=first_degree,
        second_degree=second_degree,
        third_degree=third_degree,
    )
