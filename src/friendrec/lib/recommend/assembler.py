"""Turn ranked candidates into display-ready recommendations."""

import logging

from ...models import RecommendedFriend
from ..stores.base import MemberDirectory
from .scoring import DEPTH_SECOND, RecommendCandidate

logger = logging.getLogger(__name__)


async def assemble_recommendations(
    directory: MemberDirectory,
    candidates: list[RecommendCandidate],
) -> list[RecommendedFriend]:
    """Attach display names with at most two batched lookups.

    The first lookup covers every candidate, the second the acquaintances
    of depth-2 candidates.  Candidates without a directory entry are dropped;
    ranking order is preserved.
    """
    if not candidates:
        return []

    infos = await directory.find_display_info([c.member_id for c in candidates])
    names = {info.member_id: info.name for info in infos}

    acquaintance_ids: list[int] = []
    for c in candidates:
        if c.depth == DEPTH_SECOND and c.acquaintance_id is not None:
            if c.acquaintance_id not in acquaintance_ids:
                acquaintance_ids.append(c.acquaintance_id)

    acquaintance_names: dict[int, str] = {}
    if acquaintance_ids:
        for info in await directory.find_display_info(acquaintance_ids):
            acquaintance_names[info.member_id] = info.name

    friends: list[RecommendedFriend] = []
    for c in candidates:
        name = names.get(c.member_id)
        if name is None:
            logger.warning("Dropping recommendation %s: no directory entry", c.member_id)
            continue

        acquaintance_id = None
        many_acquaintance = False
        if c.depth == DEPTH_SECOND and c.acquaintance_id is not None:
            acquaintance_id = c.acquaintance_id
            many_acquaintance = c.many_acquaintance

        friends.append(
            RecommendedFriend(
                member_id=c.member_id,
                name=name,
                acquaintance_id=acquaintance_id,
                acquaintance_name=acquaintance_names.get(acquaintance_id),
                many_acquaintance=many_acquaintance,
                depth=c.depth,
            )
        )
    return friends
