"""Exclusion and backfill policy applied after ranking.

Once the ranked list is cut to the target size and blacklisted members are
removed, any shortfall is topped up first from the requester's interaction
scores, then from the newest signups.  Backfilled candidates are appended
in discovery order and are not re-ranked.
"""

import logging
from collections.abc import Iterable, Mapping

from ..stores.base import MemberDirectory
from .scoring import DEPTH_NONE, RecommendCandidate

logger = logging.getLogger(__name__)


def exclude_blacklisted(
    candidates: list[RecommendCandidate], blacklist_ids: set[int]
) -> list[RecommendCandidate]:
    return [c for c in candidates if c.member_id not in blacklist_ids]


def build_exclude_ids(
    member_id: int,
    first_degree_ids: Iterable[int],
    candidates: Iterable[RecommendCandidate],
    blacklist_ids: Iterable[int] = (),
) -> set[int]:
    """Ids that must never be added by backfill."""
    exclude_ids = {member_id, *first_degree_ids, *blacklist_ids}
    exclude_ids.update(c.member_id for c in candidates)
    return exclude_ids


def fill_from_interaction_scores(
    candidates: list[RecommendCandidate],
    scores: Mapping[int, float],
    exclude_ids: set[int],
    limit: int,
) -> list[RecommendCandidate]:
    """Append depth-0 candidates from *scores* until *limit* is reached."""
    filled = list(candidates)
    for other_id, score in scores.items():
        if len(filled) >= limit:
            break
        if other_id in exclude_ids:
            continue
        filled.append(
            RecommendCandidate(member_id=other_id, depth=DEPTH_NONE, interaction_score=score)
        )
    return filled


async def fill_from_recent_members(
    directory: MemberDirectory,
    candidates: list[RecommendCandidate],
    exclude_ids: set[int],
    limit: int,
) -> list[RecommendCandidate]:
    """Append the newest members not in *exclude_ids* until *limit* is reached."""
    shortfall = limit - len(candidates)
    if shortfall <= 0:
        return list(candidates)

    recent_ids = await directory.find_recent_member_ids(exclude_ids, shortfall)
    filled = list(candidates)
    seen = set(exclude_ids)
    for recent_id in recent_ids:
        if len(filled) >= limit:
            break
        # the directory may be stale relative to exclude_ids
        if recent_id in seen:
            continue
        seen.add(recent_id)
        filled.append(RecommendCandidate(member_id=recent_id, depth=DEPTH_NONE))

    logger.debug("Backfilled %d recent members", len(filled) - len(candidates))
    return filled
