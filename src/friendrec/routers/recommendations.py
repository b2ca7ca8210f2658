"""Recommendations router – exposes the friend recommendation engine.

GET /members/{member_id}/recommendations
    One page of the ranked, already-limited recommendation list.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from ..dependencies import get_recommender
from ..lib.errors import StoreUnavailableError
from ..lib.recommend import FriendRecommender
from ..models import RecommendationPage
from ..security import verify_api_key

router = APIRouter(tags=["recommendations"], dependencies=[Depends(verify_api_key)])

logger = logging.getLogger(__name__)


@router.get("/members/{member_id}/recommendations", response_model=RecommendationPage)
async def member_recommendations(
    member_id: int = Path(..., ge=1),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(10, ge=1, description="Page size"),
    recommender: FriendRecommender = Depends(get_recommender),
) -> RecommendationPage:
    """Return recommended friends for *member_id*.

    Pages beyond the end of the list come back with no items.
    """
    max_size = recommender.config.max_page_size
    if size > max_size:
        raise HTTPException(status_code=422, detail=f"size must be <= {max_size}")

    try:
        return await recommender.get_recommendations(member_id, page=page, page_size=size)
    except StoreUnavailableError as exc:
        logger.exception("Friend recommendation failed for member %s", member_id)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
