"""Interactions router – write side of the interaction-score store.

POST /interactions
    Record one interaction between two members (idempotent per key).

POST /interactions/decay
    Apply the periodic score decay.

DELETE /members/{member_id}/interactions
    Forget every score involving a withdrawn member.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..dependencies import Stores, get_stores
from ..lib.errors import StoreUnavailableError
from ..security import verify_api_key

router = APIRouter(tags=["interactions"], dependencies=[Depends(verify_api_key)])

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class InteractionRequest(BaseModel):
    member_id: int = Field(..., ge=1, description="Member who interacted")
    target_id: int = Field(..., ge=1, description="Member who was interacted with")
    idempotency_key: str = Field(
        ..., min_length=1, description="Business key of the event, e.g. POST_LIKE:12:34"
    )


class InteractionResponse(BaseModel):
    applied: bool = Field(..., description="False when the event was already recorded")


class DecayResponse(BaseModel):
    updated: int


class RemoveResponse(BaseModel):
    deleted: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/interactions", response_model=InteractionResponse)
async def record_interaction(
    payload: InteractionRequest,
    stores: Stores = Depends(get_stores),
) -> InteractionResponse:
    if payload.member_id == payload.target_id:
        raise HTTPException(status_code=422, detail="A member cannot interact with themselves")

    try:
        applied = await stores.scores.add_interaction(
            payload.member_id, payload.target_id, payload.idempotency_key
        )
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return InteractionResponse(applied=applied)


@router.post("/interactions/decay", response_model=DecayResponse)
async def decay_interactions(stores: Stores = Depends(get_stores)) -> DecayResponse:
    try:
        updated = await stores.scores.apply_decay()
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    logger.info("Interaction decay applied to %d pairs", updated)
    return DecayResponse(updated=updated)


@router.delete("/members/{member_id}/interactions", response_model=RemoveResponse)
async def remove_member_interactions(
    member_id: int,
    stores: Stores = Depends(get_stores),
) -> RemoveResponse:
    try:
        deleted = await stores.scores.remove_member(member_id)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return RemoveResponse(deleted=deleted)
