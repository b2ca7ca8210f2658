"""Wiring between the FastAPI app state and the recommendation engine."""

import os
from typing import NamedTuple

from fastapi import Request

from .lib.config import RecommendConfig, index_name
from .lib.recommend import FriendRecommender
from .lib.stores import (
    EsFriendGraphStore,
    EsInteractionScoreStore,
    EsMemberDirectory,
    FriendGraphStore,
    InMemoryFriendGraphStore,
    InMemoryInteractionScoreStore,
    InMemoryMemberDirectory,
    InteractionScoreStore,
    MemberDirectory,
)

STORE_BACKENDS = ("elasticsearch", "memory")


class Stores(NamedTuple):
    graph: FriendGraphStore
    scores: InteractionScoreStore
    directory: MemberDirectory


def get_store_backend(environ=None) -> str:
    environ = os.environ if environ is None else environ
    backend = environ.get("STORE_BACKEND") or "elasticsearch"
    if backend not in STORE_BACKENDS:
        raise ValueError(f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {backend!r}")
    return backend


def elasticsearch_stores(es, config: RecommendConfig, environ=None) -> Stores:
    return Stores(
        graph=EsFriendGraphStore(es, index=index_name("friends", environ)),
        scores=EsInteractionScoreStore(
            es,
            index=index_name("interactions", environ),
            events_index=index_name("interaction_events", environ),
            scan_limit=config.interaction_scan_limit,
        ),
        directory=EsMemberDirectory(
            es,
            members_index=index_name("members", environ),
            blacklists_index=index_name("blacklists", environ),
        ),
    )


def memory_stores() -> Stores:
    return Stores(
        graph=InMemoryFriendGraphStore(),
        scores=InMemoryInteractionScoreStore(),
        directory=InMemoryMemberDirectory(),
    )


def get_config(request: Request) -> RecommendConfig:
    return getattr(request.app.state, "config", None) or RecommendConfig()


def get_stores(request: Request) -> Stores:
    """Stores attached in the lifespan (tests set ``app.state.stores``)."""
    return request.app.state.stores


def get_recommender(request: Request) -> FriendRecommender:
    stores = get_stores(request)
    return FriendRecommender(
        graph=stores.graph,
        scores=stores.scores,
        directory=stores.directory,
        config=get_config(request),
    )
