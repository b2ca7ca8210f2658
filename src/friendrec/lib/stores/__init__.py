"""Store interfaces and their Elasticsearch / in-memory implementations."""

from .base import (
    FriendGraphStore,
    InteractionScoreStore,
    MemberDirectory,
    MemberDisplayInfo,
)
from .elasticsearch import EsFriendGraphStore, EsInteractionScoreStore, EsMemberDirectory
from .memory import InMemoryFriendGraphStore, InMemoryInteractionScoreStore, InMemoryMemberDirectory

__all__ = [
    "FriendGraphStore",
    "InteractionScoreStore",
    "MemberDirectory",
    "MemberDisplayInfo",
    "EsFriendGraphStore",
    "EsInteractionScoreStore",
    "EsMemberDirectory",
    "InMemoryFriendGraphStore",
    "InMemoryInteractionScoreStore",
    "InMemoryMemberDirectory",
]
