"""Dict-backed stores for local runs (``STORE_BACKEND=memory``) and tests."""

from collections.abc import Iterable
from datetime import datetime, timezone

from .base import FriendGraphStore, InteractionScoreStore, MemberDirectory, MemberDisplayInfo
from .elasticsearch import (
    INTERACTION_DECAY_RATE,
    INTERACTION_DECAY_THRESHOLD,
    INTERACTION_INCREMENT,
    INTERACTION_MAX_BEFORE_INCREMENT,
)


class InMemoryFriendGraphStore(FriendGraphStore):
    def __init__(self, friendships: dict[int, Iterable[int]] | None = None):
        self._friends: dict[int, list[int]] = {}
        for member_id, friend_ids in (friendships or {}).items():
            for friend_id in friend_ids:
                self.add_friendship(member_id, friend_id)
        self.batch_calls: list[list[int]] = []

    def add_friendship(self, a: int, b: int) -> None:
        """Connect *a* and *b* in both directions (idempotent)."""
        for x, y in ((a, b), (b, a)):
            friends = self._friends.setdefault(x, [])
            if y not in friends:
                friends.append(y)

    async def get_friends(self, member_id: int, limit: int) -> set[int]:
        return set(self._friends.get(member_id, [])[:limit])

    async def get_friends_batch(self, member_ids: Iterable[int]) -> dict[int, list[int]]:
        ids = list(member_ids)
        self.batch_calls.append(ids)
        return {m: list(self._friends[m]) for m in ids if m in self._friends}


class InMemoryInteractionScoreStore(InteractionScoreStore):
    def __init__(self, scores: dict[int, dict[int, float]] | None = None):
        self._scores: dict[int, dict[int, float]] = {
            m: dict(targets) for m, targets in (scores or {}).items()
        }
        self._events: set[str] = set()

    def set_score(self, member_id: int, target_id: int, score: float) -> None:
        self._scores.setdefault(member_id, {})[target_id] = score

    async def get_score(self, member_id: int, other_id: int) -> float:
        return self._scores.get(member_id, {}).get(other_id, 0.0)

    async def get_scores_batch(
        self, member_id: int, candidate_ids: Iterable[int]
    ) -> dict[int, float]:
        mine = self._scores.get(member_id, {})
        return {c: mine[c] for c in candidate_ids if c in mine}

    async def get_all_scores(self, member_id: int) -> dict[int, float]:
        mine = self._scores.get(member_id, {})
        ordered = sorted(mine.items(), key=lambda item: (-item[1], item[0]))
        return dict(ordered)

    async def add_interaction(
        self, member_id: int, target_id: int, idempotency_key: str
    ) -> bool:
        if idempotency_key in self._events:
            return False
        self._events.add(idempotency_key)
        for a, b in ((member_id, target_id), (target_id, member_id)):
            mine = self._scores.setdefault(a, {})
            current = mine.get(b)
            if current is None:
                mine[b] = INTERACTION_INCREMENT
            elif current <= INTERACTION_MAX_BEFORE_INCREMENT:
                mine[b] = current + INTERACTION_INCREMENT
        return True

    async def apply_decay(
        self,
        rate: float = INTERACTION_DECAY_RATE,
        threshold: float = INTERACTION_DECAY_THRESHOLD,
    ) -> int:
        updated = 0
        for mine in self._scores.values():
            for target_id in list(mine):
                mine[target_id] *= rate
                updated += 1
                if mine[target_id] <= threshold:
                    del mine[target_id]
        return updated

    async def remove_member(self, member_id: int) -> int:
        deleted = len(self._scores.pop(member_id, {}))
        for mine in self._scores.values():
            if mine.pop(member_id, None) is not None:
                deleted += 1
        return deleted


class InMemoryMemberDirectory(MemberDirectory):
    def __init__(self):
        self._members: dict[int, tuple[str, datetime]] = {}
        self._blocks: set[tuple[int, int]] = set()

    def add_member(self, member_id: int, name: str, created_at: datetime | None = None) -> None:
        self._members[member_id] = (name, created_at or datetime.now(timezone.utc))

    def block(self, requester_id: int, blocked_id: int) -> None:
        self._blocks.add((requester_id, blocked_id))

    async def find_blacklist_ids(self, member_id: int) -> set[int]:
        blocked: set[int] = set()
        for requester_id, blocked_id in self._blocks:
            if requester_id == member_id:
                blocked.add(blocked_id)
            elif blocked_id == member_id:
                blocked.add(requester_id)
        return blocked

    async def find_recent_member_ids(self, exclude_ids: set[int], limit: int) -> list[int]:
        if limit <= 0:
            return []
        ordered = sorted(self._members.items(), key=lambda item: item[1][1], reverse=True)
        return [m for m, _ in ordered if m not in exclude_ids][:limit]

    async def find_display_info(self, member_ids: list[int]) -> list[MemberDisplayInfo]:
        return [
            MemberDisplayInfo(member_id=m, name=self._members[m][0])
            for m in member_ids
            if m in self._members
        ]
