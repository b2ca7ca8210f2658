"""Abstract store interfaces consumed by the recommendation engine.

The engine only ever talks to these three collaborators.  Every lookup that
fans out over candidates is a single batched call; implementations must not
turn a batch into one round trip per id.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, Field


class MemberDisplayInfo(BaseModel):
    """Display fields for one member."""

    member_id: int = Field(..., description="Member id")
    name: str = Field(..., description="Display name")


class FriendGraphStore(ABC):
    """Read access to the friendship graph."""

    @abstractmethod
    async def get_friends(self, member_id: int, limit: int) -> set[int]:
        """Return up to *limit* direct friends of *member_id*."""
        ...

    @abstractmethod
    async def get_friends_batch(self, member_ids: Iterable[int]) -> dict[int, list[int]]:
        """Return the direct friends of every id in *member_ids*.

        The friend lists keep the store's natural order so callers can rely
        on "first discovered" semantics.  Ids without friends may be absent.
        """
        ...


class InteractionScoreStore(ABC):
    """Pairwise behavioural affinity between two members."""

    @abstractmethod
    async def get_score(self, member_id: int, other_id: int) -> float:
        ...

    @abstractmethod
    async def get_scores_batch(
        self, member_id: int, candidate_ids: Iterable[int]
    ) -> dict[int, float]:
        """Return scores for the candidates that have one; others are omitted."""
        ...

    @abstractmethod
    async def get_all_scores(self, member_id: int) -> dict[int, float]:
        """Return every score *member_id* has, highest first."""
        ...

    @abstractmethod
    async def add_interaction(
        self, member_id: int, target_id: int, idempotency_key: str
    ) -> bool:
        """Bump both directed scores once per *idempotency_key*."""
        ...

    @abstractmethod
    async def apply_decay(self, rate: float, threshold: float) -> int:
        ...

    @abstractmethod
    async def remove_member(self, member_id: int) -> int:
        ...


class MemberDirectory(ABC):
    """Member lookups: blacklists, recent signups and display names."""

    @abstractmethod
    async def find_blacklist_ids(self, member_id: int) -> set[int]:
        """Ids *member_id* blocked plus ids that blocked *member_id*."""
        ...

    @abstractmethod
    async def find_recent_member_ids(self, exclude_ids: set[int], limit: int) -> list[int]:
        """Newest members first, skipping *exclude_ids*."""
        ...

    @abstractmethod
    async def find_display_info(self, member_ids: list[int]) -> list[MemberDisplayInfo]:
        ...
