"""Exceptions raised by the recommendation engine and its stores."""


class RecommendationError(Exception):
    """Base class for recommendation failures."""


class StoreUnavailableError(RecommendationError):
    """A backing store failed or returned something we cannot read.

    The engine never retries; the HTTP layer turns this into a 502 so the
    caller can decide to render an empty list instead.
    """

    def __init__(self, store: str, message: str | None = None):
        self.store = store
        super().__init__(message or f"{store} unavailable")
