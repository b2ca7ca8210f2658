from pydantic import BaseModel, Field


class RecommendedFriend(BaseModel):
    """A display-ready friend recommendation."""

    member_id: int = Field(..., description="The recommended member")
    name: str = Field(..., description="Display name of the recommended member")
    acquaintance_id: int | None = Field(
        None, description="A mutual friend to show as 'how you might know them'"
    )
    acquaintance_name: str | None = Field(None, description="Display name of the mutual friend")
    many_acquaintance: bool = Field(
        False, description="True when there are other mutual friends besides the one shown"
    )
    depth: int = Field(
        ..., description="2 or 3 for friends-of-friends, 0 for interaction/new-member picks"
    )


class RecommendationPage(BaseModel):
    """One page of the ranked recommendation list."""

    member_id: int
    page: int = Field(..., ge=0)
    size: int = Field(..., ge=1)
    total: int = Field(..., ge=0, description="Size of the full (already limited) list")
    items: list[RecommendedFriend] = Field(default_factory=list)
