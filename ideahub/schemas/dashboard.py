from pydantic import BaseModel

from ideahub.schemas.idea import IdeaOut


class CreatorDashboard(BaseModel):
    total_ideas: int
    total_upvotes: int
    total_comments: int
    nfts_minted: int
    recent_ideas: list[IdeaOut]


class InvestorDashboard(BaseModel):
    total_purchased: int
    nfts_owned: int
    owned_ideas: list[IdeaOut]
    trending_ideas: list[IdeaOut]
