from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CollabRequestCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    linkedin_url: Optional[str] = None
    message: str = Field(min_length=1)
    nda_agreed: bool = False


class CollabRequestOut(BaseModel):
    id: str
    idea_id: str
    investor_id: str
    name: str
    email: str
    linkedin_url: Optional[str] = None
    message: str
    accepted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NdaOut(BaseModel):
    idea_id: str
    text: str


class PartnershipStart(BaseModel):
    """NDA step: signature plus investor contact details."""
    idea_id: str
    signature: str = Field(min_length=1)
    investor_name: str = Field(min_length=1)
    investor_email: str = Field(min_length=3)


class PartnershipStartResponse(BaseModel):
    partnership_id: str
    url: str


class PartnershipMessage(BaseModel):
    message: str = Field(min_length=1, max_length=5000)
    investor_name: Optional[str] = None
    investor_email: Optional[str] = None


class PartnershipDecision(BaseModel):
    status: Literal["accepted", "declined"]


class PartnershipOut(BaseModel):
    id: str
    idea_id: str
    creator_id: str
    investor_id: str
    investor_name: str
    investor_email: str
    message: Optional[str] = None
    agreed_nda: bool
    payment_amount_cents: int
    payment_completed: bool
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
