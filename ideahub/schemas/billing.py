from typing import Literal, Optional

from pydantic import BaseModel

PlanKey = Literal["monthly", "quarterly", "lifetime"]


class PlanOut(BaseModel):
    key: str
    price_id: str
    name: str
    price: str
    interval: str
    description: str
    features: list[str]


class CheckoutRequest(BaseModel):
    plan_type: PlanKey
    # Optional override, otherwise taken from the plan catalog
    price_id: Optional[str] = None


class CheckoutResponse(BaseModel):
    url: str
    session_id: Optional[str] = None


class ConnectPurchaseResponse(BaseModel):
    url: Optional[str] = None
    session_id: Optional[str] = None
    requires_onboarding: bool = False
    onboarding_url: Optional[str] = None
    message: Optional[str] = None


class OnboardingResponse(BaseModel):
    onboarding_url: str
    stripe_account_id: str
    account_enabled: bool


class BillingStatus(BaseModel):
    is_premium: bool
    idea_id: Optional[str] = None
    idea_owned: Optional[bool] = None
    partnership_id: Optional[str] = None
    partnership_status: Optional[str] = None
