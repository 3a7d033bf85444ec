from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class WalletOut(BaseModel):
    id: str
    balance_cents: int
    total_earned_cents: int
    total_withdrawn_cents: int

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionOut(BaseModel):
    id: str
    type: str
    amount_cents: int
    description: Optional[str] = None
    idea_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WithdrawalOut(BaseModel):
    id: str
    amount_cents: int
    status: str
    requested_at: datetime
    processed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletSummary(BaseModel):
    wallet: Optional[WalletOut] = None
    transactions: list[WalletTransactionOut] = []
    withdrawal_requests: list[WithdrawalOut] = []


class BankDetails(BaseModel):
    account_holder_name: str = Field(min_length=1)
    bank_name: Optional[str] = None
    account_number: str = Field(min_length=4)
    routing_number: str = Field(min_length=4)


class WithdrawalCreate(BaseModel):
    amount_cents: PositiveInt
    bank_details: BankDetails
