from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.db.models import User, WalletTransaction, WithdrawalRequest
from ideahub.db.session import get_db
from ideahub.schemas.wallet import WalletSummary, WithdrawalCreate, WithdrawalOut
from ideahub.services.wallet import get_wallet, request_withdrawal
from ideahub.utils.deps import require_role

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("", response_model=WalletSummary)
async def my_wallet(
    current_user: User = Depends(require_role("creator")),
    db: AsyncSession = Depends(get_db),
):
    wallet = await get_wallet(db, current_user.id)
    if wallet is None:
        return {"wallet": None, "transactions": [], "withdrawal_requests": []}

    transactions = await db.scalars(
        select(WalletTransaction)
        .where(WalletTransaction.wallet_id == wallet.id)
        .order_by(WalletTransaction.created_at.desc())
        .limit(10)
    )
    withdrawals = await db.scalars(
        select(WithdrawalRequest)
        .where(WithdrawalRequest.wallet_id == wallet.id)
        .order_by(WithdrawalRequest.requested_at.desc())
        .limit(5)
    )
    return {
        "wallet": wallet,
        "transactions": transactions.all(),
        "withdrawal_requests": withdrawals.all(),
    }


@router.post("/withdrawals", response_model=WithdrawalOut, status_code=201)
async def create_withdrawal(
    data: WithdrawalCreate,
    current_user: User = Depends(require_role("creator")),
    db: AsyncSession = Depends(get_db),
):
    return await request_withdrawal(
        db,
        user_id=current_user.id,
        amount_cents=data.amount_cents,
        bank_details=data.bank_details.model_dump(),
    )
