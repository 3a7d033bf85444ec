import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.config import settings
from ideahub.db.models import CreatorWallet, WalletTransaction, WithdrawalRequest

log = logging.getLogger(__name__)


async def get_wallet(db: AsyncSession, user_id: str) -> Optional[CreatorWallet]:
    return await db.scalar(select(CreatorWallet).where(CreatorWallet.user_id == user_id))


async def get_or_create_wallet(db: AsyncSession, user_id: str) -> CreatorWallet:
    wallet = await get_wallet(db, user_id)
    if wallet is None:
        wallet = CreatorWallet(
            user_id=user_id,
            balance_cents=0,
            total_earned_cents=0,
            total_withdrawn_cents=0,
        )
        db.add(wallet)
        await db.flush()
    return wallet


async def credit_wallet(
    db: AsyncSession,
    *,
    user_id: str,
    amount_cents: int,
    tx_type: str,
    description: str,
    idea_id: Optional[str] = None,
    stripe_session_id: Optional[str] = None,
) -> bool:
    """
    Add earnings to a creator wallet and write the ledger row.

    A credit for a checkout session that is already on the ledger is a no-op,
    so a re-delivered webhook does not pay twice. Returns True when credited.
    Caller commits.
    """
    if stripe_session_id:
        seen = await db.scalar(
            select(WalletTransaction.id).where(WalletTransaction.stripe_session_id == stripe_session_id)
        )
        if seen:
            log.info("wallet.credit.duplicate session=%s", stripe_session_id)
            return False

    wallet = await get_or_create_wallet(db, user_id)
    wallet.balance_cents = (wallet.balance_cents or 0) + amount_cents
    wallet.total_earned_cents = (wallet.total_earned_cents or 0) + amount_cents
    db.add(
        WalletTransaction(
            wallet_id=wallet.id,
            type=tx_type,
            amount_cents=amount_cents,
            description=description,
            idea_id=idea_id,
            stripe_session_id=stripe_session_id,
        )
    )
    log.info("wallet.credit user=%s amount=%s type=%s", user_id, amount_cents, tx_type)
    return True


async def request_withdrawal(
    db: AsyncSession,
    *,
    user_id: str,
    amount_cents: int,
    bank_details: dict,
) -> WithdrawalRequest:
    wallet = await get_wallet(db, user_id)
    if wallet is None:
        raise HTTPException(404, "Wallet not found")

    if amount_cents < settings.MIN_WITHDRAWAL_CENTS:
        raise HTTPException(
            400,
            f"Minimum withdrawal amount is ${settings.MIN_WITHDRAWAL_CENTS / 100:.2f}",
        )
    if amount_cents > wallet.balance_cents:
        raise HTTPException(400, "Insufficient balance")

    wallet.balance_cents -= amount_cents
    wallet.total_withdrawn_cents = (wallet.total_withdrawn_cents or 0) + amount_cents

    withdrawal = WithdrawalRequest(
        wallet_id=wallet.id,
        amount_cents=amount_cents,
        status="pending",
        bank_details=bank_details,
    )
    db.add(withdrawal)
    db.add(
        WalletTransaction(
            wallet_id=wallet.id,
            type="withdrawal",
            amount_cents=-amount_cents,
            description="Withdrawal request",
        )
    )
    await db.commit()
    await db.refresh(withdrawal)
    log.info("wallet.withdrawal.requested user=%s amount=%s", user_id, amount_cents)
    return withdrawal
