"""Creator wallet and withdrawal rules."""
from sqlalchemy import select

from ideahub.db.models import CreatorWallet, WalletTransaction, WithdrawalRequest

BANK = {
    "account_holder_name": "Ada Lovelace",
    "bank_name": "First Bank",
    "account_number": "000123456",
    "routing_number": "110000000",
}


async def _fund(db, user, cents: int) -> CreatorWallet:
    wallet = CreatorWallet(user_id=user.id, balance_cents=cents, total_earned_cents=cents, total_withdrawn_cents=0)
    db.add(wallet)
    await db.commit()
    return wallet


async def test_wallet_view_for_creator_without_wallet(client, make_user):
    _, headers = await make_user(role="creator")
    body = (await client.get("/wallet", headers=headers)).json()
    assert body == {"wallet": None, "transactions": [], "withdrawal_requests": []}


async def test_wallet_is_creator_only(client, make_user):
    _, headers = await make_user(role="investor")
    resp = await client.get("/wallet", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["detail"]["error"] == "ROLE_REQUIRED"


async def test_withdrawal_below_minimum_is_rejected(client, db, make_user):
    creator, headers = await make_user()
    await _fund(db, creator, 5000)
    resp = await client.post("/wallet/withdrawals", json={"amount_cents": 999, "bank_details": BANK}, headers=headers)
    assert resp.status_code == 400
    assert "Minimum" in resp.json()["detail"]


async def test_withdrawal_above_balance_is_rejected(client, db, make_user):
    creator, headers = await make_user()
    await _fund(db, creator, 1500)
    resp = await client.post("/wallet/withdrawals", json={"amount_cents": 2000, "bank_details": BANK}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient balance"


async def test_withdrawal_without_wallet_is_404(client, make_user):
    _, headers = await make_user()
    resp = await client.post("/wallet/withdrawals", json={"amount_cents": 1000, "bank_details": BANK}, headers=headers)
    assert resp.status_code == 404


async def test_withdrawal_reserves_balance_and_is_listed(client, db, make_user, query):
    creator, headers = await make_user()
    wallet = await _fund(db, creator, 4500)

    resp = await client.post("/wallet/withdrawals", json={"amount_cents": 1000, "bank_details": BANK}, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"

    stored = (await query(select(CreatorWallet).where(CreatorWallet.id == wallet.id)))[0]
    assert stored.balance_cents == 3500
    assert stored.total_withdrawn_cents == 1000

    requests = await query(select(WithdrawalRequest))
    assert requests[0].bank_details["routing_number"] == "110000000"
    txs = await query(select(WalletTransaction))
    assert [(t.type, t.amount_cents) for t in txs] == [("withdrawal", -1000)]

    view = (await client.get("/wallet", headers=headers)).json()
    assert view["wallet"]["balance_cents"] == 3500
    assert len(view["withdrawal_requests"]) == 1
    assert view["transactions"][0]["type"] == "withdrawal"
