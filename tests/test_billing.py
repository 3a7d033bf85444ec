"""Checkout endpoints with the Stripe calls stubbed out."""
import pytest
from sqlalchemy import select

from ideahub.db.models import PartnershipRequest, StripeCustomer, StripePayoutAccount
from ideahub.services import payments


@pytest.fixture
def stripe_calls(monkeypatch):
    """Record every Stripe call and return canned objects."""
    calls = {"customers": [], "sessions": [], "accounts": [], "links": []}

    async def create_customer(email, user_id):
        calls["customers"].append(email)
        return f"cus_{len(calls['customers'])}"

    async def create_checkout_session(**kwargs):
        calls["sessions"].append(kwargs)
        n = len(calls["sessions"])
        return {"id": f"cs_test_{n}", "url": f"https://checkout.stripe.test/{n}"}

    async def create_connect_account(email, user_id):
        calls["accounts"].append(user_id)
        return "acct_test"

    async def create_onboarding_link(account_id, refresh_url, return_url):
        calls["links"].append((account_id, refresh_url, return_url))
        return "https://connect.stripe.test/onboard"

    monkeypatch.setattr(payments, "create_customer", create_customer)
    monkeypatch.setattr(payments, "create_checkout_session", create_checkout_session)
    monkeypatch.setattr(payments, "create_connect_account", create_connect_account)
    monkeypatch.setattr(payments, "create_onboarding_link", create_onboarding_link)
    return calls


async def test_plan_catalog(client):
    plans = (await client.get("/billing/plans")).json()
    assert [p["key"] for p in plans] == ["monthly", "quarterly", "lifetime"]
    assert plans[2]["price_id"] == "price_lifetime_test"


class TestPlanCheckout:

    async def test_subscription_plan(self, client, make_user, stripe_calls, query):
        user, headers = await make_user()
        resp = await client.post(
            "/billing/checkout",
            json={"plan_type": "monthly"},
            headers={**headers, "origin": "https://app.example.com"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"url": "https://checkout.stripe.test/1", "session_id": "cs_test_1"}

        call = stripe_calls["sessions"][0]
        assert call["mode"] == "subscription"
        assert call["price_id"] == "price_monthly_test"
        assert call["success_url"] == "https://app.example.com/profile?success=true"
        assert call["cancel_url"] == "https://app.example.com/profile?canceled=true"
        assert call["metadata"] == {"user_id": user.id, "plan_type": "monthly"}

        customers = await query(select(StripeCustomer))
        assert customers[0].user_id == user.id

    async def test_lifetime_plan_uses_payment_mode_and_reuses_customer(self, client, make_user, stripe_calls):
        _, headers = await make_user()
        await client.post("/billing/checkout", json={"plan_type": "lifetime"}, headers=headers)
        await client.post("/billing/checkout", json={"plan_type": "lifetime"}, headers=headers)

        assert stripe_calls["sessions"][0]["mode"] == "payment"
        # no Origin header: falls back to FRONTEND_URL
        assert stripe_calls["sessions"][0]["success_url"] == "http://frontend.test/profile?success=true"
        assert len(stripe_calls["customers"]) == 1

    async def test_provider_error_maps_to_400(self, client, make_user, monkeypatch):
        _, headers = await make_user()

        async def boom(email, user_id):
            raise payments.PaymentProviderError("card_declined")

        monkeypatch.setattr(payments, "create_customer", boom)
        resp = await client.post("/billing/checkout", json={"plan_type": "monthly"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == {"error": "card_declined"}

    async def test_unknown_plan_is_rejected(self, client, make_user, stripe_calls):
        _, headers = await make_user()
        resp = await client.post("/billing/checkout", json={"plan_type": "weekly"}, headers=headers)
        assert resp.status_code == 422


class TestIdeaPurchase:

    async def test_wallet_purchase_session(self, client, make_user, make_idea, stripe_calls):
        creator, _ = await make_user()
        investor, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale")

        resp = await client.post(f"/billing/ideas/{idea.id}/purchase", headers=headers)
        assert resp.status_code == 200

        call = stripe_calls["sessions"][0]
        assert call["amount_cents"] == 5000
        assert call["metadata"]["type"] == "wallet_purchase"
        assert call["metadata"]["platform_fee"] == "500"
        assert call["metadata"]["creator_amount"] == "4500"
        assert call["metadata"]["investor_id"] == investor.id
        assert call["success_url"].endswith(f"/profile?purchase=success&idea={idea.id}")
        assert call["cancel_url"].endswith("/?purchase=canceled")

    async def test_custom_price_and_amount(self, client, make_user, make_idea, stripe_calls):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale", price_cents=2500)

        await client.post(f"/billing/ideas/{idea.id}/purchase", headers=headers)
        assert stripe_calls["sessions"][0]["amount_cents"] == 2500
        assert stripe_calls["sessions"][0]["metadata"]["creator_amount"] == "2250"

    async def test_buyer_cannot_set_the_price(self, client, db, make_user, make_idea, stripe_calls):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale", price_cents=100000)
        db.add(StripePayoutAccount(user_id=creator.id, stripe_account_id="acct_ready", account_enabled=True))
        await db.commit()

        wallet = await client.post(f"/billing/ideas/{idea.id}/purchase", json={"amount_cents": 50}, headers=headers)
        connect = await client.post(
            f"/billing/ideas/{idea.id}/purchase/connect", json={"amount_cents": 50}, headers=headers
        )
        assert wallet.status_code == 200
        assert connect.status_code == 200

        wallet_call, connect_call = stripe_calls["sessions"]
        assert wallet_call["amount_cents"] == 100000
        assert wallet_call["metadata"]["creator_amount"] == "90000"
        assert connect_call["amount_cents"] == 100000
        assert connect_call["payment_intent_data"]["application_fee_amount"] == 10000

    async def test_cannot_buy_own_or_unavailable_idea(self, client, make_user, make_idea, stripe_calls):
        creator, creator_headers = await make_user()
        investor, headers = await make_user(role="investor")
        showcase = await make_idea(creator)
        sold = await make_idea(creator, ownership_mode="forsale", minted_by=investor.id)
        for_sale = await make_idea(creator, ownership_mode="forsale")

        assert (await client.post(f"/billing/ideas/{showcase.id}/purchase", headers=headers)).status_code == 409
        assert (await client.post(f"/billing/ideas/{sold.id}/purchase", headers=headers)).status_code == 409
        assert (await client.post(f"/billing/ideas/{for_sale.id}/purchase", headers=creator_headers)).status_code == 400
        assert stripe_calls["sessions"] == []


class TestConnectPurchase:

    async def test_unonboarded_creator_gets_onboarding_link(self, client, make_user, make_idea, stripe_calls, query):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale")

        resp = await client.post(f"/billing/ideas/{idea.id}/purchase/connect", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["requires_onboarding"] is True
        assert body["onboarding_url"] == "https://connect.stripe.test/onboard"
        assert stripe_calls["sessions"] == []

        account_id, refresh_url, return_url = stripe_calls["links"][0]
        assert refresh_url.endswith("/profile?refresh=true")
        assert return_url.endswith("/profile?setup=complete")

        accounts = await query(select(StripePayoutAccount))
        assert accounts[0].stripe_account_id == "acct_test"
        assert accounts[0].account_enabled is False

    async def test_enabled_creator_gets_destination_charge(self, client, db, make_user, make_idea, stripe_calls):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale")
        db.add(StripePayoutAccount(user_id=creator.id, stripe_account_id="acct_ready", account_enabled=True))
        await db.commit()

        resp = await client.post(f"/billing/ideas/{idea.id}/purchase/connect", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://checkout.stripe.test/1"

        call = stripe_calls["sessions"][0]
        assert call["metadata"]["type"] == "idea_purchase"
        assert call["payment_intent_data"]["application_fee_amount"] == 500
        assert call["payment_intent_data"]["transfer_data"] == {"destination": "acct_ready"}

    async def test_connect_not_enabled_is_503(self, client, make_user, make_idea, stripe_calls, monkeypatch):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale")

        async def no_connect(email, user_id):
            raise payments.ConnectNotEnabledError("You can only create new accounts if you've signed up for Connect")

        monkeypatch.setattr(payments, "create_connect_account", no_connect)
        resp = await client.post(f"/billing/ideas/{idea.id}/purchase/connect", headers=headers)
        assert resp.status_code == 503
        assert resp.json()["detail"]["error"] == "STRIPE_CONNECT_NOT_ENABLED"


async def test_creator_payout_onboarding(client, make_user, stripe_calls):
    _, headers = await make_user(role="creator")
    resp = await client.post("/billing/payouts/onboarding", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "onboarding_url": "https://connect.stripe.test/onboard",
        "stripe_account_id": "acct_test",
        "account_enabled": False,
    }

    # resuming reuses the existing account
    await client.post("/billing/payouts/onboarding", headers=headers)
    assert len(stripe_calls["accounts"]) == 1


class TestPartnershipFlow:

    async def test_nda_payment_message_decision(self, client, make_user, make_idea, stripe_calls, send_event, query):
        creator, creator_headers = await make_user(is_premium=True)
        investor, investor_headers = await make_user(role="investor")
        idea = await make_idea(creator, title="Drone mapping", ownership_mode="partnership")

        nda = (await client.get("/partnerships/nda", params={"idea_id": idea.id})).json()
        assert 'idea "Drone mapping"' in nda["text"]

        start = await client.post(
            "/partnerships",
            json={
                "idea_id": idea.id,
                "signature": "Jane Investor",
                "investor_name": "Jane",
                "investor_email": "jane@fund.example",
            },
            headers=investor_headers,
        )
        assert start.status_code == 201
        partnership_id = start.json()["partnership_id"]
        call = stripe_calls["sessions"][0]
        assert call["amount_cents"] == 500
        assert call["metadata"]["type"] == "partnership_payment"
        assert call["metadata"]["creator_amount"] == "450"
        assert call["success_url"].endswith(f"/profile?partnership=success&idea={idea.id}")

        # message before payment is refused
        early = await client.post(
            f"/partnerships/{partnership_id}/message", json={"message": "hi"}, headers=investor_headers
        )
        assert early.status_code == 402

        await send_event(
            "checkout.session.completed",
            {
                "id": "cs_test_1",
                "mode": "payment",
                "payment_status": "paid",
                "amount_total": 500,
                "metadata": call["metadata"],
            },
        )
        status = (await client.get("/billing/status", params={"partnership_id": partnership_id}, headers=investor_headers)).json()
        assert status["partnership_status"] == "awaiting_message"

        sent = await client.post(
            f"/partnerships/{partnership_id}/message",
            json={"message": "Let's build this together"},
            headers=investor_headers,
        )
        assert sent.status_code == 200
        assert sent.json()["status"] == "pending"

        incoming = (await client.get("/partnerships/incoming", headers=creator_headers)).json()
        assert [p["id"] for p in incoming] == [partnership_id]
        outgoing = (await client.get("/partnerships/outgoing", headers=investor_headers)).json()
        assert [p["id"] for p in outgoing] == [partnership_id]

        denied = await client.put(
            f"/partnerships/{partnership_id}/status", json={"status": "accepted"}, headers=investor_headers
        )
        assert denied.status_code == 403

        decided = await client.put(
            f"/partnerships/{partnership_id}/status", json={"status": "accepted"}, headers=creator_headers
        )
        assert decided.status_code == 200
        assert decided.json()["status"] == "accepted"

        rows = await query(select(PartnershipRequest))
        assert rows[0].payment_completed is True

    async def test_partnership_fee_is_fixed(self, client, make_user, make_idea, stripe_calls, query):
        creator, _ = await make_user(is_premium=True)
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="partnership")
        resp = await client.post(
            "/partnerships",
            json={
                "idea_id": idea.id,
                "signature": "Jane Investor",
                "investor_name": "Jane",
                "investor_email": "jane@fund.example",
                "amount_cents": 1,
            },
            headers=headers,
        )
        assert resp.status_code == 201
        assert stripe_calls["sessions"][0]["amount_cents"] == 500
        rows = await query(select(PartnershipRequest))
        assert rows[0].payment_amount_cents == 500

    async def test_partnership_needs_partnership_mode(self, client, make_user, make_idea, stripe_calls):
        creator, _ = await make_user()
        _, headers = await make_user(role="investor")
        idea = await make_idea(creator, ownership_mode="forsale")
        resp = await client.post(
            "/partnerships",
            json={"idea_id": idea.id, "signature": "x", "investor_name": "x", "investor_email": "x@y.z"},
            headers=headers,
        )
        assert resp.status_code == 400


async def test_billing_status_reports_ownership(client, make_user, make_idea):
    creator, _ = await make_user()
    investor, headers = await make_user(role="investor", is_premium=True)
    idea = await make_idea(creator, minted_by=investor.id)

    body = (await client.get("/billing/status", params={"idea_id": idea.id}, headers=headers)).json()
    assert body["is_premium"] is True
    assert body["idea_owned"] is True
