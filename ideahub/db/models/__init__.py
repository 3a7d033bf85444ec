"""
SQLAlchemy database models.

Models are organized by domain:
- base: Base declarative class
- user: User accounts and profiles
- idea: Ideas, comments and upvotes
- wallet: Creator wallets, ledger and withdrawals
- collaboration: Collab and partnership requests
- billing: Stripe customers, orders, subscriptions and payout accounts

Import any model from this module:
    from ideahub.db.models import User, Idea, CreatorWallet
"""

# Base class (must be imported first)
from .base import Base

# User models
from .user import User, ROLES

# Idea models
from .idea import Idea, Comment, Upvote, OWNERSHIP_MODES

# Wallet models
from .wallet import CreatorWallet, WalletTransaction, WithdrawalRequest

# Collaboration models
from .collaboration import CollabRequest, PartnershipRequest, PARTNERSHIP_STATUSES

# Billing models
from .billing import (
    StripeCustomer,
    StripeOrder,
    StripeSubscription,
    StripePayoutAccount,
)

__all__ = [
    # Base
    "Base",
    # User
    "User",
    "ROLES",
    # Idea
    "Idea",
    "Comment",
    "Upvote",
    "OWNERSHIP_MODES",
    # Wallet
    "CreatorWallet",
    "WalletTransaction",
    "WithdrawalRequest",
    # Collaboration
    "CollabRequest",
    "PartnershipRequest",
    "PARTNERSHIP_STATUSES",
    # Billing
    "StripeCustomer",
    "StripeOrder",
    "StripeSubscription",
    "StripePayoutAccount",
]
