"""Managed-store and payment gateway clients."""

from .store import StoreClient
from .subscriptions import (
    Entitlement,
    StaticGate,
    SubscriptionGate,
    SubscriptionRecord,
    SubscriptionService,
)
from .profiles import Profile, ProfileService
from .payments import Order, PaymentService, RazorpayGateway, compute_signature

__all__ = [
    "StoreClient",
    "Entitlement",
    "StaticGate",
    "SubscriptionGate",
    "SubscriptionRecord",
    "SubscriptionService",
    "Profile",
    "ProfileService",
    "Order",
    "PaymentService",
    "RazorpayGateway",
    "compute_signature",
]
