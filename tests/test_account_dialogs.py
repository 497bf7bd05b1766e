from datetime import timedelta

import pytest

try:
    from PyQt5.QtWidgets import QDialog
except ImportError as exc:  # pragma: no cover - environment dependent
    pytest.skip(f"PyQt5 not available: {exc}", allow_module_level=True)

from src.errors import GatewayRequestError, InvalidSignature, StoreError
from src.services.payments import Order
from src.services.profiles import ProfileService
from src.services.subscriptions import SubscriptionRecord, SubscriptionService
from src.ui.dashboard_dialog import DashboardDialog
from src.ui.paywall_dialog import PaywallDialog

from conftest import FIXED_NOW, FakeStore


class DummyPayments:
    def __init__(self, order_error=None, verify_error=None):
        self.order_error = order_error
        self.verify_error = verify_error
        self.verify_calls = []

    def create_order(self, amount, currency="INR"):
        if self.order_error:
            raise self.order_error
        return Order(order_id="order_1", amount=amount * 100, currency=currency, key_id="rzp_key")

    def verify_payment(self, payment_id, order_id, signature, amount, user_id):
        self.verify_calls.append((payment_id, order_id, signature, amount, user_id))
        if self.verify_error:
            raise self.verify_error
        return SubscriptionRecord(
            id="sub-1",
            user_id=user_id,
            status="active",
            plan_name="premium",
            start_date=FIXED_NOW,
            end_date=FIXED_NOW + timedelta(days=30),
            amount=amount,
        )


# ----------------------------------------------------------------------
# Paywall
# ----------------------------------------------------------------------
def test_paywall_without_payments_cannot_subscribe(qapp):
    dialog = PaywallDialog(None)
    assert not dialog.subscribe_btn.isEnabled()
    assert dialog.verify_group.isHidden()
    assert dialog.start_checkout() is None


def test_checkout_reveals_verification_form(qapp):
    dialog = PaywallDialog(DummyPayments(), user_id="user-1")

    order = dialog.start_checkout()

    assert order.order_id == "order_1"
    assert not dialog.verify_group.isHidden()
    assert dialog.order_label.text() == "order_1"


def test_checkout_failure_shows_retry_message(qapp):
    dialog = PaywallDialog(DummyPayments(order_error=GatewayRequestError("down")), user_id="user-1")

    assert dialog.start_checkout() is None
    assert dialog.verify_group.isHidden()
    assert dialog.status_label.text() == "Could not start the payment. Please try again."


def test_verified_payment_accepts_dialog(qapp):
    payments = DummyPayments()
    dialog = PaywallDialog(payments, user_id="user-1", amount=49)
    dialog.start_checkout()
    dialog.payment_id_edit.setText(" pay_1 ")
    dialog.signature_edit.setText("abc123")

    record = dialog.verify_checkout()

    assert record.end_date == FIXED_NOW + timedelta(days=30)
    assert payments.verify_calls == [("pay_1", "order_1", "abc123", 49, "user-1")]
    assert dialog.result() == QDialog.Accepted


@pytest.mark.parametrize(
    "error, message",
    [
        (InvalidSignature("bad"), "Payment could not be verified."),
        (StoreError("offline"), "Payment failed. Please try again."),
    ],
)
def test_failed_verification_keeps_dialog_open(qapp, error, message):
    dialog = PaywallDialog(DummyPayments(verify_error=error), user_id="user-1")
    dialog.start_checkout()

    assert dialog.verify_checkout() is None
    assert dialog.status_label.text() == message
    assert dialog.result() != QDialog.Accepted
    assert dialog.subscription is None


def test_verify_before_checkout_does_nothing(qapp):
    payments = DummyPayments()
    dialog = PaywallDialog(payments, user_id="user-1")
    assert dialog.verify_checkout() is None
    assert payments.verify_calls == []


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------
@pytest.fixture
def account_store():
    store = FakeStore()
    store.insert(
        "profiles",
        {"user_id": "user-1", "email": "asha@example.com", "name": "Asha", "age": 34, "sex": "female"},
    )
    return store


def _dashboard(store):
    return DashboardDialog(
        ProfileService(store, "user-1"),
        SubscriptionService(store, "user-1", clock=lambda: FIXED_NOW),
    )


def test_dashboard_shows_profile_and_free_plan(qapp, account_store):
    dialog = _dashboard(account_store)

    assert dialog.email_label.text() == "asha@example.com"
    assert dialog.name_edit.text() == "Asha"
    assert dialog.age_spin.value() == 34
    assert dialog.sex_combo.currentText() == "female"
    assert dialog.plan_label.text() == "Free"
    assert dialog.expiry_label.text() == "-"


def test_dashboard_shows_active_subscription(qapp, account_store):
    account_store.insert(
        "subscriptions",
        {
            "user_id": "user-1",
            "status": "active",
            "plan_name": "premium",
            "end_date": (FIXED_NOW + timedelta(days=30)).isoformat(),
        },
    )

    dialog = _dashboard(account_store)

    assert dialog.plan_label.text() == "Premium"
    assert dialog.expiry_label.text() == "16 Nov 2026"


def test_dashboard_saves_edits(qapp, account_store):
    dialog = _dashboard(account_store)
    dialog.name_edit.setText("Asha R")
    dialog.age_spin.setValue(0)
    dialog.mobile_edit.setText("9876543210")

    profile = dialog.save_profile()

    assert profile.name == "Asha R"
    assert profile.age is None
    assert profile.mobile == "9876543210"
    assert dialog.status_label.text() == "Profile updated successfully"


def test_dashboard_without_profile_disables_save(qapp):
    dialog = _dashboard(FakeStore())
    assert not dialog.save_btn.isEnabled()
    assert dialog.plan_label.text() == "Free"
