"""Premium upsell dialog that drives the two-step Razorpay checkout."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QDialog,
    QFormLayout,
    QGroupBox,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from src.errors import GatewayConfigError, GatewayRequestError, InvalidSignature, StoreError
from src.services.payments import Order, PaymentService
from src.services.subscriptions import SubscriptionRecord

logger = logging.getLogger(__name__)

BENEFITS = (
    "Access to 528 Hz (Miracle Tone)",
    "Binaural Beta Waves (Focus & Energy)",
    "Every premium tone in the library",
)


class PaywallDialog(QDialog):
    """Explain the premium plan, create an order and verify the checkout result.

    The dialog accepts only after :meth:`PaymentService.verify_payment` has
    written an active subscription.
    """

    def __init__(
        self,
        payment_service: Optional[PaymentService] = None,
        *,
        user_id: Optional[str] = None,
        amount: int = 49,
        currency: str = "INR",
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Unlock Full Frequency Access")
        self.setModal(True)
        self.resize(420, 0)

        self._payment_service = payment_service
        self._user_id = user_id
        self._amount = int(amount)
        self._currency = currency
        self.order: Optional[Order] = None
        self.subscription: Optional[SubscriptionRecord] = None

        layout = QVBoxLayout(self)
        layout.setSpacing(12)

        header = QLabel("Unlock Full Frequency Access")
        header.setObjectName("panel_header")
        header.setAlignment(Qt.AlignCenter)
        layout.addWidget(header)

        intro = QLabel(
            "You've discovered a Premium Frequency. Upgrade to access our full "
            "library of healing tones and binaural beats."
        )
        intro.setObjectName("muted")
        intro.setWordWrap(True)
        layout.addWidget(intro)

        for benefit in BENEFITS:
            layout.addWidget(QLabel(f"✔  {benefit}"))

        self.subscribe_btn = QPushButton("Subscribe")
        self.subscribe_btn.setProperty("class", "primary")
        self.subscribe_btn.clicked.connect(self.start_checkout)
        layout.addWidget(self.subscribe_btn)

        price = QLabel(f"{self._currency} {self._amount}/month. Cancel anytime.")
        price.setObjectName("muted")
        price.setAlignment(Qt.AlignCenter)
        layout.addWidget(price)

        # Shown once an order exists: the checkout page returns these values.
        self.verify_group = QGroupBox("Complete payment")
        verify_form = QFormLayout(self.verify_group)
        self.order_label = QLabel("")
        self.payment_id_edit = QLineEdit()
        self.payment_id_edit.setPlaceholderText("pay_...")
        self.signature_edit = QLineEdit()
        self.signature_edit.setPlaceholderText("Signature returned by checkout")
        self.verify_btn = QPushButton("Verify Payment")
        self.verify_btn.clicked.connect(self.verify_checkout)
        verify_form.addRow("Order:", self.order_label)
        verify_form.addRow("Payment ID:", self.payment_id_edit)
        verify_form.addRow("Signature:", self.signature_edit)
        verify_form.addRow(self.verify_btn)
        self.verify_group.setVisible(False)
        layout.addWidget(self.verify_group)

        self.status_label = QLabel("")
        self.status_label.setObjectName("status_label")
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        if payment_service is None or not user_id:
            self.subscribe_btn.setEnabled(False)
            self.status_label.setText("Payments are not configured. Sign in to subscribe.")

    def start_checkout(self) -> Optional[Order]:
        if self._payment_service is None:
            return None
        try:
            self.order = self._payment_service.create_order(self._amount, self._currency)
        except (GatewayConfigError, GatewayRequestError) as exc:
            logger.error("Checkout could not start: %s", exc)
            self.status_label.setText("Could not start the payment. Please try again.")
            return None
        self.order_label.setText(self.order.order_id)
        self.verify_group.setVisible(True)
        self.status_label.setText("Complete the payment, then enter the details below.")
        return self.order

    def verify_checkout(self) -> Optional[SubscriptionRecord]:
        if self.order is None:
            return None
        try:
            self.subscription = self._payment_service.verify_payment(
                self.payment_id_edit.text().strip(),
                self.order.order_id,
                self.signature_edit.text().strip(),
                self._amount,
                self._user_id,
            )
        except InvalidSignature:
            self.status_label.setText("Payment could not be verified.")
            return None
        except (GatewayConfigError, StoreError) as exc:
            logger.error("Payment verification failed: %s", exc)
            self.status_label.setText("Payment failed. Please try again.")
            return None
        self.accept()
        return self.subscription


__all__ = ["PaywallDialog", "BENEFITS"]
