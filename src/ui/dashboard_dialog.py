"""Account dashboard: profile editing and subscription status."""

from __future__ import annotations

from typing import Optional

from PyQt5.QtWidgets import (
    QComboBox,
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from src.errors import StoreError
from src.services.profiles import Profile, ProfileService
from src.services.subscriptions import Entitlement, SubscriptionService

SEX_CHOICES = ("", "male", "female", "other")


class DashboardDialog(QDialog):
    def __init__(
        self,
        profile_service: ProfileService,
        subscription_service: Optional[SubscriptionService] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Account")
        self.resize(420, 0)
        self._profile_service = profile_service
        self._subscription_service = subscription_service
        self.profile: Optional[Profile] = None

        layout = QVBoxLayout(self)

        profile_group = QGroupBox("Profile")
        form = QFormLayout(profile_group)
        self.email_label = QLabel("")
        self.name_edit = QLineEdit()
        self.age_spin = QSpinBox()
        self.age_spin.setRange(0, 130)
        self.age_spin.setSpecialValueText("Not set")
        self.sex_combo = QComboBox()
        self.sex_combo.addItems(SEX_CHOICES)
        self.mobile_edit = QLineEdit()
        form.addRow("Email:", self.email_label)
        form.addRow("Name:", self.name_edit)
        form.addRow("Age:", self.age_spin)
        form.addRow("Sex:", self.sex_combo)
        form.addRow("Mobile:", self.mobile_edit)
        layout.addWidget(profile_group)

        subscription_group = QGroupBox("Subscription")
        sub_form = QFormLayout(subscription_group)
        self.plan_label = QLabel("Free")
        self.expiry_label = QLabel("-")
        sub_form.addRow("Plan:", self.plan_label)
        sub_form.addRow("Renews / expires:", self.expiry_label)
        layout.addWidget(subscription_group)

        buttons = QHBoxLayout()
        self.save_btn = QPushButton("Save")
        self.save_btn.setProperty("class", "primary")
        self.save_btn.clicked.connect(self.save_profile)
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.reject)
        buttons.addStretch(1)
        buttons.addWidget(self.save_btn)
        buttons.addWidget(close_btn)
        layout.addLayout(buttons)

        self.status_label = QLabel("")
        self.status_label.setObjectName("status_label")
        layout.addWidget(self.status_label)

        self.reload()

    def reload(self) -> None:
        try:
            self.profile = self._profile_service.fetch()
        except StoreError:
            self.status_label.setText("Could not load your profile.")
            self.profile = None
        self._populate_profile(self.profile)
        if self._subscription_service is not None:
            self._populate_subscription(self._subscription_service.fetch_entitlement())

    def _populate_profile(self, profile: Optional[Profile]) -> None:
        self.save_btn.setEnabled(profile is not None)
        if profile is None:
            return
        self.email_label.setText(profile.email or "")
        self.name_edit.setText(profile.name or "")
        self.age_spin.setValue(profile.age or 0)
        index = self.sex_combo.findText(profile.sex or "")
        self.sex_combo.setCurrentIndex(max(index, 0))
        self.mobile_edit.setText(profile.mobile or "")

    def _populate_subscription(self, entitlement: Entitlement) -> None:
        if not entitlement.is_premium:
            self.plan_label.setText("Free")
            self.expiry_label.setText("-")
            return
        record = entitlement.subscription
        self.plan_label.setText(record.plan_name.title() if record else "Premium")
        if entitlement.expires_at is None:
            self.expiry_label.setText("Never")
        else:
            self.expiry_label.setText(entitlement.expires_at.strftime("%d %b %Y"))

    def save_profile(self) -> Optional[Profile]:
        age = self.age_spin.value()
        try:
            self.profile = self._profile_service.update(
                name=self.name_edit.text(),
                age=age if age > 0 else None,
                sex=self.sex_combo.currentText(),
                mobile=self.mobile_edit.text(),
            )
        except (StoreError, LookupError, ValueError):
            self.status_label.setText("Failed to update profile")
            return None
        self.status_label.setText("Profile updated successfully")
        return self.profile


__all__ = ["DashboardDialog"]
