"""Application entry point: wire settings, services, audio and the main window."""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from typing import Optional, Sequence

from src.audio.graph import get_shared_context, reset_shared_context
from src.audio.playback import PlaybackController
from src.audio.tone_engine import ToneEngine
from src.services.payments import PaymentService, RazorpayGateway
from src.services.profiles import ProfileService
from src.services.store import StoreClient
from src.services.subscriptions import StaticGate, SubscriptionGate, SubscriptionService
from src.utils.settings import AppSettings, load_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class Services:
    """Backend collaborators built from :class:`AppSettings`; all optional."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings
        self.store: Optional[StoreClient] = None
        self.subscriptions: Optional[SubscriptionService] = None
        self.profiles: Optional[ProfileService] = None
        self.payments: Optional[PaymentService] = None

        if settings.has_backend:
            self.store = StoreClient(
                settings.supabase_url, settings.supabase_key, settings.access_token or None
            )
            self.subscriptions = SubscriptionService(self.store, settings.user_id or None)
            if settings.user_id:
                self.profiles = ProfileService(self.store, settings.user_id)
            gateway = RazorpayGateway(settings.razorpay_key_id, settings.razorpay_key_secret)
            self.payments = PaymentService(gateway, self.store)
        else:
            logger.warning("No backend configured; premium tracks stay locked")

    def gate(self):
        if self.subscriptions is None:
            return StaticGate(premium=False)
        return SubscriptionGate(self.subscriptions)


def build_controller(settings: AppSettings, gate) -> PlaybackController:
    engine = ToneEngine(context_factory=partial(get_shared_context, sample_rate=settings.sample_rate))
    return PlaybackController(engine, gate, initial_volume=settings.default_volume)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Therapeutic tone and binaural beat player")
    parser.add_argument("--settings", help="Path to a settings JSON file")
    parser.add_argument("--theme", help="UI theme name")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.settings)
    configure_logging(args.log_level or settings.log_level)

    from PyQt5.QtWidgets import QApplication
    from src.ui.dashboard_dialog import DashboardDialog
    from src.ui.frequency_window import FrequencyWindow
    from src.ui.paywall_dialog import PaywallDialog

    app = QApplication(sys.argv if argv is None else [sys.argv[0], *argv])
    services = Services(settings)
    gate = services.gate()
    controller = build_controller(settings, gate)

    def paywall_factory(parent):
        return PaywallDialog(
            services.payments,
            user_id=settings.user_id or None,
            amount=settings.plan_amount,
            currency=settings.currency,
            parent=parent,
        )

    dashboard_factory = None
    if services.profiles is not None:
        dashboard_factory = lambda parent: DashboardDialog(  # noqa: E731
            services.profiles, services.subscriptions, parent
        )

    window = FrequencyWindow(
        controller,
        gate,
        paywall_factory=paywall_factory,
        dashboard_factory=dashboard_factory,
        theme_name=args.theme or settings.theme,
    )
    window.show()
    try:
        return app.exec_()
    finally:
        controller.shutdown()
        reset_shared_context()


if __name__ == "__main__":
    sys.exit(main())
