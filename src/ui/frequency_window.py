"""Main window: track grid, player bar and premium controls."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QApplication,
    QDialog,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from src.audio.playback import PlaybackController, PlaybackState
from src.catalog import TRACKS, Track
from src.errors import AccessDenied, AudioUnavailable
from . import themes

logger = logging.getLogger(__name__)

LOCK_GLYPH = "\U0001F512"
PLAY_GLYPH = "▶"
PAUSE_GLYPH = "❚❚"


def _gradient(track: Track) -> str:
    start, end = track.color
    return (
        "background: qlineargradient(x1:0, y1:0, x2:1, y2:1, "
        f"stop:0 {start}, stop:1 {end}); border-radius: 10px; color: white;"
    )


class TrackCard(QFrame):
    """Clickable card showing one catalog entry."""

    clicked = pyqtSignal(str)

    def __init__(self, track: Track, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.track = track
        self.setObjectName("track_card")
        self.setCursor(Qt.PointingHandCursor)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)

        top = QHBoxLayout()
        self.icon_label = QLabel(PLAY_GLYPH)
        self.icon_label.setFixedSize(44, 44)
        self.icon_label.setAlignment(Qt.AlignCenter)
        self.icon_label.setStyleSheet(_gradient(track))
        top.addWidget(self.icon_label)

        titles = QVBoxLayout()
        title = QLabel(track.title)
        title.setStyleSheet("font-weight: bold; font-size: 12pt;")
        frequency = QLabel(track.frequency_label)
        frequency.setObjectName("frequency_label")
        titles.addWidget(title)
        titles.addWidget(frequency)
        top.addLayout(titles, 1)

        self.lock_label = QLabel(LOCK_GLYPH)
        self.lock_label.setToolTip("Premium frequency")
        top.addWidget(self.lock_label, 0, Qt.AlignTop)
        layout.addLayout(top)

        description = QLabel(track.description)
        description.setObjectName("track_description")
        description.setWordWrap(True)
        layout.addWidget(description)

        self.set_locked(track.locked)

    def set_locked(self, locked: bool) -> None:
        self.lock_label.setVisible(locked)

    def set_active(self, active: bool, playing: bool) -> None:
        self.setProperty("active", "true" if active else "false")
        self.icon_label.setText(PAUSE_GLYPH if active and playing else PLAY_GLYPH)
        self.style().unpolish(self)
        self.style().polish(self)

    def mousePressEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.LeftButton:
            self.clicked.emit(self.track.id)
        super().mousePressEvent(event)


class FrequencyWindow(QMainWindow):
    """Track browser with a bottom player bar.

    ``paywall_factory`` builds the dialog shown when a locked track is
    refused; ``dashboard_factory`` builds the account dialog.  Both receive
    this window as parent.
    """

    def __init__(
        self,
        controller: PlaybackController,
        gate,
        *,
        tracks: Sequence[Track] = TRACKS,
        paywall_factory: Optional[Callable[[QWidget], QDialog]] = None,
        dashboard_factory: Optional[Callable[[QWidget], QDialog]] = None,
        theme_name: Optional[str] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("SonicTherapy")
        self.resize(900, 720)

        self._controller = controller
        self._gate = gate
        self._tracks = {track.id: track for track in tracks}
        self._paywall_factory = paywall_factory
        self._dashboard_factory = dashboard_factory
        self._is_premium = False
        self.cards: Dict[str, TrackCard] = {}

        self._init_ui(tracks)
        self._controller.set_state_callback(self._on_state_changed)
        self.refresh_premium()
        self._refresh_player()

        app = QApplication.instance()
        if app is not None and theme_name:
            themes.apply_theme(app, theme_name)

    # ------------------------------------------------------------------
    # UI creation helpers
    # ------------------------------------------------------------------
    def _init_ui(self, tracks: Sequence[Track]) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- Header ---
        header = QFrame()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(24, 16, 24, 16)
        title = QLabel("SonicTherapy.ai")
        title.setObjectName("app_title")
        header_layout.addWidget(title)
        header_layout.addStretch(1)

        self.account_btn = QPushButton("Account")
        self.account_btn.clicked.connect(self.open_dashboard)
        self.account_btn.setVisible(self._dashboard_factory is not None)
        header_layout.addWidget(self.account_btn)

        self.premium_btn = QPushButton("Go Premium")
        self.premium_btn.setProperty("class", "premium")
        self.premium_btn.clicked.connect(self.show_paywall)
        header_layout.addWidget(self.premium_btn)

        self.premium_badge = QLabel("✔ Premium Active")
        self.premium_badge.setObjectName("premium_badge")
        header_layout.addWidget(self.premium_badge)
        main_layout.addWidget(header)

        # --- Intro + track grid ---
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        content = QWidget()
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(24, 24, 24, 24)
        content_layout.setSpacing(16)

        heading = QLabel("Tune Your Mind & Body")
        heading.setObjectName("panel_header")
        heading.setAlignment(Qt.AlignCenter)
        content_layout.addWidget(heading)
        intro = QLabel(
            "Select a frequency below to begin your session. Pure sine waves "
            "generated in real-time."
        )
        intro.setObjectName("muted")
        intro.setAlignment(Qt.AlignCenter)
        intro.setWordWrap(True)
        content_layout.addWidget(intro)
        hint = QLabel("Headphones recommended for Binaural Beats")
        hint.setObjectName("muted")
        hint.setAlignment(Qt.AlignCenter)
        content_layout.addWidget(hint)

        grid = QGridLayout()
        grid.setSpacing(16)
        for index, track in enumerate(tracks):
            card = TrackCard(track)
            card.clicked.connect(self._on_track_clicked)
            self.cards[track.id] = card
            grid.addWidget(card, index // 2, index % 2)
        content_layout.addLayout(grid)
        content_layout.addStretch(1)
        scroll.setWidget(content)
        main_layout.addWidget(scroll, 1)

        # --- Player bar ---
        self.player_bar = QFrame()
        self.player_bar.setObjectName("player_bar")
        bar_layout = QHBoxLayout(self.player_bar)
        bar_layout.setContentsMargins(24, 12, 24, 12)

        now_playing = QVBoxLayout()
        self.now_playing_label = QLabel("")
        self.now_playing_label.setStyleSheet("font-weight: bold;")
        self.subtitle_label = QLabel("")
        self.subtitle_label.setObjectName("muted")
        now_playing.addWidget(self.now_playing_label)
        now_playing.addWidget(self.subtitle_label)
        bar_layout.addLayout(now_playing, 1)

        self.play_button = QPushButton(PLAY_GLYPH)
        self.play_button.setObjectName("play_button")
        self.play_button.setToolTip("Play / pause")
        self.play_button.clicked.connect(self.toggle_play_pause)
        bar_layout.addWidget(self.play_button, 0, Qt.AlignCenter)

        volume_layout = QHBoxLayout()
        volume_layout.addStretch(1)
        volume_layout.addWidget(QLabel("Volume"))
        self.volume_slider = QSlider(Qt.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setFixedWidth(140)
        self.volume_slider.setValue(int(round(self._controller.volume * 100)))
        self.volume_slider.valueChanged.connect(self._on_volume_changed)
        volume_layout.addWidget(self.volume_slider)
        bar_layout.addLayout(volume_layout, 1)

        main_layout.addWidget(self.player_bar)

        self.status_label = QLabel("")
        self.status_label.setObjectName("status_label")
        self.status_label.setContentsMargins(24, 4, 24, 8)
        main_layout.addWidget(self.status_label)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _on_track_clicked(self, track_id: str) -> None:
        current = self._controller.current_track
        if current is not None and current.id == track_id:
            if self._controller.state is PlaybackState.PLAYING:
                self._controller.stop()
                return
        self.play_track(self._tracks[track_id])

    def play_track(self, track: Track) -> bool:
        try:
            self._controller.select_and_play(track)
        except AccessDenied:
            self.show_paywall()
            return False
        except AudioUnavailable as exc:
            self._disable_playback(str(exc))
            return False
        return True

    def toggle_play_pause(self) -> None:
        try:
            self._controller.toggle_play_pause()
        except AccessDenied:
            self.show_paywall()
        except AudioUnavailable as exc:
            self._disable_playback(str(exc))

    def _on_volume_changed(self, value: int) -> None:
        self._controller.set_volume(value / 100.0)

    def show_paywall(self) -> None:
        if self._paywall_factory is None:
            self.status_label.setText("Premium frequencies require a subscription.")
            return
        dialog = self._paywall_factory(self)
        if dialog.exec_() == QDialog.Accepted:
            self.refresh_premium()

    def open_dashboard(self) -> None:
        if self._dashboard_factory is None:
            return
        self._dashboard_factory(self).exec_()
        self.refresh_premium()

    def refresh_premium(self) -> bool:
        self._is_premium = bool(self._gate.is_premium())
        self.premium_btn.setVisible(not self._is_premium)
        self.premium_badge.setVisible(self._is_premium)
        for card in self.cards.values():
            card.set_locked(card.track.locked and not self._is_premium)
        return self._is_premium

    def _disable_playback(self, reason: str) -> None:
        logger.error("Audio playback unavailable: %s", reason)
        self.play_button.setEnabled(False)
        self.volume_slider.setEnabled(False)
        for card in self.cards.values():
            card.setEnabled(False)
        self.status_label.setText("Audio playback is unavailable on this device.")

    # ------------------------------------------------------------------
    # State updates
    # ------------------------------------------------------------------
    def _on_state_changed(self, state: PlaybackState, track: Optional[Track]) -> None:
        self._refresh_player()

    def _refresh_player(self) -> None:
        track = self._controller.current_track
        playing = self._controller.state is PlaybackState.PLAYING
        self.player_bar.setVisible(track is not None)
        self.now_playing_label.setText(track.title if track else "")
        self.subtitle_label.setText(track.subtitle if track else "")
        self.play_button.setText(PAUSE_GLYPH if playing else PLAY_GLYPH)
        for track_id, card in self.cards.items():
            card.set_active(track is not None and track.id == track_id, playing)

    def closeEvent(self, event):  # type: ignore[override]
        self._controller.shutdown()
        super().closeEvent(event)


__all__ = ["FrequencyWindow", "TrackCard"]
