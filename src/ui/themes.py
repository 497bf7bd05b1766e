from PyQt5.QtWidgets import QApplication
from PyQt5.QtGui import QPalette, QColor
from dataclasses import dataclass

@dataclass
class Theme:
    palette_func: callable
    stylesheet: str = ""

def slate_palette() -> QPalette:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(15, 23, 42))
    palette.setColor(QPalette.WindowText, QColor(241, 245, 249))
    palette.setColor(QPalette.Base, QColor(30, 41, 59))
    palette.setColor(QPalette.AlternateBase, QColor(51, 65, 85))
    palette.setColor(QPalette.ToolTipBase, QColor(15, 23, 42))
    palette.setColor(QPalette.ToolTipText, QColor(241, 245, 249))
    palette.setColor(QPalette.Text, QColor(241, 245, 249))
    palette.setColor(QPalette.Button, QColor(30, 41, 59))
    palette.setColor(QPalette.ButtonText, QColor(241, 245, 249))
    palette.setColor(QPalette.BrightText, QColor(251, 113, 133))
    palette.setColor(QPalette.Link, QColor(129, 140, 248))
    palette.setColor(QPalette.Highlight, QColor(99, 102, 241))
    palette.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    return palette

def light_palette() -> QPalette:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor(248, 250, 252))
    palette.setColor(QPalette.WindowText, QColor(15, 23, 42))
    palette.setColor(QPalette.Base, QColor(255, 255, 255))
    palette.setColor(QPalette.AlternateBase, QColor(241, 245, 249))
    palette.setColor(QPalette.ToolTipBase, QColor(255, 255, 220))
    palette.setColor(QPalette.ToolTipText, QColor(15, 23, 42))
    palette.setColor(QPalette.Text, QColor(15, 23, 42))
    palette.setColor(QPalette.Button, QColor(226, 232, 240))
    palette.setColor(QPalette.ButtonText, QColor(15, 23, 42))
    palette.setColor(QPalette.BrightText, QColor(225, 29, 72))
    palette.setColor(QPalette.Link, QColor(79, 70, 229))
    palette.setColor(QPalette.Highlight, QColor(99, 102, 241))
    palette.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    return palette

GLOBAL_STYLE_SHEET_MODERN_DARK = """
/* Global Reset & Base */
QWidget {
    background-color: #0f172a;
    color: #f1f5f9;
    font-family: 'Segoe UI', 'Roboto', 'Helvetica Neue', sans-serif;
    font-size: 10pt;
}

QLabel#app_title {
    font-size: 16pt;
    font-weight: bold;
}

QLabel#panel_header {
    font-size: 20pt;
    font-weight: 800;
}

QLabel#muted, QLabel#track_description, QLabel#status_label {
    color: #94a3b8;
}

QLabel#frequency_label {
    color: #a5b4fc;
    font-family: 'Consolas', 'Courier New', monospace;
    font-size: 9pt;
}

QLabel#premium_badge {
    color: #34d399;
    border: 1px solid rgba(16, 185, 129, 0.3);
    border-radius: 10px;
    padding: 3px 10px;
    background-color: #1e293b;
}

/* Track cards */
QFrame#track_card {
    background-color: rgba(30, 41, 59, 0.4);
    border: 1px solid #334155;
    border-radius: 14px;
}

QFrame#track_card:hover {
    background-color: #1e293b;
    border-color: #475569;
}

QFrame#track_card[active="true"] {
    background-color: #1e293b;
    border: 1px solid #6366f1;
}

QFrame#player_bar {
    background-color: #0f172a;
    border-top: 1px solid #1e293b;
}

/* Buttons */
QPushButton {
    background-color: #1e293b;
    border: 1px solid #334155;
    color: #f1f5f9;
    padding: 6px 16px;
    border-radius: 6px;
    min-width: 60px;
}

QPushButton:hover {
    border-color: #6366f1;
}

QPushButton:pressed {
    background-color: #6366f1;
}

QPushButton:disabled {
    background-color: #1e293b;
    color: #64748b;
    border-color: #1e293b;
}

QPushButton[class="primary"] {
    background-color: #4f46e5;
    border-color: #4f46e5;
    font-weight: bold;
}

QPushButton[class="premium"] {
    background-color: #f97316;
    border-color: #f59e0b;
    font-weight: bold;
    border-radius: 12px;
}

QPushButton#play_button {
    background-color: #ffffff;
    color: #0f172a;
    border-radius: 20px;
    min-width: 40px;
    min-height: 40px;
}

/* Input Fields */
QLineEdit, QSpinBox, QComboBox {
    background-color: #1e293b;
    border: 1px solid #334155;
    color: #f1f5f9;
    border-radius: 4px;
    padding: 4px;
    selection-background-color: #4f46e5;
}

QLineEdit:focus, QSpinBox:focus, QComboBox:focus {
    border: 1px solid #6366f1;
}

/* Volume slider */
QSlider::groove:horizontal {
    height: 4px;
    background: #334155;
    border-radius: 2px;
}

QSlider::handle:horizontal {
    background: #6366f1;
    width: 12px;
    margin: -5px 0;
    border-radius: 6px;
}

QSlider::sub-page:horizontal {
    background: #6366f1;
    border-radius: 2px;
}
"""

GLOBAL_STYLE_SHEET_LIGHT = """
QFrame#track_card {
    background-color: #ffffff;
    border: 1px solid #e2e8f0;
    border-radius: 14px;
}

QFrame#track_card[active="true"] {
    border: 1px solid #6366f1;
}

QLabel#frequency_label {
    color: #4f46e5;
}

QLabel#premium_badge {
    color: #059669;
}
"""

THEMES = {
    "Modern Dark": Theme(slate_palette, GLOBAL_STYLE_SHEET_MODERN_DARK),
    "Light": Theme(light_palette, GLOBAL_STYLE_SHEET_LIGHT),
}

def apply_theme(app: QApplication, name: str):
    theme = THEMES.get(name)
    if not theme:
        # Fallback to Modern Dark if theme not found
        theme = THEMES["Modern Dark"]

    palette = theme.palette_func()
    app.setPalette(palette)
    app.setStyleSheet(theme.stylesheet)
