"""Helper for saving and loading application settings.

Settings come from an optional JSON file and are then overridden by
environment variables, so secrets never need to live on disk.
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

SETTINGS_ENV_VAR = "SONICTHERAPY_SETTINGS"
DEFAULT_SETTINGS_PATH = Path.home() / ".sonictherapy" / "settings.json"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_key",
    "SONICTHERAPY_ACCESS_TOKEN": "access_token",
    "SONICTHERAPY_USER_ID": "user_id",
    "RAZORPAY_KEY_ID": "razorpay_key_id",
    "RAZORPAY_KEY_SECRET": "razorpay_key_secret",
    "SONICTHERAPY_LOG_LEVEL": "log_level",
}


@dataclass
class AppSettings:
    """Connection details and playback defaults."""
    supabase_url: str = ""
    supabase_key: str = ""
    access_token: str = ""
    user_id: str = ""
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    plan_amount: int = 49
    currency: str = "INR"
    sample_rate: int = 44100
    default_volume: float = 0.5
    theme: str = "Modern Dark"
    log_level: str = "INFO"

    @property
    def has_backend(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override) if override else DEFAULT_SETTINGS_PATH


def _coerce(settings: AppSettings, name: str, value):
    current = getattr(settings, name)
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return str(value)


def load_settings(
    filepath: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """Load settings from ``filepath`` (if it exists) and apply environment overrides."""
    settings = AppSettings()
    path = Path(filepath) if filepath else settings_path()
    if path.is_file():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        known = {f.name for f in fields(AppSettings)}
        for key, value in data.items():
            if key in known and value is not None:
                setattr(settings, key, _coerce(settings, key, value))

    env = os.environ if environ is None else environ
    for env_name, field_name in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            setattr(settings, field_name, _coerce(settings, field_name, value))
    return settings


def save_settings(settings: AppSettings, filepath: Optional[str] = None) -> Path:
    """Write ``settings`` as JSON, leaving secrets out."""
    path = Path(filepath) if filepath else settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = asdict(settings)
    data.pop("razorpay_key_secret", None)
    data.pop("access_token", None)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


__all__ = ["AppSettings", "load_settings", "save_settings", "settings_path", "ENV_OVERRIDES"]
