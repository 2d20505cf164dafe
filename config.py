"""
Bot configuration settings
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class ConfigError(ValueError):
    """Raised when the bot configuration cannot be used."""


def load_properties_config(path: str) -> dict:
    """Load simple key=value .properties file and return dict of values.

    Lines beginning with # or empty lines are ignored.
    """
    config = {}
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Properties file not found: {path}")

    with p.open('r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' in line:
                k, v = line.split('=', 1)
                config[k.strip()] = v.strip()
    return config


def apply_properties_to_env(path: str):
    data = load_properties_config(path)
    for k, v in data.items():
        os.environ[k] = v


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def parse_channel_names(raw: str) -> List[str]:
    """Split a comma separated channel list, dropping blanks and a leading @."""
    names = []
    for part in raw.split(','):
        name = part.strip().lstrip('@')
        if name:
            names.append(name)
    return names


@dataclass
class TelegramPostConfig:
    channel_names: List[str] = field(default_factory=list)
    max_retries: int = 5
    scan_count: int = 100
    host: str = "t.me"
    http_timeout: float = 10.0

    def __post_init__(self):
        if not self.channel_names:
            raise ConfigError("At least one Telegram channel name is required")
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.scan_count < 0:
            raise ConfigError(f"scan_count must be >= 0, got {self.scan_count}")
        if self.http_timeout <= 0:
            raise ConfigError(f"http_timeout must be > 0, got {self.http_timeout}")

    @classmethod
    def from_env(cls) -> "TelegramPostConfig":
        return cls(
            channel_names=parse_channel_names(os.environ.get('TELEGRAM_CHANNEL_NAMES', '')),
            max_retries=_int_env('TELEGRAM_MAX_GET_POST_RETRIES', 5),
            scan_count=_int_env('TELEGRAM_SCAN_POST_COUNT', 100),
            host=os.environ.get('TELEGRAM_HOST', 't.me').strip() or 't.me',
            http_timeout=_float_env('TELEGRAM_HTTP_TIMEOUT', 10.0),
        )


def get_bot_token():
    return os.environ.get('DISCORD_BOT_TOKEN') or os.environ.get('DISCORD_TOKEN')


@dataclass
class BotConfig:
    """Discord side settings, read after any .properties file was applied."""
    token: str = ""
    prefix: str = "!"
    guild_id: int = 0
    debug: bool = False

    @classmethod
    def from_env(cls) -> "BotConfig":
        return cls(
            token=get_bot_token() or "",
            prefix=os.environ.get("BOT_PREFIX", "!"),
            guild_id=_int_env('GUILD_ID', 0),
            debug=os.getenv('DEBUG_MODE', 'False').lower() == 'true',
        )


# Additional configuration options
BOT_NAME = "Meme Bot"
BOT_DESCRIPTION = "A Discord bot that posts random pictures from Telegram channels"
