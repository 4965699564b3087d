"""Runtime settings read from ``TICTACTOE_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Google's public test interstitial unit, safe to ship in development builds
TEST_AD_UNIT_ID = "ca-app-pub-3940256099942544/4411468910"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    ads_enabled: bool = False
    games_before_ad: int = 3
    ad_unit_id: str = TEST_AD_UNIT_ID
    house_ad_headline: str = "Enjoying the game? Tell a friend!"
    house_ad_url: str = "https://example.com/"
    sound_enabled: bool = True
    session_ttl_seconds: int = 60 * 30  # 30 minutes

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        settings = cls(
            host=env.get("TICTACTOE_HOST", defaults.host),
            port=_int(env, "TICTACTOE_PORT", defaults.port),
            log_level=env.get("TICTACTOE_LOG_LEVEL", defaults.log_level).upper(),
            ads_enabled=_bool(env, "TICTACTOE_ADS_ENABLED", defaults.ads_enabled),
            games_before_ad=_int(
                env, "TICTACTOE_GAMES_BEFORE_AD", defaults.games_before_ad
            ),
            ad_unit_id=env.get("TICTACTOE_AD_UNIT_ID", defaults.ad_unit_id),
            house_ad_headline=env.get(
                "TICTACTOE_HOUSE_AD_HEADLINE", defaults.house_ad_headline
            ),
            house_ad_url=env.get("TICTACTOE_HOUSE_AD_URL", defaults.house_ad_url),
            sound_enabled=_bool(env, "TICTACTOE_SOUND_ENABLED", defaults.sound_enabled),
            session_ttl_seconds=_int(
                env, "TICTACTOE_SESSION_TTL_SECONDS", defaults.session_ttl_seconds
            ),
        )
        if not 0 < settings.port < 65536:
            raise ConfigError(f"TICTACTOE_PORT out of range: {settings.port}")
        if settings.games_before_ad < 1:
            raise ConfigError("TICTACTOE_GAMES_BEFORE_AD must be at least 1")
        if settings.session_ttl_seconds < 1:
            raise ConfigError("TICTACTOE_SESSION_TTL_SECONDS must be at least 1")
        return settings


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")
