"""Interstitial ads shown between games.

``InterstitialAdManager`` owns one cached ad at a time and shows it after
every ``games_before_ad`` concluded games. The ad network is reached only
through an ``AdProvider``; when ads are disabled a ``NullAdManager`` with
the same surface is used instead, so game code never checks for the feature.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from .config import Settings
from .events import EventBus, GameConcluded

logger = logging.getLogger(__name__)


class AdLoadError(RuntimeError):
    """Raised by a provider when no ad could be fetched."""


@dataclass
class Interstitial:
    ad_unit_id: str
    headline: str
    url: str
    ad_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    presented: bool = False

    def present(self) -> None:
        if self.presented:
            raise RuntimeError("Interstitial already presented")
        self.presented = True

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.ad_id, "headline": self.headline, "url": self.url}


class AdProvider(Protocol):
    def load(self, ad_unit_id: str) -> Interstitial:
        ...


@dataclass
class HouseAdProvider:
    """Serves a single in-house promotion; never touches the network."""

    headline: str
    url: str

    def load(self, ad_unit_id: str) -> Interstitial:
        if not self.url:
            raise AdLoadError("House ad has no target URL")
        return Interstitial(ad_unit_id=ad_unit_id, headline=self.headline, url=self.url)


# ---------- Managers ----------


class InterstitialAdManager:
    def __init__(
        self, provider: AdProvider, ad_unit_id: str, games_before_ad: int = 3
    ) -> None:
        if games_before_ad < 1:
            raise ValueError("games_before_ad must be at least 1")
        self.provider = provider
        self.ad_unit_id = ad_unit_id
        self.games_before_ad = games_before_ad
        self.games_since_last_ad = 0
        self.is_loading = False
        self.interstitial: Optional[Interstitial] = None
        # The ad currently on screen, waiting for dismissal
        self.presenting: Optional[Interstitial] = None

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(GameConcluded, self._on_game_concluded)

    def start(self) -> None:
        logger.info("Starting interstitial ads for unit %s", self.ad_unit_id)
        self.load()

    def load(self) -> None:
        if self.is_loading:
            logger.info("Already loading an ad, skipping")
            return
        if self.interstitial is not None:
            logger.info("Ad already loaded, skipping")
            return

        self.is_loading = True
        logger.info("Loading interstitial ad")
        try:
            ad = self.provider.load(self.ad_unit_id)
        except AdLoadError as exc:
            logger.error("Failed to load interstitial ad: %s", exc)
            return
        finally:
            self.is_loading = False

        self.interstitial = ad
        logger.info("Interstitial ad loaded successfully")

    def game_concluded(self) -> Optional[Interstitial]:
        """Count a finished game and show an ad once the threshold is hit."""
        if self.presenting is not None:
            # Still on screen; the counter restarts on dismissal
            logger.info("Ad still on screen, not counting game")
            return self.presenting
        self.games_since_last_ad += 1
        logger.info("Games played since last ad: %d", self.games_since_last_ad)
        if self.games_since_last_ad >= self.games_before_ad:
            return self.show()
        return None

    def show(self) -> Optional[Interstitial]:
        ad = self.interstitial
        if ad is None:
            logger.warning("Attempted to show interstitial ad but none is loaded")
            self.load()
            return None

        logger.info("Presenting interstitial ad")
        try:
            ad.present()
        except RuntimeError as exc:
            logger.error("Ad failed to present: %s", exc)
            self.presentation_failed()
            return None
        self.presenting = ad
        return ad

    def force_show(self) -> Optional[Interstitial]:
        if self.interstitial is None:
            logger.info("Force show requested but no ad loaded, loading one now")
            self.load()
            return None
        return self.show()

    def dismissed(self) -> None:
        logger.info("Ad dismissed full screen content")
        self.games_since_last_ad = 0
        self.interstitial = None
        self.presenting = None
        self.load()

    def presentation_failed(self) -> None:
        self.interstitial = None
        self.presenting = None
        self.load()

    def reset_counter(self) -> None:
        self.games_since_last_ad = 0
        logger.info("Game counter reset")

    def _on_game_concluded(self, event: GameConcluded) -> None:
        self.game_concluded()


class NullAdManager:
    """Stand-in used when ads are switched off."""

    presenting: Optional[Interstitial] = None
    games_since_last_ad = 0

    def attach(self, bus: EventBus) -> None:
        pass

    def start(self) -> None:
        pass

    def load(self) -> None:
        pass

    def game_concluded(self) -> Optional[Interstitial]:
        return None

    def show(self) -> Optional[Interstitial]:
        return None

    def force_show(self) -> Optional[Interstitial]:
        return None

    def dismissed(self) -> None:
        pass

    def presentation_failed(self) -> None:
        pass

    def reset_counter(self) -> None:
        pass


def build_ad_manager(
    settings: Settings, provider: Optional[AdProvider] = None
) -> InterstitialAdManager | NullAdManager:
    """Pick the ad manager for this process from ``settings``."""
    if not settings.ads_enabled:
        return NullAdManager()
    if provider is None:
        provider = HouseAdProvider(
            headline=settings.house_ad_headline, url=settings.house_ad_url
        )
    return InterstitialAdManager(
        provider, settings.ad_unit_id, games_before_ad=settings.games_before_ad
    )
