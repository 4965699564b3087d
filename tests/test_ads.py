"""Tests for interstitial ad frequency and lifecycle."""

import logging

import pytest

from tictactoe.ads import (
    AdLoadError,
    HouseAdProvider,
    Interstitial,
    InterstitialAdManager,
    NullAdManager,
    build_ad_manager,
)
from tictactoe.config import Settings
from tictactoe.events import GameController


class ScriptedProvider:
    """Provider that fails a set number of times before serving ads."""

    def __init__(self, failures=0):
        self.failures = failures
        self.loads = 0

    def load(self, ad_unit_id):
        self.loads += 1
        if self.failures:
            self.failures -= 1
            raise AdLoadError("no fill")
        return Interstitial(ad_unit_id=ad_unit_id, headline="Ad", url="https://ads.test/")


def make_manager(failures=0, games_before_ad=3):
    provider = ScriptedProvider(failures)
    manager = InterstitialAdManager(provider, "unit-1", games_before_ad=games_before_ad)
    return provider, manager


def test_start_preloads_one_ad():
    provider, manager = make_manager()
    manager.start()
    manager.load()
    assert provider.loads == 1
    assert manager.interstitial is not None
    assert manager.is_loading is False


def test_ad_shown_every_third_game():
    _, manager = make_manager()
    manager.start()
    assert manager.game_concluded() is None
    assert manager.game_concluded() is None
    ad = manager.game_concluded()
    assert ad is not None
    assert ad.presented
    assert manager.presenting is ad


def test_dismissal_resets_counter_and_preloads_next():
    provider, manager = make_manager(games_before_ad=1)
    manager.start()
    first = manager.game_concluded()
    manager.dismissed()
    assert manager.games_since_last_ad == 0
    assert manager.presenting is None
    assert provider.loads == 2
    assert manager.interstitial is not None
    assert manager.interstitial is not first


def test_missing_ad_logs_and_reloads(caplog):
    provider, manager = make_manager(failures=1, games_before_ad=1)
    with caplog.at_level(logging.INFO, logger="tictactoe.ads"):
        manager.start()
        assert manager.interstitial is None
        assert manager.game_concluded() is None
    assert provider.loads == 2
    assert manager.interstitial is not None
    assert "Failed to load interstitial ad" in caplog.text
    assert "none is loaded" in caplog.text
    # Counter keeps running until an ad is actually dismissed
    assert manager.game_concluded() is not None
    assert manager.games_since_last_ad == 2


def test_force_show_and_presentation_failure():
    provider, manager = make_manager(failures=1)
    assert manager.force_show() is None
    assert manager.interstitial is None
    assert manager.force_show() is None
    assert manager.interstitial is not None
    ad = manager.force_show()
    assert ad is not None

    # Presenting the same ad twice fails and triggers a fresh load
    assert manager.interstitial is ad
    assert manager.show() is None
    assert manager.presenting is None
    assert manager.interstitial is not None
    assert manager.interstitial is not ad
    assert provider.loads == 3


def test_reset_counter():
    _, manager = make_manager()
    manager.game_concluded()
    manager.game_concluded()
    manager.reset_counter()
    assert manager.games_since_last_ad == 0


def test_threshold_must_be_positive():
    with pytest.raises(ValueError):
        InterstitialAdManager(ScriptedProvider(), "unit", games_before_ad=0)


def test_manager_counts_concluded_games_from_controller():
    _, manager = make_manager(games_before_ad=2)
    manager.start()
    controller = GameController()
    manager.attach(controller.bus)
    for _ in range(2):
        for row, col in [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]:
            controller.play(row, col)
        controller.reset()
    assert manager.presenting is not None


def test_house_provider_requires_url():
    provider = HouseAdProvider(headline="Play more", url="")
    with pytest.raises(AdLoadError):
        provider.load("unit")
    ad = HouseAdProvider(headline="Play more", url="https://x.test/").load("unit")
    assert ad.to_dict()["headline"] == "Play more"


def test_build_selects_null_manager_when_disabled():
    manager = build_ad_manager(Settings(ads_enabled=False))
    assert isinstance(manager, NullAdManager)
    manager.start()
    assert manager.game_concluded() is None
    assert manager.presenting is None


def test_build_selects_real_manager_when_enabled():
    manager = build_ad_manager(Settings(ads_enabled=True, games_before_ad=5))
    assert isinstance(manager, InterstitialAdManager)
    assert manager.games_before_ad == 5
    assert isinstance(manager.provider, HouseAdProvider)


def test_game_concluded_while_ad_on_screen_keeps_it(caplog):
    provider, manager = make_manager(games_before_ad=1)
    manager.start()
    shown = manager.game_concluded()
    assert shown is not None

    with caplog.at_level(logging.INFO, logger="tictactoe.ads"):
        again = manager.game_concluded()
    assert again is shown
    assert manager.presenting is shown
    assert manager.games_since_last_ad == 1
    assert provider.loads == 1
    assert "failed to present" not in caplog.text

    manager.dismissed()
    assert manager.games_since_last_ad == 0
    assert manager.presenting is None
