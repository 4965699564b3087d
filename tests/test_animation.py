"""Tests for the winning line animation plan."""

import pytest

from tictactoe.animation import GRID_FADE_ALPHA, WinningLineStyle


def test_layers_back_to_front():
    layers = WinningLineStyle().layers()
    assert [layer.name for layer in layers] == ["outer-glow", "inner-glow", "core"]
    assert [layer.width for layer in layers] == [24, 16, 8]
    assert [layer.delay for layer in layers] == [0.0, 0.05, 0.1]


def test_draw_alpha_eases_in_and_saturates():
    style = WinningLineStyle(draw_duration=0.5)
    assert style.draw_alpha(0.0) == 0.0
    assert style.draw_alpha(0.05, delay=0.1) == 0.0
    # p = 0.5 -> eased 0.875 -> alpha capped at 1.0
    assert style.draw_alpha(0.25) == 1.0
    # p = 0.1 -> eased 0.271 -> alpha 0.4065
    assert style.draw_alpha(0.05) == pytest.approx(0.4065)
    assert style.draw_alpha(5.0) == 1.0


def test_pulse_waits_for_draw_then_cycles():
    style = WinningLineStyle(draw_duration=0.5, pulse_duration=0.8)
    assert style.pulse_start == pytest.approx(0.6)
    assert style.pulse_scale(0.3) == 1.0
    assert style.pulse_scale(0.6 + 0.8) == pytest.approx(1.05)
    assert style.pulse_scale(0.6 + 1.6) == pytest.approx(1.0)
    assert 1.0 < style.pulse_scale(0.6 + 0.4) < 1.05


def test_plan_is_serialisable():
    plan = WinningLineStyle().plan((10.0, 20.0), (30.0, 40.0))
    assert plan["start"] == [10.0, 20.0]
    assert plan["end"] == [30.0, 40.0]
    assert len(plan["layers"]) == 3
    assert plan["layers"][2]["color"] == "#ffffff"
    assert plan["fadeInDuration"] == pytest.approx(0.15)
    assert plan["gridFade"]["alpha"] == GRID_FADE_ALPHA


def test_layer_keyframes_follow_eased_saturating_curve():
    style = WinningLineStyle()
    for layer in style.layers():
        frames = style.layer_keyframes(layer)
        assert frames[0] == {"offset": 0.0, "opacity": 0.0}
        assert frames[-1]["offset"] == 1.0
        assert frames[-1]["opacity"] == 1.0
        opacities = [f["opacity"] for f in frames]
        assert opacities == sorted(opacities)
        # Saturates well before the end of the draw-in
        assert any(f["opacity"] == 1.0 and f["offset"] < 0.5 for f in frames)


def test_fade_in_shapes_the_start_of_the_draw():
    style = WinningLineStyle(draw_duration=0.5)
    # Halfway through the 0.15 s fade the ease-in holds opacity at 0.25
    assert style.fade_alpha(0.075) == pytest.approx(0.25)
    assert style.layer_alpha(0.075) == pytest.approx(0.25)
    assert style.layer_alpha(0.3) == 1.0


def test_pulse_keyframes_cover_one_cycle():
    style = WinningLineStyle()
    frames = style.pulse_keyframes()
    assert frames[0]["scale"] == 1.0
    assert frames[len(frames) // 2]["scale"] == pytest.approx(1.05)
    assert frames[-1]["scale"] == pytest.approx(1.0)
    assert max(f["scale"] for f in frames) <= 1.05


def test_plan_carries_keyframes():
    plan = WinningLineStyle().plan((0.0, 0.0), (1.0, 1.0))
    assert all(layer["keyframes"] for layer in plan["layers"])
    assert plan["pulse"]["keyframes"][0]["offset"] == 0.0
