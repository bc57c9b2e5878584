"""
Tests for the shared drawing helpers (off-screen surfaces only).
"""

import pytest

from gui import base_gui
from gui.base_gui import BASE_CONFIG, _blend, get_gradient_block


@pytest.fixture(autouse=True)
def fresh_cache(monkeypatch):
    monkeypatch.setattr(base_gui, "_block_cache", {})


def test_blend():
    assert _blend((0, 0, 0), (100, 200, 50), 0.5) == (50, 100, 25)
    assert _blend((10, 10, 10), (90, 90, 90), 0) == (10, 10, 10)
    assert _blend((10, 10, 10), (90, 90, 90), 1) == (90, 90, 90)


def test_gradient_block_runs_from_shaded_color_to_highlight():
    block = get_gradient_block((30, 30), (100, 0, 0))
    assert block.get_size() == (30, 30)
    # Border width 1: the face spans (1, 1) to (28, 28)
    assert tuple(block.get_at((1, 1))) == (80, 0, 0, 255)
    assert tuple(block.get_at((28, 28))) == (192, 176, 176, 255)
    assert tuple(block.get_at((15, 0))) == BASE_CONFIG["STYLE"]["BLOCK_BORDER"] + (255,)
    # Rounded corner stays transparent
    assert block.get_at((0, 0)).a == 0


def test_gradient_block_is_cached_per_size_and_color():
    first = get_gradient_block([10, 10], (100, 0, 0))
    assert get_gradient_block((10, 10), [100, 0, 0]) is first
    assert get_gradient_block((10, 10), (0, 100, 0)) is not first
    assert get_gradient_block((12, 12), (100, 0, 0)) is not first


def test_gradient_block_follows_style(monkeypatch):
    style = dict(BASE_CONFIG["STYLE"], BORDER_WIDTH=2, BLOCK_BORDER=(0, 0, 255))
    monkeypatch.setitem(BASE_CONFIG, "STYLE", style)
    block = get_gradient_block((30, 30), (100, 0, 0))
    assert tuple(block.get_at((15, 1))) == (0, 0, 255, 255)
    assert tuple(block.get_at((2, 2))) == (80, 0, 0, 255)
