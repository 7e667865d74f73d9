"""Tests for QR renderer selection."""

import sys

import pytest

from sticker_dream.trust import QRCodeRenderer, UnavailableQRRenderer, select_qr_renderer


def test_unavailable_renderer_falls_back_to_url():
    """Test plain URL output without a QR library."""
    renderer = UnavailableQRRenderer()

    assert not renderer.available
    assert renderer.to_data_url("https://10.0.0.2:3000") is None
    assert "URL: https://10.0.0.2:3000" in renderer.to_terminal("https://10.0.0.2:3000")


def test_selects_unavailable_without_qrcode(monkeypatch):
    """Test selection when qrcode cannot be imported."""
    monkeypatch.setitem(sys.modules, "qrcode", None)

    assert isinstance(select_qr_renderer(), UnavailableQRRenderer)


def test_qrcode_renderer():
    """Test data URL and terminal output with qrcode installed."""
    pytest.importorskip("qrcode")
    pytest.importorskip("PIL")

    renderer = select_qr_renderer()

    assert isinstance(renderer, QRCodeRenderer)
    assert renderer.to_data_url("https://10.0.0.2:3000").startswith("data:image/png;base64,")
    assert renderer.to_terminal("https://10.0.0.2:3000").strip()
