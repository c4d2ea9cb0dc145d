"""Tests for the command-line entry point."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tryon_studio.__main__ import main, parse_args
from tryon_studio.errors import NoPersonDetected


@pytest.fixture
def compositor(png_bytes):
    with patch("tryon_studio.studio.CompositorClient") as client_cls:
        client = MagicMock()
        client.composite = AsyncMock(return_value=(png_bytes, "image/png"))
        client.close = AsyncMock()
        client_cls.return_value = client
        yield client


def test_defaults():
    args = parse_args(["--product-image", "shirt.jpg"])

    assert args.background == "original"
    assert args.fit == 50
    assert args.photo is None


def test_rejects_unknown_background():
    with pytest.raises(SystemExit):
        parse_args(["--product-image", "shirt.jpg", "--background", "beach"])


def test_photo_try_on_saves_result(compositor, temp_image_file, tmp_path, png_bytes):
    output = tmp_path / "out"

    code = main([
        "--photo", str(temp_image_file),
        "--product-image", str(temp_image_file),
        "--product-name", "Red Dress",
        "--background", "plain",
        "--fit", "150",
        "--output", str(output),
    ])

    assert code == 0
    saved = list(output.iterdir())
    assert len(saved) == 1
    assert saved[0].name.startswith("tryon_Red_Dress_")
    assert saved[0].read_bytes() == png_bytes

    kwargs = compositor.composite.call_args.kwargs
    assert kwargs["background_mode"].value == "plain"
    assert kwargs["fit_preference"].value == "Oversized"
    compositor.close.assert_awaited()


def test_studio_error_exit_code(compositor, temp_image_file, tmp_path, capsys):
    compositor.composite.side_effect = NoPersonDetected()

    code = main([
        "--photo", str(temp_image_file),
        "--product-image", str(temp_image_file),
        "--output", str(tmp_path),
    ])

    assert code == 2
    assert "couldn't find a person" in capsys.readouterr().err
