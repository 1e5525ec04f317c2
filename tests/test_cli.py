"""
Tests for the render-to-file CLI.
"""

import pytest
from PIL import Image

from tile_avatar.api.cli import build_parser, main
from tile_avatar.core.seed import derive_seed


@pytest.fixture
def watermark_file(tmp_path, watermark_png_bytes):
    path = tmp_path / "logo.png"
    path.write_bytes(watermark_png_bytes)
    return path


def test_renders_png_file(tmp_path, watermark_file, capsys):
    out = tmp_path / "out" / "avatar.png"
    code = main(["0xabc...123", "--watermark", str(watermark_file), "--out", str(out)])
    assert code == 0
    with Image.open(out) as image:
        assert image.size == (400, 400)
    printed = capsys.readouterr().out
    assert str(derive_seed("0xabc...123")) in printed
    assert str(out) in printed


def test_data_option_changes_output(tmp_path, watermark_file):
    first = tmp_path / "a.png"
    second = tmp_path / "b.png"
    main(["0xabc", "--data", "a", "--watermark", str(watermark_file), "--out", str(first)])
    main(["0xabc", "--data", "b", "--watermark", str(watermark_file), "--out", str(second)])
    assert first.read_bytes() != second.read_bytes()


def test_missing_watermark_fails_without_output(tmp_path, capsys):
    out = tmp_path / "avatar.png"
    code = main(["0xabc", "--watermark", str(tmp_path / "missing.png"), "--out", str(out)])
    assert code == 1
    assert not out.exists()
    assert "Watermark unavailable" in capsys.readouterr().err


def test_blank_address_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["  "])


def test_padded_address_passed_through():
    args = build_parser().parse_args([" 0xabc "])
    assert args.address == " 0xabc "


def test_padded_address_renders_unstripped(tmp_path, watermark_file):
    padded = tmp_path / "padded.png"
    plain = tmp_path / "plain.png"
    main([" 0xabc", "--watermark", str(watermark_file), "--out", str(padded)])
    main(["0xabc", "--watermark", str(watermark_file), "--out", str(plain)])
    assert padded.read_bytes() != plain.read_bytes()


def test_unexpected_render_error_exits_nonzero(tmp_path, monkeypatch, capsys):
    async def broken_render(address, data=None, watermark_source=None):
        raise KeyError("boom")

    monkeypatch.setattr("tile_avatar.api.cli.render_avatar", broken_render)
    out = tmp_path / "avatar.png"
    code = main(["0xabc", "--out", str(out)])
    assert code == 1
    assert not out.exists()
    err = capsys.readouterr().err
    assert "Render failed: KeyError" in err
    assert len(err.strip().splitlines()) == 1
