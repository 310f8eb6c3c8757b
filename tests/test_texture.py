"""Tests for texsample.texture: texel lookup, bilinear sampling, loading."""

import io

import numpy as np
import pytest
from PIL import Image

from texsample.color import Color
from texsample.decoder import TextureLoadError
from texsample.gamma import decode_byte
from texsample.texture import Texture, error_description


def approx_color(c, rel=1e-9, abs=1e-12):
    return pytest.approx(c.as_tuple(), rel=rel, abs=abs)


@pytest.fixture
def pixels():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(3, 5, 3), dtype=np.uint8)


@pytest.fixture
def tex(pixels):
    return Texture.from_array(pixels)


def test_constructor_validates_buffer():
    Texture(2, 1, bytes(6))
    with pytest.raises(ValueError):
        Texture(2, 2, bytes(6))
    with pytest.raises(ValueError):
        Texture(0, 1, b"")


def test_from_array_rejects_bad_shape():
    with pytest.raises(ValueError):
        Texture.from_array(np.zeros((2, 2), dtype=np.uint8))
    with pytest.raises(ValueError):
        Texture.from_array(np.zeros((2, 2, 4), dtype=np.uint8))


def test_dimensions(tex):
    assert tex.width == 5
    assert tex.height == 3
    assert len(tex.data) == 5 * 3 * 3


def test_at_decodes_texel(tex, pixels):
    r, g, b = pixels[2, 4]
    assert tex.at(4, 2) == Color(decode_byte(r), decode_byte(g), decode_byte(b))


def test_at_out_of_range(tex):
    with pytest.raises(IndexError):
        tex.at(5, 0)
    with pytest.raises(IndexError):
        tex.at(0, 3)
    with pytest.raises(IndexError):
        tex.at(-1, 0)


def test_sample_exact_at_texel_centers(tex):
    for y in range(tex.height):
        for x in range(tex.width):
            c = tex.sample(x / (tex.width - 1), y / (tex.height - 1))
            assert c.as_tuple() == approx_color(tex.at(x, y))


def test_sample_corners(tex):
    assert tex.sample(0.0, 0.0) == tex.at(0, 0)
    assert tex.sample(1.0, 1.0) == tex.at(4, 2)


def test_sample_clamps_coordinates(tex):
    assert tex.sample(-1.0, -1.0) == tex.sample(0.0, 0.0)
    assert tex.sample(2.0, 2.0) == tex.sample(1.0, 1.0)
    assert tex.sample(-3.0, 0.5) == tex.sample(0.0, 0.5)
    assert tex.sample(float("nan"), 0.0) == tex.sample(0.0, 0.0)


def test_sample_midpoint_of_two_texels():
    t = Texture(2, 1, bytes([10, 200, 30, 250, 0, 128]))
    a = t.at(0, 0)
    b = t.at(1, 0)
    assert t.sample(0.5, 0.0) == (a + b) / 2


def test_sample_right_border_replicates_last_column(tex):
    for y in range(tex.height):
        v = y / (tex.height - 1)
        assert tex.sample(1.0, v).as_tuple() == approx_color(tex.at(tex.width - 1, y))
    # between two rows of the last column: blend of those two texels only
    c = tex.sample(1.0, 0.25)
    expected = tex.at(4, 0) * 0.5 + tex.at(4, 1) * 0.5
    assert c.as_tuple() == approx_color(expected)


def test_sample_single_texel_texture():
    t = Texture(1, 1, bytes([40, 80, 120]))
    for u, v in ((0.0, 0.0), (0.3, 0.9), (1.0, 1.0), (5.0, -5.0)):
        assert t.sample(u, v) == t.at(0, 0)


def test_sample_blends_in_linear_space():
    t = Texture(2, 1, bytes([0, 0, 0, 255, 255, 255]))
    c = t.sample(0.5, 0.0)
    # linear midpoint, not gamma midpoint (byte 128 decodes to ~0.216)
    assert c.as_tuple() == approx_color(Color(0.5, 0.5, 0.5))


def test_sample_bilinear_weights():
    t = Texture(2, 2, bytes([
        0, 0, 0, 255, 0, 0,
        0, 255, 0, 0, 0, 255,
    ]))
    c = t.sample(0.25, 0.75)
    # weights: (0,0)=.1875 (1,0)=.0625 (0,1)=.5625 (1,1)=.1875
    assert c.as_tuple() == approx_color(Color(0.0625, 0.5625, 0.1875))


def test_to_linear_matches_at(tex):
    lin = tex.to_linear()
    assert lin.shape == (3, 5, 3)
    for y in range(tex.height):
        for x in range(tex.width):
            assert tuple(lin[y, x]) == tex.at(x, y).as_tuple()


def test_load_png(tmp_path, pixels):
    path = tmp_path / "tex.png"
    Image.fromarray(pixels).save(path)
    t = Texture.load(path)
    assert (t.width, t.height) == (5, 3)
    assert t.data == pixels.tobytes()


def test_load_from_bytes(pixels):
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    t = Texture.load(buf.getvalue())
    assert t.data == pixels.tobytes()


def test_load_missing_file(tmp_path):
    with pytest.raises(TextureLoadError) as excinfo:
        Texture.load(tmp_path / "missing.png")
    assert error_description(excinfo.value).startswith("error #")
    assert "missing.png" in error_description(excinfo.value)


def test_load_garbage(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"this is not an image")
    with pytest.raises(TextureLoadError) as excinfo:
        Texture.load(path)
    assert excinfo.value.__cause__ is excinfo.value.cause
    assert error_description(excinfo.value) == f"error #{excinfo.value.cause}"


def test_load_16bit_png(tmp_path):
    path = tmp_path / "deep.png"
    Image.fromarray(np.array([[32768]], dtype=np.uint16)).save(path)
    t = Texture.load(path)
    assert t.data == bytes([128, 128, 128])
    assert t.at(0, 0) == Color(decode_byte(128), decode_byte(128), decode_byte(128))
