"""Tests for texsample.gamma: table shape, byte round trip, encoding thresholds."""

import math

import numpy as np
import pytest

from texsample.gamma import (
    SRGB_MIDPOINTS,
    SRGB_TO_LINEAR,
    decode_byte,
    decode_bytes,
    encode_array,
    encode_linear,
)


def _encode_by_scan(v):
    for i in range(255):
        if v < SRGB_MIDPOINTS[i]:
            return i
    return 255


def test_table_shapes_and_endpoints():
    assert SRGB_TO_LINEAR.shape == (256,)
    assert SRGB_MIDPOINTS.shape == (255,)
    assert SRGB_TO_LINEAR[0] == 0.0
    assert SRGB_TO_LINEAR[255] == 1.0
    assert np.all(np.diff(SRGB_TO_LINEAR) > 0)
    assert np.all(np.diff(SRGB_MIDPOINTS) > 0)


def test_midpoints_lie_between_entries():
    expected = (SRGB_TO_LINEAR[:-1] + SRGB_TO_LINEAR[1:]) / 2
    np.testing.assert_allclose(SRGB_MIDPOINTS, expected, rtol=1e-12, atol=0)
    assert np.all(SRGB_MIDPOINTS > SRGB_TO_LINEAR[:-1])
    assert np.all(SRGB_MIDPOINTS < SRGB_TO_LINEAR[1:])


def test_known_reference_values():
    assert decode_byte(1) == 0.000303526983548837515
    assert decode_byte(128) == 0.215860500113899261843
    assert SRGB_MIDPOINTS[0] == 0.000151763491774418758


def test_tables_are_read_only():
    with pytest.raises(ValueError):
        SRGB_TO_LINEAR[0] = 0.5
    with pytest.raises(ValueError):
        SRGB_MIDPOINTS[0] = 0.5


def test_byte_round_trip():
    for b in range(256):
        assert encode_linear(decode_byte(b)) == b


def test_encode_out_of_range():
    assert encode_linear(-1.0) == 0
    assert encode_linear(0.0) == 0
    assert encode_linear(1.0) == 255
    assert encode_linear(7.5) == 255
    assert encode_linear(math.inf) == 255
    assert encode_linear(-math.inf) == 0


def test_encode_nan_matches_scan():
    assert _encode_by_scan(math.nan) == 255
    assert encode_linear(math.nan) == 255


def test_encode_at_thresholds():
    for i in (0, 1, 10, 127, 254):
        mid = float(SRGB_MIDPOINTS[i])
        assert encode_linear(mid) == i + 1
        assert encode_linear(float(np.nextafter(mid, -np.inf))) == i


def test_binary_search_matches_linear_scan():
    for v in np.linspace(-0.05, 1.05, 1201):
        assert encode_linear(float(v)) == _encode_by_scan(float(v))


def test_decode_bytes_matches_scalar():
    buf = np.arange(256, dtype=np.uint8).reshape(16, 16)
    lin = decode_bytes(buf)
    assert lin.shape == (16, 16)
    assert lin.dtype == np.float64
    assert lin[3, 4] == decode_byte(3 * 16 + 4)


def test_encode_array_matches_scalar():
    values = np.linspace(-0.2, 1.2, 301).reshape(7, 43)
    out = encode_array(values)
    assert out.dtype == np.uint8
    assert out.shape == values.shape
    for v, b in zip(values.ravel(), out.ravel()):
        assert int(b) == encode_linear(float(v))


def test_encode_array_round_trip():
    buf = np.arange(256, dtype=np.uint8)
    np.testing.assert_array_equal(encode_array(decode_bytes(buf)), buf)


def test_decode_byte_rejects_out_of_range():
    for b in (-1, -256, 256, 1000):
        with pytest.raises(IndexError):
            decode_byte(b)
