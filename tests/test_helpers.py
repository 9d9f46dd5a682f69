import random

import numpy as np
import pytest

from a51.model.helpers import (FRAME_MASK, bits_array, bytes_from_bits, first_mismatch,
                               hamming_distance_bytes, hex_bytes,
                               normalize_frame, normalize_key, parity, parse_key_hex)


def test_parity_identities():
    assert parity(0) == 0
    assert parity(1) == 1
    assert parity(0b11) == 0
    assert parity(0xFFFFFFFF) == 0
    assert parity(0x80000000) == 1
    assert parity(0x7FFFFFFF) == 1


def test_parity_matches_popcount():
    rng = random.Random(1234)
    for _ in range(2000):
        x = rng.getrandbits(32)
        assert parity(x) == bin(x).count("1") & 1


def test_parity_single_bits():
    for i in range(32):
        assert parity(1 << i) == 1
        assert parity((1 << i) | 1) == (0 if i else 1)


def test_parity_wider_than_32_bits():
    assert parity(1 << 32) == 1
    assert parity((1 << 32) | 1) == 0
    assert parity(1 << 100) == 1
    assert parity((1 << 64) - 1) == 0
    rng = random.Random(4321)
    for _ in range(500):
        x = rng.getrandbits(rng.randint(33, 200))
        assert parity(x) == bin(x).count("1") & 1


def test_parity_rejects_negative():
    with pytest.raises(ValueError):
        parity(-1)


def test_bytes_from_bits_msb_first():
    assert bytes_from_bits([1, 1]) == b"\xC0"
    assert bytes_from_bits([0] * 8 + [1]) == b"\x00\x80"


def test_bits_array_truncates():
    arr = bits_array(b"\xFF\xFF", 10)
    assert arr.dtype == np.uint8
    assert arr.tolist() == [1] * 10


def test_normalize_key_accepts_bytes_and_ints():
    assert normalize_key(bytearray(8)) == bytes(8)
    assert normalize_key([1, 2, 3, 4, 5, 6, 7, 8]) == bytes([1, 2, 3, 4, 5, 6, 7, 8])


@pytest.mark.parametrize("key", [b"", bytes(7), bytes(9), [0] * 16])
def test_normalize_key_rejects_wrong_length(key):
    with pytest.raises(ValueError, match="8 bytes"):
        normalize_key(key)


def test_normalize_key_rejects_out_of_range_bytes():
    with pytest.raises(ValueError):
        normalize_key([0, 0, 0, 0, 0, 0, 0, 256])
    with pytest.raises(ValueError):
        normalize_key([-1, 0, 0, 0, 0, 0, 0, 0])


def test_normalize_frame_masks_high_bits():
    assert normalize_frame(0x134) == 0x134
    assert normalize_frame(FRAME_MASK) == FRAME_MASK
    assert normalize_frame(1 << 22) == 0
    assert normalize_frame(0xFFC00134) == 0x134
    assert normalize_frame(np.uint32(0x134)) == 0x134


def test_normalize_frame_rejects_bad_values():
    with pytest.raises(ValueError):
        normalize_frame(-1)
    with pytest.raises(TypeError):
        normalize_frame(1.5)
    with pytest.raises(TypeError):
        normalize_frame(True)


def test_parse_key_hex():
    key = bytes([0x12, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
    assert parse_key_hex("12 23 45 67 89 AB CD EF") == key
    assert parse_key_hex("0x1223456789abcdef") == key
    with pytest.raises(ValueError):
        parse_key_hex("1223")
    with pytest.raises(ValueError):
        parse_key_hex("zz23456789abcdef")


def test_hex_formatting():
    assert hex_bytes(b"\x00\xAB") == "00 AB"


def test_hamming_and_first_mismatch():
    assert hamming_distance_bytes(b"\x00\xFF", b"\x01\x0F") == 5
    with pytest.raises(ValueError):
        hamming_distance_bytes(b"\x00", b"")
    assert first_mismatch(b"abc", b"abc") == -1
    assert first_mismatch(b"abc", b"abd") == 2
    assert first_mismatch(b"ab", b"abc") == 2


@pytest.mark.parametrize("key", ["abcdefgh", [0.0] * 8, [None] * 8, [True] * 8, 12345678])
def test_normalize_key_rejects_non_byte_values(key):
    with pytest.raises(ValueError):
        normalize_key(key)
