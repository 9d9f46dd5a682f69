import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from a51.model.clocking import CipherState
from a51.model.key_setup import (KEY_BITS, MIX_CYCLES, SETUP_CYCLES, Phase, frame_bits, key_bits,
                                 key_setup, load_frame, load_key, mix)
from a51.model.keystream import (BURST_BITS, BURST_BYTES, KEYSTREAM_BITS, generate_keystream,
                                 keystream_bits, run, split_bursts, trace)
from a51.model.registers import R1, R2, R3
from a51.model.selftest import KAT_ATOB, KAT_BTOA, KAT_FRAME, KAT_KEY


def _oracle_a51(key: bytes, frame: int):
    # straight-line reference: plain ints, no shared code with the model
    masks = (0x07FFFF, 0x3FFFFF, 0x7FFFFF)
    taps = (0x072000, 0x300000, 0x700080)
    mids = (0x000100, 0x000400, 0x000400)
    outs = (0x040000, 0x200000, 0x400000)
    r = [0, 0, 0]

    def step(i):
        fb = bin(r[i] & taps[i]).count("1") & 1
        r[i] = ((r[i] << 1) & masks[i]) | fb

    def maj_clock():
        m = [1 if r[i] & mids[i] else 0 for i in range(3)]
        maj = 1 if sum(m) >= 2 else 0
        for i in range(3):
            if m[i] == maj:
                step(i)

    for i in range(64):
        for j in range(3):
            step(j)
        bit = (key[i // 8] >> (i % 8)) & 1
        for j in range(3):
            r[j] ^= bit
    for i in range(22):
        for j in range(3):
            step(j)
        bit = (frame >> i) & 1
        for j in range(3):
            r[j] ^= bit
    for _ in range(100):
        maj_clock()

    bursts = []
    for _ in range(2):
        buf = bytearray(15)
        for i in range(114):
            maj_clock()
            bit = 0
            for j in range(3):
                bit ^= 1 if r[j] & outs[j] else 0
            buf[i // 8] |= bit << (7 - i % 8)
        bursts.append(bytes(buf))
    return bursts[0], bursts[1]


def test_known_answer():
    atob, btoa = generate_keystream(KAT_KEY, KAT_FRAME)
    assert atob == bytes.fromhex("534EAA582FE8151AB6E1855A728C00")
    assert btoa == bytes.fromhex("24FD35A35D5FB6526D32F906DF1AC0")
    assert (atob, btoa) == (KAT_ATOB, KAT_BTOA)


def test_matches_oracle_on_random_inputs():
    rng = random.Random(0xA51)
    for _ in range(40):
        key = bytes(rng.getrandbits(8) for _ in range(8))
        frame = rng.getrandbits(22)
        assert generate_keystream(key, frame) == _oracle_a51(key, frame)


def test_deterministic():
    assert generate_keystream(KAT_KEY, KAT_FRAME) == generate_keystream(KAT_KEY, KAT_FRAME)
    key = bytes(range(8))
    assert generate_keystream(key, 7) == generate_keystream(bytearray(key), 7)


def test_parallel_calls_share_nothing():
    frames = list(range(32))
    serial = [generate_keystream(KAT_KEY, fn) for fn in frames]
    with ThreadPoolExecutor(max_workers=4) as pool:
        parallel = list(pool.map(lambda fn: generate_keystream(KAT_KEY, fn), frames))
    assert parallel == serial


def test_zero_key_zero_frame_is_all_zero():
    assert key_setup(bytes(8), 0) == CipherState(0, 0, 0)
    assert generate_keystream(bytes(8), 0) == (bytes(15), bytes(15))


def test_output_lengths_and_padding():
    rng = random.Random(5)
    for _ in range(20):
        key = bytes(rng.getrandbits(8) for _ in range(8))
        atob, btoa = generate_keystream(key, rng.getrandbits(22))
        assert len(atob) == BURST_BYTES == 15
        assert len(btoa) == BURST_BYTES
        assert atob[-1] & 0x3F == 0
        assert btoa[-1] & 0x3F == 0


def test_frame_high_bits_ignored():
    assert generate_keystream(KAT_KEY, KAT_FRAME | (1 << 22)) == (KAT_ATOB, KAT_BTOA)
    assert generate_keystream(KAT_KEY, KAT_FRAME | 0xFFC00000) == (KAT_ATOB, KAT_BTOA)


def test_invalid_inputs():
    with pytest.raises(ValueError):
        generate_keystream(KAT_KEY[:7], KAT_FRAME)
    with pytest.raises(ValueError):
        generate_keystream(KAT_KEY, -1)
    with pytest.raises(TypeError):
        generate_keystream(KAT_KEY, "0x134")


def test_key_sequence_of_ints():
    assert generate_keystream(list(KAT_KEY), KAT_FRAME) == (KAT_ATOB, KAT_BTOA)


@pytest.mark.parametrize("bit", [0, 7, 8, 31, 63])
def test_key_bit_flip_changes_keystream(bit):
    key = bytearray(KAT_KEY)
    key[bit // 8] ^= 1 << (bit % 8)
    assert generate_keystream(bytes(key), KAT_FRAME) != (KAT_ATOB, KAT_BTOA)


@pytest.mark.parametrize("bit", [0, 2, 10, 21])
def test_frame_bit_flip_changes_keystream(bit):
    assert generate_keystream(KAT_KEY, KAT_FRAME ^ (1 << bit)) != (KAT_ATOB, KAT_BTOA)


def test_loading_bit_order():
    # key bytes are read LSB first, frame bits LSB first
    assert key_bits(KAT_KEY)[:8] == [0, 1, 0, 0, 1, 0, 0, 0]        # 0x12
    assert key_bits(KAT_KEY)[56:] == [1, 1, 1, 1, 0, 1, 1, 1]       # 0xEF
    assert frame_bits(KAT_FRAME)[:10] == [0, 0, 1, 0, 1, 1, 0, 0, 1, 0]
    assert len(key_bits(KAT_KEY)) == KEY_BITS
    assert len(frame_bits(0xFFFFFFFF)) == 22
    assert frame_bits(0xFFFFFFFF) == [1] * 22


def test_load_xors_into_all_three_after_clock():
    # only the last key bit set: it lands in bit 0 of every register
    key = bytes(7) + b"\x80"
    assert load_key(CipherState(), key) == CipherState(1, 1, 1)
    # frame bits 20 and 21: the first one is shifted up once before the second lands
    assert load_frame(CipherState(), 0x200000) == CipherState(1, 1, 1)
    assert load_frame(CipherState(), 0x300000) == CipherState(3, 3, 3)


def test_key_setup_phases_chain():
    s = load_key(CipherState(), KAT_KEY)
    s = load_frame(s, KAT_FRAME)
    s = mix(s)
    assert s == key_setup(KAT_KEY, KAT_FRAME)
    assert Phase.LOAD_KEY.cycles == 64
    assert Phase.LOAD_FRAME.cycles == 22
    assert Phase.MIX.cycles == MIX_CYCLES == 100
    assert Phase.READY.cycles == 0
    assert SETUP_CYCLES == 186


def test_run_exposes_final_state():
    s = key_setup(KAT_KEY, KAT_FRAME)
    atob, btoa, end = run(s)
    assert (atob, btoa) == (KAT_ATOB, KAT_BTOA)
    bits, end_bits = keystream_bits(s)
    assert end == end_bits
    assert split_bursts(bits) == (atob, btoa)
    # continuing from the end state gives the next 228 bits
    more, _ = keystream_bits(s, 2 * KEYSTREAM_BITS)
    assert more[:KEYSTREAM_BITS] == bits
    assert keystream_bits(end)[0] == more[KEYSTREAM_BITS:]


def test_split_bursts_rejects_wrong_length():
    with pytest.raises(ValueError):
        split_bursts([0] * 100)


def test_trace_covers_every_cycle():
    rows = trace(KAT_KEY, KAT_FRAME)
    assert len(rows) == 64 + 22 + 100 + 228 == 414

    phases = [row.phase for row in rows]
    assert phases.count("load_key") == 64
    assert phases.count("load_frame") == 22
    assert phases.count("mix") == 100
    assert phases.count("atob") == BURST_BITS
    assert phases.count("btoa") == BURST_BITS

    setup_rows = rows[:SETUP_CYCLES]
    assert setup_rows[-1].state == key_setup(KAT_KEY, KAT_FRAME)
    assert all(row.clocked == (True, True, True) for row in rows[:86])
    assert all(sum(row.clocked) >= 2 for row in rows[86:])
    assert all(row.out is None for row in setup_rows)

    out_bits = [row.out for row in rows[SETUP_CYCLES:]]
    assert split_bursts(out_bits) == (KAT_ATOB, KAT_BTOA)

    for row in rows:
        assert row.state.r1 <= R1.mask
        assert row.state.r2 <= R2.mask
        assert row.state.r3 <= R3.mask
