#!/usr/bin/env python3

# Known-answer self test for the A5/1 golden model
#
# key   = 12 23 45 67 89 AB CD EF
# frame = 0x134
# AtoB  = 53 4E AA 58 2F E8 15 1A B6 E1 85 5A 72 8C 00
# BtoA  = 24 FD 35 A3 5D 5F B6 52 6D 32 F9 06 DF 1A C0
#
# examples:
#   python -m a51.model.selftest

import sys
from typing import Optional, TextIO

from a51.model.helpers import first_mismatch, hamming_distance_bytes, hex_bytes
from a51.model.keystream import generate_keystream

KAT_KEY = bytes([0x12, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
KAT_FRAME = 0x134
KAT_ATOB = bytes([0x53, 0x4E, 0xAA, 0x58, 0x2F, 0xE8, 0x15,
                  0x1A, 0xB6, 0xE1, 0x85, 0x5A, 0x72, 0x8C, 0x00])
KAT_BTOA = bytes([0x24, 0xFD, 0x35, 0xA3, 0x5D, 0x5F, 0xB6,
                  0x52, 0x6D, 0x32, 0xF9, 0x06, 0xDF, 0x1A, 0xC0])


def _check(name: str, got: bytes, good: bytes, err: TextIO) -> bool:
    if got == good:
        return True
    idx = first_mismatch(got, good)
    msg = f"[FAIL] {name} array didn't match! (first diff at byte {idx}"
    if len(got) == len(good):
        msg += f", {hamming_distance_bytes(got, good)} bits differ"
    print(msg + ")", file=err)
    print(f"  got:      {hex_bytes(got)}", file=err)
    print(f"  expected: {hex_bytes(good)}", file=err)
    return False


def run_selftest(out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> bool:
    out = out or sys.stdout
    err = err or sys.stderr

    atob, btoa = generate_keystream(KAT_KEY, KAT_FRAME)

    ok = _check("AtoB", atob, KAT_ATOB, err)
    ok = _check("BtoA", btoa, KAT_BTOA, err) and ok
    if ok:
        print("Test Successful!", file=out)
    return ok


def main() -> int:
    return 0 if run_selftest() else 1


if __name__ == "__main__":
    raise SystemExit(main())
