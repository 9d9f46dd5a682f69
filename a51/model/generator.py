#!/usr/bin/env python3

# Golden model keystream runner:
# key + frame -> key setup -> 228 keystream bits -> AtoB / BtoA bursts

# examples:
#   python -m a51.model.generator
#   python -m a51.model.generator --key "12 23 45 67 89 AB CD EF" --frame 0x134
#   python -m a51.model.generator --key 0011223344556677 --frame 0 --count 16 --out ks.bin


# Notes:
# - frame numbers wider than 22 bits are accepted, only the low 22 bits are used
# - with --count N, frames frame .. frame+N-1 are generated (wrapping at 2^22)
# - --out writes raw 30-byte records (AtoB || BtoA) in frame order


import argparse
import sys
from typing import List, Optional, Tuple

from a51.model.helpers import FRAME_MASK, hex_bytes, normalize_frame, parse_key_hex
from a51.model.keystream import BURST_BITS, generate_keystream
from a51.model.selftest import KAT_FRAME, KAT_KEY

DEFAULT_KEY = KAT_KEY
DEFAULT_FRAME = KAT_FRAME


def _read_key(args: argparse.Namespace) -> bytes:
    if args.key is None:
        return DEFAULT_KEY
    try:
        return parse_key_hex(args.key)
    except ValueError as e:
        print(f"Error: --key: {e}", file=sys.stderr)
        sys.exit(2)


def frame_range(frame: int, count: int) -> List[int]:
    start = normalize_frame(frame)
    return [(start + i) & FRAME_MASK for i in range(count)]


def generate_frames(key: bytes, frames: List[int]) -> List[Tuple[int, bytes, bytes]]:
    out = []
    for fn in frames:
        atob, btoa = generate_keystream(key, fn)
        out.append((fn, atob, btoa))
    return out


def main(argv: Optional[list] = None) -> int:
    p = argparse.ArgumentParser(description="A5/1 keystream golden model")
    p.add_argument("--key", help="64-bit key as hex (spaces allowed). Default: known-answer key.")
    p.add_argument("--frame", type=lambda s: int(s, 0), default=DEFAULT_FRAME,
                   help="Frame number (22 bits used, any base: 0x134, 308, ...).")
    p.add_argument("--count", type=int, default=1,
                   help="Number of consecutive frames to generate.")
    p.add_argument("--out", help="Write raw AtoB||BtoA records (binary) to this file.")
    p.add_argument("--quiet", action="store_true", help="Don't print the keystream.")
    args = p.parse_args(argv)

    key = _read_key(args)
    if args.count < 1:
        print("Error: --count must be >= 1.", file=sys.stderr)
        return 2
    try:
        frames = frame_range(args.frame, args.count)
    except ValueError as e:
        print(f"Error: --frame: {e}", file=sys.stderr)
        return 2
    if args.frame > FRAME_MASK:
        print(f"Note: frame {args.frame:#x} exceeds 22 bits, using {frames[0]:#08x}", file=sys.stderr)

    results = generate_frames(key, frames)

    if not args.quiet:
        print(f"key: {hex_bytes(key)}")
        for fn, atob, btoa in results:
            print(f"frame {fn:#08x}")
            print(f"  AtoB ({BURST_BITS} bits): {hex_bytes(atob)}")
            print(f"  BtoA ({BURST_BITS} bits): {hex_bytes(btoa)}")

    if args.out:
        with open(args.out, "wb") as f:
            for _, atob, btoa in results:
                f.write(atob)
                f.write(btoa)
        print(f"[OK] Wrote {len(results)} records to {args.out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
