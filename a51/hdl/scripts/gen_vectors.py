#!/usr/bin/env python3
"""Generate stage-by-stage reference vectors from the A5/1 golden model.

These vectors seed HDL testbenches for the keystream core. We can export the
key setup result (register state after the 100 mixing clocks), the keystream
bursts, and a full cycle-by-cycle register trace, for one or more frames.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable

from a51.model.clocking import CipherState
from a51.model.helpers import FRAME_BITS, FRAME_MASK, normalize_frame, parse_key_hex
from a51.model.key_setup import KEY_BITS, MIX_CYCLES, key_setup
from a51.model.keystream import BURST_BITS, run, trace
from a51.model.selftest import KAT_FRAME, KAT_KEY

STAGES = ["key_setup", "keystream", "trace"]


def _read_key(args: argparse.Namespace) -> bytes:
    if args.key is None:
        return KAT_KEY
    try:
        return parse_key_hex(args.key)
    except ValueError as e:
        print(f"Error: --key: {e}", file=sys.stderr)
        sys.exit(2)


def _state_bytes(state: CipherState) -> bytes:
    # R1 (3 bytes) || R2 (3 bytes) || R3 (3 bytes), big-endian
    return b"".join(r.to_bytes(3, "big") for r in state)


def _frame_bytes(frame: int) -> bytes:
    return frame.to_bytes(3, "big")


def _write_hex_file(path: Path, records: Iterable[bytes]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(" ".join(f"{b:02X}" for b in rec))
            f.write("\n")


def _write_trace_file(path: Path, key: bytes, frame: int) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = trace(key, frame)
    with path.open("w", encoding="utf-8") as f:
        f.write("# phase cycle r1 r2 r3 clk out\n")
        for row in rows:
            clk = "".join("1" if c else "0" for c in row.clocked)
            out = "-" if row.out is None else str(row.out)
            r1, r2, r3 = row.state
            f.write(f"{row.phase} {row.cycle} {r1:05X} {r2:06X} {r3:06X} {clk} {out}\n")
    return len(rows)


def _emit_stage(out_dir: Path, stage: str, stage_in: list, stage_out: list, meta: dict) -> None:
    stage_dir = out_dir / stage
    stage_dir.mkdir(parents=True, exist_ok=True)
    _write_hex_file(stage_dir / "input.hex", stage_in)
    _write_hex_file(stage_dir / "output.hex", stage_out)
    with (stage_dir / "metadata.json").open("w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)


def generate_vectors(args: argparse.Namespace) -> int:
    key = _read_key(args)
    if args.count < 1:
        print("Error: --count must be >= 1.", file=sys.stderr)
        return 2
    try:
        start = normalize_frame(args.frame)
    except ValueError as e:
        print(f"Error: --frame: {e}", file=sys.stderr)
        return 2
    frames = [(start + i) & FRAME_MASK for i in range(args.count)]

    states = [key_setup(key, fn) for fn in frames]
    bursts = [run(s)[:2] for s in states]

    stage_map: dict[str, tuple[list, list, dict]] = {
        "key_setup": (
            [key + _frame_bytes(fn) for fn in frames],
            [_state_bytes(s) for s in states],
            {"key_bits": KEY_BITS, "frame_bits": FRAME_BITS, "mix_cycles": MIX_CYCLES,
             "input_format": "key[8] || frame[3] (big-endian)",
             "output_format": "R1[3] || R2[3] || R3[3] (big-endian)"},
        ),
        "keystream": (
            [_state_bytes(s) for s in states],
            [atob + btoa for atob, btoa in bursts],
            {"burst_bits": BURST_BITS, "bit_order": "msb-first",
             "output_format": "AtoB[15] || BtoA[15]"},
        ),
    }

    out_dir = Path(args.out_dir)
    stages = args.stage or ["keystream"]
    for stage in stages:
        if stage == "trace":
            for fn in frames:
                path = out_dir / "trace" / f"frame_{fn:06X}.txt"
                n = _write_trace_file(path, key, fn)
                print(f"[OK] Wrote {n}-cycle trace to {path}")
            continue
        if stage not in stage_map:
            raise SystemExit(f"Unknown stage '{stage}'. Choices: {STAGES}")
        stage_in, stage_out, meta = stage_map[stage]
        _emit_stage(out_dir, stage, stage_in, stage_out, meta)
        print(f"[OK] Wrote {stage} vectors to {out_dir / stage}")

    summary = {
        "key": key.hex().upper(),
        "first_frame": frames[0],
        "count": len(frames),
        "stages": stages,
    }
    out_dir.mkdir(parents=True, exist_ok=True)
    with (out_dir / "vector_summary.json").open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    print(f"[OK] Summary written to {out_dir / 'vector_summary.json'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate HDL reference vectors from the A5/1 golden model")
    p.add_argument("--key", help="64-bit key as hex (spaces allowed). Default: known-answer key")
    p.add_argument("--frame", type=lambda s: int(s, 0), default=KAT_FRAME,
                   help=f"First frame number ({FRAME_BITS} bits used)")
    p.add_argument("--count", type=int, default=1, help="Number of consecutive frames")
    p.add_argument("--stage", action="append", choices=STAGES,
                   help="Which stage(s) to emit (may be specified multiple times). Default: keystream")
    p.add_argument("--out-dir", default="a51/hdl/vectors", help="Destination directory for generated files")
    return p


def main(argv: Iterable[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return generate_vectors(args)


if __name__ == "__main__":
    raise SystemExit(main())
