#!/usr/bin/env python3
"""
Visualization tool for the A5/1 golden model
Generates separate figures for key/frame sensitivity, bit balance and clocking
"""

import argparse
import sys
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np

from a51.model.analysis import (avalanche_matrix, bit_balance, clock_counts,
                                keystream_bit_array, sensitivity_report)
from a51.model.generator import DEFAULT_FRAME, DEFAULT_KEY
from a51.model.helpers import FRAME_MASK, hex_bytes, parse_key_hex
from a51.model.key_setup import KEY_BITS, key_setup
from a51.model.keystream import BURST_BITS, KEYSTREAM_BITS, run


def plot_keystream_bits(ax, bits: np.ndarray, title: str):
    """Plot the 228 keystream bits with the burst boundary"""
    ax.step(range(len(bits)), bits, where='post', linewidth=0.8)
    ax.axvline(BURST_BITS, color='r', linestyle='--', linewidth=0.8, label='AtoB | BtoA')
    ax.set_xlabel('Keystream bit index')
    ax.set_ylabel('Bit value')
    ax.set_ylim(-0.1, 1.1)
    ax.set_title(title)
    ax.legend(loc='lower right')
    ax.grid(True, alpha=0.3)

    ones = int(bits.sum())
    ax.text(0.98, 0.98, f'Ones: {ones}/{len(bits)}',
            transform=ax.transAxes, ha='right', va='top',
            bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))


def plot_avalanche(ax, diffs: np.ndarray, title: str):
    """Heat map of changed keystream bits per flipped input bit"""
    ax.imshow(diffs, aspect='auto', interpolation='nearest', cmap='Greys')
    ax.axhline(KEY_BITS - 0.5, color='r', linewidth=0.8)
    ax.set_xlabel('Keystream bit index')
    ax.set_ylabel('Flipped input bit (key 0-63, frame 64-85)')
    ax.set_title(title)


def plot_flip_distance(ax, diffs: np.ndarray, title: str):
    distances = diffs.sum(axis=1)
    colors = ['steelblue'] * KEY_BITS + ['darkorange'] * (len(distances) - KEY_BITS)
    ax.bar(range(len(distances)), distances, color=colors)
    ax.axhline(KEYSTREAM_BITS / 2, color='k', linestyle='--', linewidth=0.8)
    ax.set_xlabel('Flipped input bit')
    ax.set_ylabel('Hamming distance (bits)')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)


def plot_bit_balance(ax, balance: np.ndarray, frames: int, title: str):
    ax.plot(balance, linewidth=0.8)
    ax.axhline(0.5, color='k', linestyle='--', linewidth=0.8)
    ax.set_xlabel('Keystream bit index')
    ax.set_ylabel('P(bit = 1)')
    ax.set_ylim(0, 1)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.text(0.98, 0.02, f'{frames} frames, mean={balance.mean():.3f}',
            transform=ax.transAxes, ha='right', va='bottom',
            bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))


def plot_clock_rate(ax, counts: np.ndarray, cycles: int, title: str):
    rates = counts / float(cycles)
    ax.bar(['R1', 'R2', 'R3'], rates, color=['steelblue', 'seagreen', 'indianred'])
    ax.axhline(0.75, color='k', linestyle='--', linewidth=0.8, label='expected 3/4')
    ax.set_ylim(0, 1)
    ax.set_ylabel('Fraction of cycles clocked')
    ax.set_title(title)
    ax.legend(loc='lower right')
    for i, r in enumerate(rates):
        ax.text(i, r + 0.02, f'{r:.3f}', ha='center')


def create_keystream_figure(key: bytes, frame: int):
    state = key_setup(key, frame)
    atob, btoa, _ = run(state)
    bits = keystream_bit_array(atob, btoa)
    counts = clock_counts(state)

    fig, axes = plt.subplots(2, 1, figsize=(12, 7))
    plot_keystream_bits(axes[0], bits, f'Keystream, frame {frame:#08x}')
    plot_clock_rate(axes[1], counts, KEYSTREAM_BITS, 'Register clock rate (majority rule)')
    fig.suptitle(f'A5/1 keystream, key {hex_bytes(key)}', fontsize=14, fontweight='bold')
    fig.tight_layout(rect=(0, 0, 1, 0.96))
    return fig


def create_sensitivity_figure(key: bytes, frame: int):
    diffs = avalanche_matrix(key, frame)
    report = sensitivity_report(key, frame, diffs)

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    plot_avalanche(axes[0], diffs, 'Changed keystream bits per flipped input bit')
    plot_flip_distance(axes[1], diffs, 'Hamming distance per flipped input bit')
    fig.suptitle(f"Key/frame sensitivity (mean flip fraction {report['mean_flip_fraction']:.3f})",
                 fontsize=14, fontweight='bold')
    fig.tight_layout(rect=(0, 0, 1, 0.95))
    return fig, report


def create_balance_figure(key: bytes, frame: int, count: int):
    frames = [(frame + i) & FRAME_MASK for i in range(count)]
    balance = bit_balance(key, frames)
    fig, ax = plt.subplots(figsize=(12, 4))
    plot_bit_balance(ax, balance, count, 'Keystream bit balance over consecutive frames')
    fig.tight_layout()
    return fig


def generate_visualizations(key: bytes, frame: int, frames: int = 256,
                            save_prefix: Optional[str] = None, dpi: int = 150,
                            show: bool = True) -> Dict[str, float]:
    figures = {}
    figures['1_keystream'] = create_keystream_figure(key, frame)
    figures['2_sensitivity'], report = create_sensitivity_figure(key, frame)
    figures['3_balance'] = create_balance_figure(key, frame, frames)

    if save_prefix:
        for name, fig in figures.items():
            filename = f"{save_prefix}_{name}.png"
            fig.savefig(filename, dpi=dpi, bbox_inches="tight")
            print(f"[OK] Saved {filename}")

    if show:
        plt.show()
    else:
        for fig in figures.values():
            plt.close(fig)
    return report


def main(argv: Optional[list] = None) -> int:
    p = argparse.ArgumentParser(description="Visualize A5/1 keystream statistics")
    p.add_argument("--key", help="64-bit key as hex (spaces allowed).")
    p.add_argument("--frame", type=lambda s: int(s, 0), default=DEFAULT_FRAME,
                   help="Frame number (22 bits used).")
    p.add_argument("--frames", type=int, default=256,
                   help="Number of consecutive frames for the bit balance plot.")
    p.add_argument("--save", help="Save figures to files with this prefix (e.g., 'a51' -> 'a51_1_keystream.png').")
    p.add_argument("--dpi", type=int, default=150, help="DPI for saved figures.")
    p.add_argument("--no-show", action="store_true", help="Don't open figure windows.")
    args = p.parse_args(argv)

    if args.key is None:
        key = DEFAULT_KEY
    else:
        try:
            key = parse_key_hex(args.key)
        except ValueError as e:
            print(f"Error: --key: {e}", file=sys.stderr)
            return 2
    if args.frame < 0 or args.frames < 1:
        print("Error: --frame must be >= 0 and --frames >= 1.", file=sys.stderr)
        return 2

    report = generate_visualizations(key, args.frame, args.frames,
                                     save_prefix=args.save, dpi=args.dpi,
                                     show=not args.no_show)
    for k, v in report.items():
        print(f"{k:>22}: {v}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
