"""BER/FER sweep of the BP decoder on a random regular code over BPSK/AWGN.

The all-zero codeword is transmitted; for a linear code with a symmetric
channel and decoder this is representative of every codeword. The all-zero
information vector also carries a valid CRC, so CRC-aided list selection can
be exercised without an encoder.
"""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .. import config as global_config
from ..utils.seeding import seed_all
from ..ldpc import BPDecoder, SoftDecoder, construct_code, select_candidate


@dataclass
class SimulationStats:
    bits_total: int = 0
    bit_errors: int = 0
    frame_errors: int = 0
    iters_sum: float = 0.0
    frames: int = 0

    def update(self, bit_err: int, iters: float, payload_len: int) -> None:
        self.bits_total += payload_len
        self.bit_errors += bit_err
        self.iters_sum += iters
        self.frames += 1
        if bit_err > 0:
            self.frame_errors += 1

    def row(self) -> Dict[str, float]:
        ber = self.bit_errors / self.bits_total if self.bits_total > 0 else float("nan")
        fer = self.frame_errors / self.frames if self.frames > 0 else float("nan")
        avg_iters = self.iters_sum / self.frames if self.frames > 0 else 0.0
        return {
            "frames": self.frames,
            "bits_total": self.bits_total,
            "bit_errors": self.bit_errors,
            "ber": ber,
            "fer": fer,
            "avg_iters": avg_iters,
        }


def _noise_var(EbN0_dB: float, payload_bits: int, coded_bits: int) -> float:
    ebno_lin = 10 ** (EbN0_dB / 10.0)
    rate = payload_bits / coded_bits
    return 1.0 / (2.0 * ebno_lin * rate)


def _payload_bit_errors(candidate: np.ndarray, payload_len: int) -> int:
    if candidate.size < payload_len:
        raise ValueError("Candidate bits shorter than payload")
    return int(np.count_nonzero(candidate[:payload_len]))


def build_decode_fn(args: argparse.Namespace, decoder: SoftDecoder) -> Callable[[np.ndarray], np.ndarray]:
    if args.list_size > 1:
        return lambda llr: select_candidate(decoder.list_decode(llr, args.list_size), args.crc_poly)["best_bits"]
    return decoder.decode


def run_point(
    rng: np.random.Generator,
    EbN0_dB: float,
    args: argparse.Namespace,
    decoder: BPDecoder,
    decode_fn: Callable[[np.ndarray], np.ndarray],
    payload_len: int,
) -> Dict[str, float]:
    graph = decoder.graph
    stats = SimulationStats()
    noise_var = _noise_var(EbN0_dB, payload_len, graph.real_code_length())
    noise_sigma = math.sqrt(noise_var)
    symbols = np.ones(graph.code_length, dtype=np.float64)

    while stats.bit_errors < args.err_cap and stats.bits_total < args.bits_cap:
        received = symbols + rng.normal(0.0, noise_sigma, size=symbols.shape)
        llr = 2.0 * received / noise_var
        candidate = decode_fn(llr)
        iters = decoder.last_result["iters_used"] if decoder.last_result else 0
        stats.update(_payload_bit_errors(candidate, payload_len), iters, payload_len)

    row = stats.row()
    row.update(
        {
            "N": graph.code_length,
            "K": int(graph.information_bit_indexes.size),
            "K_crc": args.K_crc,
            "list_size": args.list_size,
            "rate": payload_len / graph.real_code_length(),
            "EbN0_dB": EbN0_dB,
        }
    )
    return row


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    cfg = global_config.get_config()
    parser = argparse.ArgumentParser(description="BER/FER sweep for the BP Tanner-graph decoder")
    parser.add_argument("--N", type=int, default=cfg.N, help="Code length")
    parser.add_argument("--K", type=int, default=cfg.K, help="Information bits (CRC included)")
    parser.add_argument("--dv", type=int, default=cfg.dv, help="Variable node degree")
    parser.add_argument("--dc", type=int, default=cfg.dc, help="Check node degree")
    parser.add_argument("--list_size", type=int, default=1, help="List size (1 disables list decoding)")
    parser.add_argument("--crc_poly", type=str, default=cfg.crc_poly)
    parser.add_argument("--K_crc", type=int, default=None, help="CRC bits inside K (defaults to 0, or crc_bits when listing)")
    parser.add_argument("--max_iter", type=int, default=cfg.max_iterations)
    parser.add_argument("--EbN0_lo", type=float, default=cfg.ebno_sweep[0])
    parser.add_argument("--EbN0_hi", type=float, default=cfg.ebno_sweep[1])
    parser.add_argument("--EbN0_step", type=float, default=cfg.ebno_sweep[2])
    parser.add_argument("--bits_cap", type=float, default=1e6)
    parser.add_argument("--err_cap", type=int, default=200)
    parser.add_argument("--seed", type=int, default=cfg.seed)
    parser.add_argument("--out", type=str, required=True, help="CSV output path")
    parser.add_argument("--plot", type=str, help="Optional plot path")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.list_size < 1:
        raise ValueError("--list_size must be >= 1")
    if args.K_crc is None:
        args.K_crc = cfg.crc_bits if args.list_size > 1 else 0
    if args.K_crc >= args.K:
        raise ValueError("--K_crc must be smaller than --K")
    return args


def run(args: argparse.Namespace) -> List[Dict[str, float]]:
    seed_all(args.seed)
    rng = np.random.default_rng(args.seed)

    graph = construct_code(args.N, args.K, args.dv, args.dc, rng=rng)
    decoder = BPDecoder(graph, rng=rng, max_iterations=args.max_iter)
    decode_fn = build_decode_fn(args, decoder)
    payload_len = args.K - args.K_crc

    step = args.EbN0_step if args.EbN0_step > 0 else 1.0
    EbN0_values = np.arange(args.EbN0_lo, args.EbN0_hi + 1e-12, step)
    rows: List[Dict[str, float]] = []
    for EbN0_dB in EbN0_values:
        row = run_point(rng, float(EbN0_dB), args, decoder, decode_fn, payload_len)
        print(
            f"Eb/N0={row['EbN0_dB']:.2f} dB -> BER={row['ber']:.3e}, FER={row['fer']:.3e}, "
            f"avg iters={row['avg_iters']:.1f} ({row['frames']} frames)"
        )
        rows.append(row)
    return rows


CSV_HEADER = [
    "N",
    "K",
    "K_crc",
    "list_size",
    "rate",
    "EbN0_dB",
    "frames",
    "bits_total",
    "bit_errors",
    "ber",
    "fer",
    "avg_iters",
]


def write_csv(rows: List[Dict[str, float]], path: Path) -> None:
    if not rows:
        return
    with path.open("w") as f:
        f.write(",".join(CSV_HEADER) + "\n")
        for row in rows:
            f.write(",".join(str(row[col]) for col in CSV_HEADER) + "\n")


def plot_rows(rows: List[Dict[str, float]], path: Path) -> None:
    if not rows:
        return
    rows_sorted = sorted(rows, key=lambda r: r["EbN0_dB"])
    snrs = [r["EbN0_dB"] for r in rows_sorted]
    plt.figure(figsize=(6, 4))
    for key, marker, label in (("ber", "o-", "BER"), ("fer", "s-", "FER")):
        # Zero error rates have no place on a log axis.
        points = [(snr, r[key]) for snr, r in zip(snrs, rows_sorted) if r[key] > 0]
        if not points:
            continue
        xs, ys = zip(*points)
        plt.semilogy(xs, ys, marker, label=label)
    plt.xlabel("Eb/N0 (dB)")
    plt.ylabel("Error Rate")
    plt.grid(True, which="both", ls="--", alpha=0.4)
    if plt.gca().get_legend_handles_labels()[1]:
        plt.legend()
    plt.tight_layout()
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(path, dpi=200)
    plt.close()


def main(argv: Optional[Iterable[str]] = None) -> None:
    args = parse_args(argv)
    rows = run(args)
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    write_csv(rows, out_path)
    print(f"Saved sweep table to {out_path}")
    if args.plot:
        plot_rows(rows, Path(args.plot))
        print(f"Saved sweep plot to {args.plot}")


if __name__ == "__main__":
    main()
