# experiments.py

"""
Huffman text codec experiments: bit-count decoding vs pad-terminated decoding

Runs repeated compress/decompress round trips over synthetic text and records timing,
size and correctness for two ways of finding the end of the stream:
  - bit_count:      decompress is told how many bits are meaningful
  - pad_terminated: decompress only sees the packed text and stops when the bits run out

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 32 --exp2_max_kb 128
  python experiments.py --outdir results --runs 5 --exp1_generators uniform64,zipf64,repetitive90,english_like

Notes:
  Pure Python bit handling is slow, keep sizes in the tens/hundreds of KB.
"""

from __future__ import annotations

import argparse
import csv
import logging
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from bitbuffer import PACK_WIDTH, PACKING_ALPHABET
from frequency import parse_table
from huffman import build_huffman_tree, generate_codes
from huffman_codec import compress, compute_frequencies, decompress
from huffman_errors import HuffmanError

logger = logging.getLogger("experiments")

PIPELINES = ("bit_count", "pad_terminated")


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


# Synthetic dataset generators

def _sample(rng: random.Random, chars: str, weights: List[float], size: int) -> str:
    return "".join(rng.choices(chars, weights=weights, k=size))

def gen_uniform(size: int, alphabet: str = PACKING_ALPHABET, seed: int = 0) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice(alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = [ch for ch in PACKING_ALPHABET if ch != dominant]
    out = []
    for _ in range(size):
        if rng.random() < dom_frac:
            out.append(dominant)
        else:
            out.append(rng.choice(others))
    return "".join(out)

def gen_zipf_like(size: int, alphabet: str = PACKING_ALPHABET, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(len(alphabet))]
    return _sample(rng, alphabet, weights, size)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        ".,:\r\n"
    )
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch in "\r\n":
            weights.append(1.5)
        elif ch in ".,:":
            weights.append(1.0)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(rng, chars, weights, size)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform64": lambda size, seed: gen_uniform(size, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=PACKING_ALPHABET[:16], seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_chars: int, seed: int) -> Tuple[str, str]:
    """
    Unknown dataset names fall back to uniform64 so a typo does not abort a long run
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        logger.warning("unknown generator %r, using uniform64", name)
        return f"{name}_fallback_uniform64", gen_uniform(size_chars, seed=seed)
    return name, fn(size_chars, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    plaintext_chars: int
    run_id: int
    pipeline: str  # "bit_count" or "pad_terminated"
    unique_symbols: int

    build_tree_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_chars: int
    pad_bits: int
    bits_per_symbol: float
    compression_ratio: float  # packed bits / 8-bit plaintext bits

    correctness_ok: int  # 1 or 0


def run_one(text: str, pipeline: str) -> MetricRow:
    table = compute_frequencies(text)

    # tree + code dictionary on their own, compress/decompress rebuild them per call
    t0 = now_ns()
    tree = build_huffman_tree(parse_table(table))
    generate_codes(tree)
    t1 = now_ns()
    build_tree_ms = ns_to_ms(t1 - t0)

    t2 = now_ns()
    packed = compress(text, table)
    t3 = now_ns()
    encode_ms = ns_to_ms(t3 - t2)

    t4 = now_ns()
    try:
        if pipeline == "bit_count":
            decoded = decompress(packed, table)
        elif pipeline == "pad_terminated":
            decoded = decompress(str(packed), table) # plain str drops the bit count
        else:
            raise ValueError("pipeline must be 'bit_count' or 'pad_terminated'")
    except HuffmanError as exc:
        logger.info("round trip failed for %s: %s", pipeline, exc)
        decoded = None
    t5 = now_ns()
    decode_ms = ns_to_ms(t5 - t4)

    correctness_ok = 1 if decoded == text else 0
    return MetricRow(
        exp_name="",
        dataset_name="",
        plaintext_chars=len(text),
        run_id=0,
        pipeline=pipeline,
        unique_symbols=len(tree),
        build_tree_ms=build_tree_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_tree_ms + encode_ms + decode_ms,
        compressed_chars=len(packed),
        pad_bits=packed.pad_bits,
        bits_per_symbol=packed.bit_count / max(1, len(text)),
        compression_ratio=(len(packed) * PACK_WIDTH) / max(1, len(text) * 8),
        correctness_ok=correctness_ok,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, plaintext_chars, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.plaintext_chars, r.pipeline)
        key_to.setdefault(key, []).append(r)

    averaged = ["compression_ratio", "bits_per_symbol", "encode_ms", "decode_ms", "build_tree_ms", "total_ms"]
    summary_fields = ["exp_name", "dataset_name", "plaintext_chars", "pipeline", "n_runs"]
    for name in averaged:
        summary_fields += [f"{name}_mean", f"{name}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_chars, pipeline = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "plaintext_chars": size_chars,
                "pipeline": pipeline,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for name in averaged:
                m, s = mean_stdev([getattr(x, name) for x in items])
                row[f"{name}_mean"] = m
                row[f"{name}_stdev"] = s
            w.writerow(row)


# Plotting

def _line_chart(x, series: Dict[str, List[float]], xlabels, xlabel: str, ylabel: str, title: str, path: Path) -> None:
    plt.figure()
    for label, y in series.items():
        plt.plot(x, y, marker="o", label=label)
    if xlabels is not None:
        plt.xticks(x, xlabels, rotation=20, ha="right")
    if xlabel:
        plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, pipeline: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.pipeline == pipeline]
        return statistics.mean(vals) if vals else float("nan")

    _line_chart(x, {"bit_count": [mean_for(d, "bit_count", "compression_ratio") for d in datasets]},
                datasets, "", "Packed Bits / 8-bit Plaintext Bits",
                "Experiment 1: Compression Ratio by Distribution", outdir / "exp1_compression_ratio.png")

    _line_chart(x, {p: [mean_for(d, p, "decode_ms") for d in datasets] for p in PIPELINES},
                datasets, "", "Decode Time (ms)",
                "Experiment 1: Decode Time by Distribution", outdir / "exp1_decode_time.png")

    _line_chart(x, {p: [mean_for(d, p, "correctness_ok") for d in datasets] for p in PIPELINES},
                datasets, "", "Round Trip Success Rate",
                "Experiment 1: Correctness by Distribution", outdir / "exp1_correctness.png")


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.plaintext_chars for r in dist_rows))

        def mean_size(size: int, pipeline: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.plaintext_chars == size and r.pipeline == pipeline]
            return statistics.mean(vals) if vals else float("nan")

        _line_chart(sizes, {p: [mean_size(s, p, "encode_ms") for s in sizes] for p in PIPELINES},
                    None, "Plaintext Size (chars)", "Encode Time (ms)",
                    f"Experiment 2: Encode Time vs Size ({dist})", outdir / f"exp2_encode_time_{dist}.png")

        _line_chart(sizes, {p: [mean_size(s, p, "decode_ms") for s in sizes] for p in PIPELINES},
                    None, "Plaintext Size (chars)", "Decode Time (ms)",
                    f"Experiment 2: Decode Time vs Size ({dist})", outdir / f"exp2_decode_time_{dist}.png")

        _line_chart(sizes, {"bit_count": [mean_size(s, "bit_count", "bits_per_symbol") for s in sizes]},
                    None, "Plaintext Size (chars)", "Bits per Symbol",
                    f"Experiment 2: Code Length vs Size ({dist})", outdir / f"exp2_bits_per_symbol_{dist}.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=64, help="Experiment 1 fixed plaintext size in K chars")
    ap.add_argument("--exp1_generators", type=str, default="uniform64,zipf64,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=1, help="Experiment 2 min size in K chars (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max size in K chars (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform64,zipf64,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, text = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                for pipeline in PIPELINES:
                    row = run_one(text, pipeline)
                    row.exp_name = "exp1_distribution"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        min_chars = max(1, args.exp2_min_kb) * 1024
        max_chars = max(1, args.exp2_max_kb) * 1024

        sizes: List[int] = []
        s = min_chars
        while s <= max_chars:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size_chars in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, text = generate_dataset(gen_name, size_chars, args.seed + 10_000 + size_chars + run_id)
                    for pipeline in PIPELINES:
                        row = run_one(text, pipeline)
                        row.exp_name = "exp2_size_scaling"
                        row.dataset_name = dataset_name
                        row.run_id = run_id
                        rows.append(row)

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    # Plots
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    for pipeline in PIPELINES:
        picked = [r for r in rows if r.pipeline == pipeline]
        ok_rate = sum(r.correctness_ok for r in picked) / max(1, len(picked))
        print(f"Round trip success rate ({pipeline}): {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
