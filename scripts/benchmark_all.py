"""
Benchmark runner for CloudDelta point-cloud compression.

Runs the Huffman and hybrid pipelines across synthetic patterns and dataset
sizes, reporting compression ratio, average bits per delta and lossless
reconstruction, and compares against general-purpose compressors (LZMA,
ZLIB, Gzip, optionally Zstd) applied to the raw float32 bytes.
"""

import gzip
import json
import lzma
import statistics
import sys
import time
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

try:
    import zstandard as zstd
    ZSTD_AVAILABLE = True
except ImportError:
    ZSTD_AVAILABLE = False

from clouddelta.core import CloudDeltaError, check_compression, compress
from clouddelta.io import generate_dataset
from clouddelta.utils import (
    entropy_statistics,
    estimate_compressed_bits,
    load_config,
    percent_savings,
)


def compress_baseline(data: bytes, method: str) -> Tuple[bytes, float]:
    """Compress data using baseline methods and measure time."""
    start = time.perf_counter()

    if method == 'gzip':
        compressed = gzip.compress(data, compresslevel=6)
    elif method == 'zlib':
        compressed = zlib.compress(data, level=9)
    elif method == 'lzma':
        compressed = lzma.compress(data, preset=9)
    elif method == 'zstd':
        compressed = zstd.ZstdCompressor(level=3).compress(data)
    else:
        raise ValueError(f"Unknown compression method: {method}")

    elapsed = time.perf_counter() - start
    return compressed, elapsed


def calculate_statistics(values: List[float]) -> Dict[str, float]:
    """Calculate mean and standard deviation for timing measurements."""
    if len(values) < 2:
        return {'mean': values[0] if values else 0, 'std': 0, 'σ_SSR': 0}

    mean = statistics.mean(values)
    std = statistics.stdev(values)
    σ_SSR = std / mean if mean > 0 else 0

    return {'mean': mean, 'std': std, 'σ_SSR': σ_SSR}


def verify_compression(
    n: int,
    pattern: str = "squared",
    seed: int = 42,
    resolution: Optional[float] = None
) -> Dict[str, object]:
    """
    Measures theoretical and actual compression for one synthetic dataset.

    The theoretical size counts only the Huffman bitstream, the inverse
    permutations and the two initial values; the actual sizes are the real
    container lengths for both methods.
    """
    cloud = generate_dataset(n, pattern, seed=seed, resolution=resolution)
    original_bits = cloud.nbytes * 8

    try:
        start = time.perf_counter()
        huffman_data = compress(cloud, method="huffman")
        huffman_time = time.perf_counter() - start
        hybrid_data = compress(cloud, method="hybrid")
    except CloudDeltaError as e:
        tqdm.write(f"Error with {pattern} n={n}: {e}")
        return {'n': n, 'pattern': pattern, 'error': str(e), 'lossless': False}

    _, avg_bits = entropy_statistics(cloud)
    theoretical_bits = estimate_compressed_bits(cloud)

    return {
        'n': n,
        'pattern': pattern,
        'theoretical_ratio': original_bits / theoretical_bits,
        'theoretical_percent': percent_savings(original_bits, theoretical_bits),
        'huffman_ratio': cloud.nbytes / len(huffman_data),
        'hybrid_ratio': cloud.nbytes / len(hybrid_data),
        'huffman_bytes': len(huffman_data),
        'hybrid_bytes': len(hybrid_data),
        'avg_bits': avg_bits,
        'compress_time_s': huffman_time,
        'lossless': check_compression(cloud, "huffman") and check_compression(cloud, "hybrid"),
    }


def run_baseline_benchmark(
    n: int,
    pattern: str,
    seed: int,
    num_runs: int = 3,
    resolution: Optional[float] = None
) -> Dict[str, Dict]:
    """Run baseline compressors on the raw float32 bytes of one dataset."""
    cloud = generate_dataset(n, pattern, seed=seed, resolution=resolution)
    data = np.concatenate([cloud.x, cloud.y]).tobytes()

    methods = ['gzip', 'zlib', 'lzma'] + (['zstd'] if ZSTD_AVAILABLE else [])
    results = {}

    for method in methods:
        times = []
        compressed_size = None
        for _ in range(num_runs):
            compressed, elapsed = compress_baseline(data, method)
            times.append(elapsed)
            compressed_size = len(compressed)

        stats = calculate_statistics(times)
        results[method] = {
            'compressed_bytes': compressed_size,
            'ratio': len(data) / compressed_size,
            'time_s': stats['mean'],
            'σ_SSR': stats['σ_SSR']
        }

    return results


def run_benchmark_suite(
    patterns: List[str],
    sizes: List[int],
    seed: int = 42,
    num_runs: int = 3,
    resolution: Optional[float] = None,
    results_dir: Optional[Path] = None
) -> List[Dict[str, object]]:
    """Run every pattern at every size and print a summary table."""
    print("=" * 80)
    print("POINT CLOUD COMPRESSION BENCHMARK SUITE")
    print("=" * 80)
    print(f"Patterns: {', '.join(patterns)}")
    print(f"Sizes: {', '.join(f'{n:,}' for n in sizes)}")
    print(f"Resolution: {resolution if resolution is not None else 'raw float32'}")
    print(f"Baselines: gzip(6), zlib(9), lzma(9){', zstd(3)' if ZSTD_AVAILABLE else ''} - each run {num_runs}x")
    print("=" * 80)

    all_results = []
    jobs = [(pattern, n) for pattern in patterns for n in sizes]

    for pattern, n in tqdm(jobs, desc="Benchmarking"):
        result = verify_compression(n, pattern, seed=seed, resolution=resolution)
        result['baselines'] = run_baseline_benchmark(n, pattern, seed, num_runs=num_runs,
                                                     resolution=resolution)
        all_results.append(result)

    print()
    print(f"| {'Pattern':>8} | {'Size':>9} | {'Theory':>7} | {'Huffman':>7} | {'Hybrid':>7} | "
          f"{'Best base':>9} | {'Avg Bits':>8} | {'Lossless':>8} |")
    print("|" + "|".join("-" * w for w in (10, 11, 9, 9, 9, 11, 10, 10)) + "|")

    for r in all_results:
        best = max(b['ratio'] for b in r['baselines'].values())
        if 'error' in r:
            print(f"| {r['pattern']:>8} | {r['n']:>9,} | {'-':>7} | {'-':>7} | {'-':>7} | "
                  f"{best:>9.2f} | {'-':>8} | {'error':>8} |")
            continue
        print(f"| {r['pattern']:>8} | {r['n']:>9,} | {r['theoretical_ratio']:>7.2f} | "
              f"{r['huffman_ratio']:>7.2f} | {r['hybrid_ratio']:>7.2f} | {best:>9.2f} | "
              f"{r['avg_bits']:>8.2f} | {str(r['lossless']):>8} |")

    if results_dir is not None:
        results_dir.mkdir(parents=True, exist_ok=True)
        summary_file = results_dir / "compression_benchmark_summary.json"
        with open(summary_file, 'w') as f:
            json.dump(all_results, f, indent=2)
        print(f"\n✓ Summary: {summary_file}")

    failures = [r for r in all_results if not r['lossless']]
    if failures:
        print(f"\n⚠ {len(failures)} dataset(s) did not round-trip losslessly")

    return all_results


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(
        description="Benchmark CloudDelta against baseline compressors on synthetic point clouds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  # Defaults from configs/default.yaml
  python scripts/benchmark_all.py --config configs/default.yaml

  # Single pattern at larger sizes
  python scripts/benchmark_all.py --patterns sin --sizes 1000 100000
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to YAML configuration file (optional)')
    parser.add_argument('--patterns', nargs='+', default=None,
                        help='Patterns to test (default: from config)')
    parser.add_argument('--sizes', nargs='+', type=int, default=None,
                        help='Dataset sizes to test (default: from config)')
    parser.add_argument('--results-dir', type=str, default='results',
                        help='Directory for the JSON summary')

    args = parser.parse_args()

    config = load_config(args.config)['benchmark']
    results = run_benchmark_suite(
        patterns=args.patterns or config['patterns'],
        sizes=args.sizes or config['sizes'],
        seed=config['seed'],
        num_runs=config['runs'],
        resolution=config['resolution'],
        results_dir=Path(args.results_dir)
    )

    sys.exit(0 if all(r['lossless'] for r in results) else 1)
