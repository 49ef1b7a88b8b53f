"""
Generate synthetic point-cloud datasets for compression benchmarking.

Writes one ``.npz`` file (arrays ``x`` and ``y``) per pattern and size,
plus a JSON manifest describing them.
"""

import argparse
import json
from pathlib import Path

from clouddelta.io import PATTERNS, generate_dataset, save_point_cloud


def generate_all_test_datasets(output_dir: str = "data", sizes=(1000, 100000), seed: int = 42,
                               resolution=2 ** -12):
    """Generates every pattern at every size and writes a manifest."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    print("=" * 70)
    print("Generating Synthetic Point Clouds")
    print("=" * 70)

    manifest = {'seed': seed, 'resolution': resolution, 'datasets': {}}
    jobs = [(pattern, n) for pattern in PATTERNS for n in sizes]

    for i, (pattern, n) in enumerate(jobs, start=1):
        print(f"\n[{i}/{len(jobs)}] {pattern} pattern, n={n:,}...")
        cloud = generate_dataset(n, pattern, seed=seed, resolution=resolution)
        file_path = save_point_cloud(output_path / f"{pattern}_{n}.npz", cloud)

        manifest['datasets'][file_path.stem] = {
            'path': str(file_path),
            'pattern': pattern,
            'points': n,
            'size_bytes': file_path.stat().st_size
        }
        print(f"  Written to {file_path}")

    manifest_file = output_path / "manifest.json"
    with open(manifest_file, 'w') as f:
        json.dump(manifest, f, indent=2)

    print("\n" + "=" * 70)
    print("Dataset Generation Complete")
    print("=" * 70)
    print(f"\nManifest written to: {manifest_file}")
    print("\nTo compress one of these datasets:")
    print(f"  python -m bin.compress {output_path / 'sin_1000.npz'} -o sin_1000.cdz")

    return manifest


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate synthetic point clouds for compression")
    parser.add_argument('--output-dir', type=str, default='data',
                        help='Output directory for generated datasets')
    parser.add_argument('--sizes', nargs='+', type=int, default=[1000, 100000],
                        help='Number of points per dataset')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed')
    parser.add_argument('--resolution', type=float, default=2 ** -12,
                        help='Grid step for generated values (default: 2^-12)')

    args = parser.parse_args()

    generate_all_test_datasets(output_dir=args.output_dir, sizes=args.sizes, seed=args.seed,
                               resolution=args.resolution)
