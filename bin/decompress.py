"""
CLI entry point for CloudDelta decompression.

Usage:
    python -m bin.decompress input.cdz -o output.npz
"""

import argparse
import sys
from pathlib import Path

try:
    from clouddelta.core import decompress_file
except ImportError as e:
    print(f"Error: Required packages not installed: {e}")
    print("Install with: pip install -r requirements.txt")
    sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Decompress CloudDelta-encoded point clouds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decompress to a NumPy archive with x and y arrays
  python -m bin.decompress cloud.cdz -o cloud.npz

  # Decompress to CSV
  python -m bin.decompress cloud.cdz -o cloud.csv

Note: The container records its own encoding method, so no options are
needed to decompress it.
"""
    )

    parser.add_argument(
        "input",
        type=str,
        help="Path to compressed .cdz file"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        required=True,
        help="Path to output point cloud (.npy, .npz or .csv)"
    )

    args = parser.parse_args()

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}")
        sys.exit(1)

    print("=" * 70)
    print("CloudDelta Decompression")
    print("=" * 70)
    print(f"Input: {input_path}")
    print(f"Output: {args.output}")
    print()

    try:
        stats = decompress_file(
            input_path=str(input_path),
            output_path=args.output
        )

        print("=" * 70)
        print("Decompression Complete")
        print("=" * 70)
        print(f"Points:             {stats['points']:,}")
        print(f"Compressed size:    {stats['compressed_size']:,} bytes")
        print(f"Decompressed size:  {stats['decompressed_size']:,} bytes")
        print(f"Compression ratio:  {stats['ratio']:.4f} ({stats['factor']:.2f}x)")
        print(f"Time:               {stats['decompress_time']:.3f} seconds")
        print(f"Throughput:         {stats['throughput_mbps']:.2f} MB/s")
        print()
        print(f"Decompressed file saved to: {args.output}")

    except Exception as e:
        print(f"\nError during decompression: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
