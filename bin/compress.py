"""Compress point-cloud files with CloudDelta."""

import argparse
import sys
from pathlib import Path

try:
    from clouddelta.core import check_compression, compress_file
    from clouddelta.io import load_point_cloud
    from clouddelta.utils import load_config
except ImportError as e:
    print(f"Error: Required packages not installed: {e}")
    print("Install with: pip install -r requirements.txt")
    sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Compress a 2D point cloud using CloudDelta",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Huffman compression (default)
  python -m bin.compress cloud.npz -o cloud.cdz

  # Fixed-width hybrid mode
  python -m bin.compress cloud.csv -o cloud.cdz --method hybrid

  # Compress and verify the round trip
  python -m bin.compress cloud.npy -o cloud.cdz --verify
"""
    )

    parser.add_argument(
        "input",
        type=str,
        help="Path to input point cloud (.npy, .npz or .csv)"
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        required=True,
        help="Path to output compressed file (.cdz)"
    )
    parser.add_argument(
        "--method",
        type=str,
        choices=["huffman", "hybrid"],
        default=None,
        help="Delta encoding method (default: from config, else huffman)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (optional)"
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Round-trip the input and confirm lossless reconstruction"
    )

    args = parser.parse_args()

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}")
        sys.exit(1)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    method = args.method or config['compression']['method']
    verify = args.verify or config['compression']['verify']

    print("=" * 70)
    print("CloudDelta Compression")
    print("=" * 70)
    print(f"Input: {input_path}")
    print(f"Output: {args.output}")
    print(f"Method: {method}")
    if args.config:
        print(f"Config: {args.config}")
    print()

    try:
        stats = compress_file(
            input_path=str(input_path),
            output_path=args.output,
            method=method
        )

        print("=" * 70)
        print("Compression Complete")
        print("=" * 70)
        print(f"Points:            {stats['points']:,}")
        print(f"Original size:     {stats['original_size']:,} bytes")
        print(f"Compressed size:   {stats['compressed_size']:,} bytes")
        print(f"Compression ratio: {stats['ratio']:.4f} ({stats['factor']:.2f}x)")
        print(f"Space savings:     {stats['savings_pct']:.2f}%")
        print(f"Time:              {stats['compress_time']:.3f} seconds")
        print(f"Throughput:        {stats['throughput_mbps']:.2f} MB/s")

        if verify:
            lossless = check_compression(load_point_cloud(input_path), method=method)
            print(f"Lossless:          {lossless}")
            if not lossless:
                print("\nError: round trip did not reproduce the input")
                sys.exit(1)

        print()
        print(f"Compressed file saved to: {args.output}")

    except Exception as e:
        print(f"\nError during compression: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
