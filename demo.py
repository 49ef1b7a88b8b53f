"""Quick demo of point-cloud compression."""

import time

from clouddelta import check_compression, compress, uncompress
from clouddelta.io import generate_dataset
from clouddelta.utils.metrics import evaluate_compression_performance


def demo_compression(n=10000, pattern="sin", resolution=2 ** -12):
    print("=" * 70)
    print("CloudDelta Compression Demo")
    print("=" * 70)

    print(f"Generating {n:,} points with the '{pattern}' pattern...")
    cloud = generate_dataset(n, pattern, resolution=resolution)
    print(f"Raw size: {cloud.nbytes:,} bytes (float32 x and y)\n")

    for method in ("hybrid", "huffman"):
        start_time = time.time()
        compressed = compress(cloud, method=method)
        compress_time = time.time() - start_time

        start_time = time.time()
        restored = uncompress(compressed)
        decompress_time = time.time() - start_time

        metrics = evaluate_compression_performance(cloud, compressed)
        print(f"[{method}]")
        print(f"  Compressed size:  {metrics['compressed_size_bytes']:,} bytes")
        print(f"  Ratio:            {metrics['compression_ratio']:.4f} ({metrics['compression_factor']:.2f}x)")
        print(f"  Bits per value:   {metrics['effective_bits_per_value']:.2f}")
        print(f"  Compress time:    {compress_time:.3f}s")
        print(f"  Decompress time:  {decompress_time:.3f}s")
        print(f"  Restored points:  {restored.n:,}")
        print(f"  Lossless:         {check_compression(cloud, method=method)}\n")

    print("=" * 70)
    print("To compress your own data:")
    print("  python -m bin.compress cloud.npz -o cloud.cdz")
    print("  python -m bin.decompress cloud.cdz -o restored.npz")
    print("=" * 70)


if __name__ == "__main__":
    demo_compression()
