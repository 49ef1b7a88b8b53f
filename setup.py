from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="clouddelta",
    version="0.1.0",
    author="CloudDelta Contributors",
    description="Lossless 2D point cloud compression with delta encoding and Huffman coding",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["clouddelta", "clouddelta.*", "bin"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "Topic :: System :: Archiving :: Compression",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=0.950",
        ],
        "benchmark": [
            "zstandard>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "clouddelta-compress=bin.compress:main",
            "clouddelta-decompress=bin.decompress:main",
        ],
    },
)
