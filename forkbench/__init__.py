"""Models of fork-join runtime bookkeeping and serial divide-and-conquer benchmarks."""

__version__ = "0.1.0"