"""
Benchmark suite for jsonwriter serialization performance.

Compares jsonwriter against established JSON encoders:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Measures writing speed and memory usage across different data shapes.
"""
