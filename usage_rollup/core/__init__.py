"""
Core modules for Usage Rollup.

This package contains record parsing, per-day reduction and
windowed aggregation of usage logs.
"""
