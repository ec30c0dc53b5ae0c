"""
Core numerical primitives and invariants.

This package contains the fixed-point decimal arithmetic engine, which is
independent of external systems (ledgers, databases, currency rules, etc.).
"""
