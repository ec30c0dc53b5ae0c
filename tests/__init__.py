"""
Test suite for the decimal arithmetic core

Contains:
- tests/unit/          : Unit tests for codec and engine modules
"""
