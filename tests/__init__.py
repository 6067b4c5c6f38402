"""
Test suite for stock-ledger

Contains:
- tests/unit/ : Unit tests for the domain, price source, executor, store and CLI
"""
