"""Aggregation module for game results.

- engine: pure computation over result records (no I/O)
- summary: one store query plus one computation per request
"""
