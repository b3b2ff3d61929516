"""
Integration tests for Courtside.

This package drives complete event flows through the HTTP API against the
in-memory store: seeding, score entry, bracket advancement and the rating,
stats and chemistry updates that follow each completed match.
"""
