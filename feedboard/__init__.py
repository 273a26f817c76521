"""
State and persistence engine for the feedback board.

This package keeps the normalized in-memory store (companies, boards,
feedback and comments), the closed set of transitions that mutate it, the
read-only queries the UI runs against it, and the adapter that mirrors the
store into a key-value backend.
"""
