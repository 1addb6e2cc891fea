"""Evaluator helper modules for the treelox runtime."""

__all__ = [
    "common",
    "expr",
    "helpers",
    "objects",
]
