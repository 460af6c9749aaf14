"""Shared helpers used across the scanner, cache and CLI modules."""
