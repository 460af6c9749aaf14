"""Integrations with external package ecosystems."""
