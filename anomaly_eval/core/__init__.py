"""Ports shared between evaluation and adapters."""
