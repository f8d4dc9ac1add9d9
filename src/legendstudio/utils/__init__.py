"""Shared helpers for Legend Studio."""
