"""Command line interface for Legend Studio."""
