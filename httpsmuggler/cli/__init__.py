"""Command-line interface for the scanner."""
