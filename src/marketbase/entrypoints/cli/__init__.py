"""Command-line interface for MARKETBASE."""
