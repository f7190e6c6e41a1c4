"""Command line interface for apchkout."""
