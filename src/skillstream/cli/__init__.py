"""Command line interface for skillstream."""
