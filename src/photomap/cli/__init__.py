"""Command line interface for photomap."""
